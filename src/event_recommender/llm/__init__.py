"""
LLM transport shared by keyphrase enhancement and ranking review.
"""

from .llm_client import (
    LLMClient,
    LLMResponse,
    LLMTimeoutError,
    OllamaClient,
    OpenAICompatibleClient,
    call_with_timeout,
    create_llm_client,
    create_llm_client_from_model_string,
    parse_model_string,
)
from .retry import RetryExhaustedError, RetryPolicy, exponential_backoff

__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMTimeoutError",
    "OllamaClient",
    "OpenAICompatibleClient",
    "call_with_timeout",
    "create_llm_client",
    "create_llm_client_from_model_string",
    "parse_model_string",
    "RetryExhaustedError",
    "RetryPolicy",
    "exponential_backoff",
]
