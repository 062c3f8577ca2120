"""
LLM client abstraction layer.

Provides a unified text-generation interface for multiple LLM providers:
- Ollama (self-hosted models: Qwen, Llama, Gemma, etc.)
- OpenAI API (GPT-4o, etc.)
- Gemini via Google's OpenAI-compatible endpoint
- DeepSeek API (OpenAI-compatible)
- OpenRouter (multiple models via unified API)

Clients perform a single call per ``generate``. Retries and timeouts are applied
by the caller (see ``retry.RetryPolicy`` and ``call_with_timeout``).
"""

import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, TypeVar

import structlog

# LLM client imports
try:
    import ollama
    OLLAMA_AVAILABLE = True
except ImportError:
    OLLAMA_AVAILABLE = False

try:
    from openai import OpenAI
    OPENAI_AVAILABLE = True
except ImportError:
    OPENAI_AVAILABLE = False

from event_recommender.config import Settings, settings


logger = structlog.get_logger(__name__)

T = TypeVar("T")

OPENAI_COMPATIBLE_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "deepseek": "https://api.deepseek.com",
    "openrouter": "https://openrouter.ai/api/v1",
}


# ============================================================================
# ERRORS
# ============================================================================

class LLMTimeoutError(TimeoutError):
    """Raised when an LLM call does not return within the allotted time."""


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class LLMResponse:
    """
    Unified LLM response structure.

    Contains the generated text and metadata about the request.
    """
    text: str

    # Metadata
    model: str
    provider: str
    tokens_input: Optional[int] = None
    tokens_output: Optional[int] = None
    tokens_total: Optional[int] = None
    latency_ms: int = 0
    finish_reason: str = "unknown"

    # Raw response for debugging
    raw_response: Optional[Any] = None


# ============================================================================
# ABSTRACT BASE CLASS
# ============================================================================

class LLMClient(ABC):
    """
    Abstract base class for LLM clients.

    All concrete implementations must provide the generate() method that
    accepts a prompt and returns the model's free-text reply.
    """

    provider = "unknown"

    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        timeout_seconds: float = 30.0,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

        self.logger = logger.bind(
            llm_client=self.__class__.__name__,
            model=model
        )

    @abstractmethod
    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        """
        Generate a completion for the prompt.

        Args:
            prompt: User instruction
            system_prompt: Optional system instructions

        Returns:
            LLMResponse with the reply text and metadata

        Raises:
            Exception: On transport or provider errors (no internal retry)
        """

    def _messages(self, prompt: str, system_prompt: Optional[str]) -> list:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages


# ============================================================================
# OLLAMA CLIENT
# ============================================================================

class OllamaClient(LLMClient):
    """
    Ollama client for self-hosted models.

    Requires Ollama running locally or accessible via base_url.
    """

    provider = "ollama"

    def __init__(
        self,
        model: str,
        base_url: str = "http://localhost:11434",
        **kwargs
    ):
        if not OLLAMA_AVAILABLE:
            raise ImportError(
                "ollama library not installed. Install with: pip install ollama"
            )

        super().__init__(model=model, **kwargs)
        self.base_url = base_url
        self.client = ollama.Client(host=base_url, timeout=self.timeout_seconds)

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        start_time = time.time()

        response = self.client.chat(
            model=self.model,
            messages=self._messages(prompt, system_prompt),
            options={
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
            }
        )

        latency_ms = int((time.time() - start_time) * 1000)
        message = response.get('message', {})

        tokens_input = response.get('prompt_eval_count')
        tokens_output = response.get('eval_count')
        tokens_total = tokens_input + tokens_output if tokens_input and tokens_output else None

        return LLMResponse(
            text=message.get('content', '') or '',
            model=self.model,
            provider=self.provider,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            tokens_total=tokens_total,
            latency_ms=latency_ms,
            finish_reason=response.get('done_reason', 'stop'),
            raw_response=response
        )


# ============================================================================
# OPENAI-COMPATIBLE CLIENT
# ============================================================================

class OpenAICompatibleClient(LLMClient):
    """
    OpenAI-compatible client for multiple providers.

    Works with:
    - OpenAI API (api.openai.com)
    - Gemini (generativelanguage.googleapis.com/v1beta/openai/)
    - DeepSeek API (api.deepseek.com)
    - OpenRouter (openrouter.ai/api/v1)
    - Any other OpenAI-compatible endpoint
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str = OPENAI_COMPATIBLE_BASE_URLS["openai"],
        provider_name: str = "openai",
        **kwargs
    ):
        if not OPENAI_AVAILABLE:
            raise ImportError(
                "openai library not installed. Install with: pip install openai"
            )

        super().__init__(model=model, **kwargs)
        self.base_url = base_url
        self.provider = provider_name

        self.client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=self.timeout_seconds,
            max_retries=0,
        )

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        start_time = time.time()

        response = self.client.chat.completions.create(
            model=self.model,
            messages=self._messages(prompt, system_prompt),
            temperature=self.temperature,
            max_tokens=self.max_tokens
        )

        latency_ms = int((time.time() - start_time) * 1000)
        choice = response.choices[0]

        usage = response.usage
        return LLMResponse(
            text=choice.message.content or "",
            model=self.model,
            provider=self.provider,
            tokens_input=usage.prompt_tokens if usage else None,
            tokens_output=usage.completion_tokens if usage else None,
            tokens_total=usage.total_tokens if usage else None,
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason or "unknown",
            raw_response=response
        )


# ============================================================================
# TIMEOUT
# ============================================================================

def call_with_timeout(func: Callable[[], T], timeout_seconds: float) -> T:
    """
    Run ``func`` on a worker thread and wait at most ``timeout_seconds``.

    On timeout the worker is abandoned, not cancelled: the underlying request
    may still complete, and its late result is discarded.

    Raises:
        LLMTimeoutError: If the call did not finish in time
        Exception: Whatever ``func`` raised
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="llm-call")
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout_seconds)
    except FuturesTimeoutError as e:
        raise LLMTimeoutError(f"LLM call timed out after {timeout_seconds:.1f}s") from e
    finally:
        executor.shutdown(wait=False)


# ============================================================================
# CLIENT FACTORY
# ============================================================================

def create_llm_client(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    config: Optional[Settings] = None,
    **override_kwargs
) -> LLMClient:
    """
    Factory function to create appropriate LLM client based on configuration.

    Priority order for configuration:
    1. Explicit parameters passed to this function
    2. Settings from config

    Args:
        provider: Provider name ("gemini", "ollama", "openai", "deepseek", "openrouter")
        model: Model name (provider-specific)
        config: Settings to read defaults from (default: global settings)
        **override_kwargs: Override any client parameters

    Returns:
        Configured LLMClient instance

    Raises:
        ValueError: If provider is unknown or an API key is missing
    """
    config = config or settings
    provider = provider or config.llm_provider
    model = model or config.llm_model

    client_params = {
        "temperature": override_kwargs.get("temperature", config.llm_temperature),
        "max_tokens": override_kwargs.get("max_tokens", config.llm_max_tokens),
        "timeout_seconds": override_kwargs.get("timeout_seconds", config.timeout_ms / 1000.0),
    }

    logger.info(
        "creating_llm_client",
        provider=provider,
        model=model,
        temperature=client_params["temperature"]
    )

    if provider == "ollama":
        return OllamaClient(
            model=model,
            base_url=override_kwargs.get("base_url", config.llm_api_base_url),
            **client_params
        )

    if provider in OPENAI_COMPATIBLE_BASE_URLS:
        api_key = override_kwargs.get("api_key", config.llm_api_key)
        if not api_key:
            raise ValueError(
                f"{provider} API key required (set LLM_API_KEY env var)"
            )

        return OpenAICompatibleClient(
            model=model,
            api_key=api_key,
            base_url=override_kwargs.get("base_url", OPENAI_COMPATIBLE_BASE_URLS[provider]),
            provider_name=provider,
            **client_params
        )

    raise ValueError(
        f"Unknown LLM provider: {provider}. "
        f"Supported: ollama, {', '.join(OPENAI_COMPATIBLE_BASE_URLS)}"
    )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def parse_model_string(model_string: str) -> Tuple[Optional[str], str]:
    """
    Parse model string in format "provider/model-name".

    Examples:
        "gemini/gemini-2.0-flash" → ("gemini", "gemini-2.0-flash")
        "ollama/qwen2.5:7b" → ("ollama", "qwen2.5:7b")
        "gpt-4o" → (None, "gpt-4o")  # No provider prefix

    Returns:
        (provider, model_name) tuple. provider is None if no prefix.
    """
    if "/" in model_string:
        provider, model_name = model_string.split("/", 1)
        return provider, model_name
    return None, model_string


def create_llm_client_from_model_string(
    model_string: str,
    config: Optional[Settings] = None,
    **override_kwargs
) -> LLMClient:
    """
    Create LLM client from model string (e.g., "ollama/qwen2.5:7b").

    If the string has no provider prefix the configured provider is used.
    """
    config = config or settings
    provider_prefix, model_name = parse_model_string(model_string)

    return create_llm_client(
        provider=provider_prefix or config.llm_provider,
        model=model_name,
        config=config,
        **override_kwargs
    )
