"""
Global pytest fixtures and configuration for test suite.

This module provides reusable fixtures for:
- HTTP clients
- Mock settings/configuration
- Fake LLM transport, embedding backend and clock
- Sample event data
"""

import json
import os
from typing import AsyncGenerator, Callable, List, Optional, Sequence

import numpy as np
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from event_recommender.api.app import app
from event_recommender.config import Settings
from event_recommender.llm.llm_client import LLMClient, LLMResponse
from event_recommender.models.events import EventKeyData
from event_recommender.ranking.embeddings import EmbeddingBackend


# ============================================================================
# FAKES
# ============================================================================

class FakeLLMClient(LLMClient):
    """
    Scripted LLM transport.

    Each call consumes the next scripted item: a string is returned as the
    reply text, an exception instance is raised, a callable is invoked.
    """

    provider = "fake"

    def __init__(self, replies: Sequence = ()):
        super().__init__(model="fake-model")
        self.replies = list(replies)
        self.prompts: List[str] = []

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        self.prompts.append(prompt)
        if not self.replies:
            raise RuntimeError("No scripted reply left")
        item = self.replies.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            item = item()
        return LLMResponse(text=item, model=self.model, provider=self.provider)

    @property
    def call_count(self) -> int:
        return len(self.prompts)


class FakeEmbeddingBackend(EmbeddingBackend):
    """
    Bag-of-terms embeddings over a fixed vocabulary.

    Each dimension counts case-insensitive occurrences of one vocabulary term,
    so similarity is driven by shared technical terms.
    """

    name = "fake"

    VOCABULARY = [
        "react", "next.js", "typescript", "python", "機械学習",
        "aws", "go", "フロントエンド", "データ分析", "docker",
    ]

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls: List[List[str]] = []

    def embed(self, texts):
        self.calls.append(list(texts))
        if self.error is not None:
            raise self.error
        return np.array(
            [[float(text.lower().count(term)) for term in self.VOCABULARY] for text in texts]
        )


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def enhancement_reply(*phrases) -> str:
    """Build a model reply wrapping (phrase, score) pairs in chatter."""
    payload = {
        "enhanced_keyphrases": [
            {"phrase": phrase, "score": score, "reason": "技術キーワード"}
            for phrase, score in phrases
        ]
    }
    return "以下が結果です。\n```json\n" + json.dumps(payload, ensure_ascii=False) + "\n```"


# ============================================================================
# FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing FastAPI endpoints.

    Yields:
        AsyncClient instance
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_settings() -> Settings:
    """
    Create mock settings for testing with safe defaults.

    Returns:
        Settings instance with test configuration
    """
    return Settings(
        llm_provider="ollama",
        llm_model="qwen2.5:7b",
        log_level="INFO",
        log_json=False,  # Easier to read in tests
        enable_ai_enhancement=False,
    )


@pytest.fixture
def fake_llm() -> Callable[..., FakeLLMClient]:
    """Factory for scripted LLM clients."""
    return FakeLLMClient


@pytest.fixture
def make_reply() -> Callable[..., str]:
    """Builder for enhancement replies: make_reply(("React", 0.9), ...)."""
    return enhancement_reply


@pytest.fixture
def fake_embeddings() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend()


@pytest.fixture
def failing_embeddings() -> FakeEmbeddingBackend:
    return FakeEmbeddingBackend(error=ConnectionError("embedding service unavailable"))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_sleep() -> List[float]:
    """Recorded sleep calls; pass ``no_sleep.append`` as the sleep function."""
    return []


@pytest.fixture
def sample_events() -> List[EventKeyData]:
    """Pre-filtered events reduced to key phrases and key sentences."""
    return [
        EventKeyData(
            id="evt-react",
            title="React/Next.js ハンズオン",
            key_phrases=["React", "Next.js", "フロントエンド"],
            key_sentences=["ReactとNext.jsでフロントエンドアプリを作ります。"],
        ),
        EventKeyData(
            id="evt-python",
            title="Pythonで始める機械学習",
            key_phrases=["Python", "機械学習", "データ分析"],
            key_sentences=["Pythonで機械学習モデルを作成します。"],
        ),
        EventKeyData(
            id="evt-aws",
            title="AWS入門",
            key_phrases=["AWS", "Docker"],
            key_sentences=["AWSとDockerでデプロイを体験します。"],
        ),
    ]


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables before each test.

    This prevents test pollution from env var changes.
    """
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Configuration for pytest-asyncio
def pytest_configure(config):
    """
    Configure pytest with custom markers and settings.
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (API, end-to-end)"
    )
    config.addinivalue_line(
        "markers", "slow: Slow tests that may take longer to run"
    )
