"""
Text embedding backends for relevance ranking.

The default backend runs a multilingual sentence-transformers model locally;
the OpenAI backend calls the embeddings API (text-embedding-3-small).
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence

import numpy as np
import structlog
from openai import OpenAI
from sentence_transformers import SentenceTransformer

from event_recommender.config import Settings, settings


logger = structlog.get_logger(__name__)

# Model version for reproducibility
DEFAULT_EMBEDDING_MODEL = "paraphrase-multilingual-mpnet-base-v2"

# Singleton model instances (lazy-loaded, keyed by model name)
_sentence_models: Dict[str, SentenceTransformer] = {}


def get_sentence_model(model_name: str = DEFAULT_EMBEDDING_MODEL) -> SentenceTransformer:
    """
    Get or initialize a sentence-transformers model (singleton pattern).

    Model is loaded once and cached for performance (~420MB download on first use).
    """
    if model_name not in _sentence_models:
        logger.info("loading_embedding_model", model=model_name)
        _sentence_models[model_name] = SentenceTransformer(model_name)
    return _sentence_models[model_name]


class EmbeddingBackend(ABC):
    """Turns a batch of texts into a (len(texts), dim) float matrix."""

    name = "unknown"

    @abstractmethod
    def embed(self, texts: Sequence[str]) -> np.ndarray:
        """
        Embed texts in one batch.

        Raises:
            Exception: On model or transport failure
        """


class SentenceTransformerBackend(EmbeddingBackend):
    """Local multilingual embeddings via sentence-transformers."""

    name = "sentence-transformers"

    def __init__(self, model_name: str = DEFAULT_EMBEDDING_MODEL):
        self.model_name = model_name

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=float)
        model = get_sentence_model(self.model_name)
        vectors = model.encode(list(texts), convert_to_numpy=True, show_progress_bar=False)
        return np.asarray(vectors, dtype=float)


class OpenAIEmbeddingBackend(EmbeddingBackend):
    """Embeddings from the OpenAI API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
    ):
        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        if not texts:
            return np.zeros((0, 0), dtype=float)
        response = self.client.embeddings.create(model=self.model, input=list(texts))
        ordered = sorted(response.data, key=lambda item: item.index)
        return np.asarray([item.embedding for item in ordered], dtype=float)


def cosine_similarities(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of ``query`` against each row of ``matrix``.

    Zero vectors have similarity 0.

    Examples:
        >>> cosine_similarities(np.array([1.0, 0.0]), np.array([[1.0, 0.0], [0.0, 0.0]])).tolist()
        [1.0, 0.0]
    """
    if matrix.size == 0:
        return np.zeros(matrix.shape[0], dtype=float)

    query_norm = np.linalg.norm(query)
    row_norms = np.linalg.norm(matrix, axis=1)
    denom = row_norms * query_norm
    dots = matrix @ query
    return np.divide(dots, denom, out=np.zeros_like(dots, dtype=float), where=denom > 0)


def create_embedding_backend(config: Optional[Settings] = None) -> EmbeddingBackend:
    """
    Factory function to create the configured embedding backend.

    Raises:
        ValueError: If backend is unknown or the OpenAI key is missing
    """
    config = config or settings
    backend = config.embedding_backend

    if backend == "sentence-transformers":
        return SentenceTransformerBackend(model_name=config.embedding_model_name)

    if backend == "openai":
        api_key = config.embedding_api_key or config.llm_api_key
        if not api_key:
            raise ValueError("OpenAI API key required (set EMBEDDING_API_KEY env var)")
        return OpenAIEmbeddingBackend(
            api_key=api_key,
            model=config.openai_embedding_model,
            base_url=config.embedding_api_base_url,
            timeout_seconds=config.timeout_ms / 1000.0,
        )

    raise ValueError(
        f"Unknown embedding backend: {backend}. Supported: sentence-transformers, openai"
    )
