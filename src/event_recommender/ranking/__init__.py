"""
Relevance ranking of events against interest tags and queries.
"""

from .embeddings import (
    EmbeddingBackend,
    OpenAIEmbeddingBackend,
    SentenceTransformerBackend,
    cosine_similarities,
    create_embedding_backend,
)
from .fusion import fuse_rankings, rank_by_similarity
from .ranker import (
    NO_EVENTS_MESSAGE,
    NO_QUERY_MATCH_MESSAGE,
    NO_TAGS_MESSAGE,
    InvalidRecommendationRequest,
    RankingError,
    RelevanceRanker,
    build_query,
)

__all__ = [
    "EmbeddingBackend",
    "OpenAIEmbeddingBackend",
    "SentenceTransformerBackend",
    "cosine_similarities",
    "create_embedding_backend",
    "fuse_rankings",
    "rank_by_similarity",
    "NO_EVENTS_MESSAGE",
    "NO_QUERY_MATCH_MESSAGE",
    "NO_TAGS_MESSAGE",
    "InvalidRecommendationRequest",
    "RankingError",
    "RelevanceRanker",
    "build_query",
]
