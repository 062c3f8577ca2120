"""
Shared service instances for API routes.

Built once per process from settings; tests replace them through
``app.dependency_overrides``.
"""

from functools import lru_cache

from ..config import RankingConfig, settings
from ..enhancement.pipeline import KeyphrasePipeline, build_pipeline
from ..llm.llm_client import create_llm_client
from ..ranking.embeddings import create_embedding_backend
from ..ranking.ranker import RelevanceRanker


@lru_cache(maxsize=1)
def get_pipeline() -> KeyphrasePipeline:
    """Process-wide extraction pipeline (owns the in-memory result cache)."""
    return build_pipeline(settings)


@lru_cache(maxsize=1)
def get_ranker() -> RelevanceRanker:
    """Process-wide relevance ranker."""
    llm_client = None
    if settings.ranking_llm_review_enabled:
        llm_client = create_llm_client(config=settings)

    return RelevanceRanker(
        embedding_backend=create_embedding_backend(settings),
        config=RankingConfig.from_settings(settings),
        llm_client=llm_client,
    )
