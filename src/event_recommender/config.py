"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
Pipeline components never read the global ``settings`` directly: they receive small
frozen config objects (``EnhancementConfig``, ``TextRankConfig``, ``RankingConfig``)
built from it with ``from_settings``.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # LLM provider configuration
    llm_provider: str = "gemini"  # "gemini" | "ollama" | "openai" | "deepseek" | "openrouter"
    llm_model: str = "gemini-2.0-flash"
    llm_api_key: str = ""  # Optional for Ollama, required for cloud providers
    llm_api_base_url: str = "http://localhost:11434"  # Ollama default
    llm_temperature: float = 0.2
    llm_max_tokens: int = 1024

    # Semantic enhancement
    enable_ai_enhancement: bool = True
    max_retries: int = 3
    timeout_ms: int = 8000
    max_keyphrases: int = 10
    min_score: float = 0.3
    llm_max_phrases: int = 8  # Upper bound requested from the model
    prompt_max_text_length: int = 2000
    dedup_token_boundary: bool = False

    # Result cache
    cache_enabled: bool = True
    cache_ttl_hours: float = 24.0

    # Lexical extraction (TextRank)
    lexical_use_spacy: bool = False
    spacy_model_name: str = "ja_core_news_sm"
    textrank_window: int = 2
    textrank_damping: float = 0.85
    textrank_max_iterations: int = 30
    textrank_tolerance: float = 1e-4
    textrank_max_candidates: int = 20
    textrank_max_ngram: int = 3
    min_token_length: int = 2
    key_sentence_max: int = 5
    key_sentence_min_length: int = 10

    # Bulk extraction (caller-level rate limiting)
    batch_delay_seconds: float = 1.0

    # Relevance ranking
    embedding_backend: str = "sentence-transformers"  # "sentence-transformers" | "openai"
    embedding_model_name: str = "paraphrase-multilingual-mpnet-base-v2"
    openai_embedding_model: str = "text-embedding-3-small"
    embedding_api_key: str = ""  # Falls back to llm_api_key
    embedding_api_base_url: str = "https://api.openai.com/v1"
    ranking_similarity_threshold: float = 0.35
    ranking_top_n: int = 5
    ranking_fuse_method: str = "weighted"  # "weighted" | "rrf" | "hybrid"
    ranking_rrf_k: int = 60
    ranking_hybrid_lambda: float = 0.5
    ranking_llm_review_enabled: bool = False
    ranking_llm_review_top_k: int = 10

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()


class EnhancementConfig(BaseModel):
    """Options threaded through the enhancer, reconciler and pipeline."""

    model_config = {"frozen": True}

    max_retries: int = Field(default=3, ge=1)
    timeout_ms: int = Field(default=8000, gt=0)
    max_keyphrases: int = Field(default=10, ge=1)
    min_score: float = Field(default=0.3, ge=0.0, le=1.0)
    cache_enabled: bool = True
    cache_ttl_hours: float = Field(default=24.0, gt=0.0)
    llm_max_phrases: int = Field(default=8, ge=1)
    prompt_max_text_length: int = Field(default=2000, ge=1)
    dedup_token_boundary: bool = False

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "EnhancementConfig":
        s = s or settings
        return cls(
            max_retries=s.max_retries,
            timeout_ms=s.timeout_ms,
            max_keyphrases=s.max_keyphrases,
            min_score=s.min_score,
            cache_enabled=s.cache_enabled,
            cache_ttl_hours=s.cache_ttl_hours,
            llm_max_phrases=s.llm_max_phrases,
            prompt_max_text_length=s.prompt_max_text_length,
            dedup_token_boundary=s.dedup_token_boundary,
        )


class TextRankConfig(BaseModel):
    """Options for the lexical (graph-based) extractor."""

    model_config = {"frozen": True}

    window: int = Field(default=2, ge=1)
    damping: float = Field(default=0.85, gt=0.0, lt=1.0)
    max_iterations: int = Field(default=30, ge=1)
    tolerance: float = Field(default=1e-4, gt=0.0)
    max_candidates: int = Field(default=20, ge=1)
    max_ngram: int = Field(default=3, ge=1)
    min_token_length: int = Field(default=2, ge=1)
    use_spacy: bool = False
    spacy_model_name: str = "ja_core_news_sm"
    max_sentences: int = Field(default=5, ge=1)
    min_sentence_length: int = Field(default=10, ge=0)

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "TextRankConfig":
        s = s or settings
        return cls(
            window=s.textrank_window,
            damping=s.textrank_damping,
            max_iterations=s.textrank_max_iterations,
            tolerance=s.textrank_tolerance,
            max_candidates=s.textrank_max_candidates,
            max_ngram=s.textrank_max_ngram,
            min_token_length=s.min_token_length,
            use_spacy=s.lexical_use_spacy,
            spacy_model_name=s.spacy_model_name,
            max_sentences=s.key_sentence_max,
            min_sentence_length=s.key_sentence_min_length,
        )


FuseMethod = Literal["weighted", "rrf", "hybrid"]


class RankingConfig(BaseModel):
    """Options for the relevance ranker."""

    model_config = {"frozen": True}

    similarity_threshold: float = Field(default=0.35, ge=0.0, le=1.0)
    top_n: int = Field(default=5, ge=1)
    fuse_method: FuseMethod = "weighted"
    rrf_k: int = Field(default=60, ge=0)
    hybrid_lambda: float = Field(default=0.5, ge=0.0, le=1.0)
    llm_review_enabled: bool = False
    llm_review_top_k: int = Field(default=10, ge=1)
    timeout_ms: int = Field(default=8000, gt=0)

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "RankingConfig":
        s = s or settings
        return cls(
            similarity_threshold=s.ranking_similarity_threshold,
            top_n=s.ranking_top_n,
            fuse_method=s.ranking_fuse_method,
            rrf_k=s.ranking_rrf_k,
            hybrid_lambda=s.ranking_hybrid_lambda,
            llm_review_enabled=s.ranking_llm_review_enabled,
            llm_review_top_k=s.ranking_llm_review_top_k,
            timeout_ms=s.timeout_ms,
        )
