"""
Data models for keyphrase extraction.

Lexical candidates come out of the TextRank stage, enhanced phrases out of the
reconciliation step. Field aliases follow the camelCase vocabulary used by the
event service that stores these phrases.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """Source text (event title + description) keyphrases are derived from."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Event identifier assigned by the event service")
    text: str = Field(description="UTF-8 source text")


class CandidatePhrase(BaseModel):
    """
    A phrase produced by the lexical extractor.

    ``score`` is a relative TextRank weight, not bounded to [0, 1].
    """

    phrase: str = Field(description="Candidate phrase as it appears in the text")
    score: float = Field(description="Relative importance weight", ge=0.0)
    rank: int = Field(description="0-based position in the extractor ordering", ge=0)


class EnhancedPhrase(BaseModel):
    """
    A phrase after reconciliation.

    ``ai_enhanced`` is True when the phrase came from the semantic enhancer and
    False when it is a lexical fallback.
    """

    model_config = ConfigDict(populate_by_name=True)

    phrase: str = Field(description="Final keyphrase")
    score: float = Field(description="Normalized score", ge=0.0, le=1.0)
    confidence: float = Field(description="Confidence in the phrase", ge=0.1, le=1.0)
    ai_enhanced: bool = Field(alias="aiEnhanced", description="Origin: LLM (True) or TextRank (False)")
    original_rank: Optional[int] = Field(
        default=None,
        alias="originalRank",
        description="Position in the source ordering (LLM reply or lexical rank)",
        ge=0,
    )


class KeyphraseExtractionResult(BaseModel):
    """
    Complete result of running the extraction pipeline over one document.

    Includes the final keyphrases, the lexical candidates they were reconciled
    with, and processing metadata.
    """

    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId", description="Reference to source RawDocument")
    keyphrases: List[EnhancedPhrase] = Field(default_factory=list)
    lexical_candidates: List[CandidatePhrase] = Field(
        default_factory=list, alias="lexicalCandidates"
    )

    # Processing metadata
    ai_enhanced: bool = Field(
        default=False,
        alias="aiEnhanced",
        description="Whether any AI-enhanced phrase made it into the result",
    )
    cache_hit: bool = Field(default=False, alias="cacheHit")
    ai_attempts: int = Field(default=0, alias="aiAttempts", ge=0)
    processing_time_ms: float = Field(default=0.0, alias="processingTimeMs", ge=0.0)
    textrank_version: str = Field(alias="textrankVersion")
    prompt_version: str = Field(alias="promptVersion")
