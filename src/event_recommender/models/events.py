"""
Data models for event relevance ranking.

``EventKeyData`` is the per-event projection produced at ingestion time;
``RecommendedEvent`` is the ranker output for one (tag, event) pair.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .keyphrases import EnhancedPhrase


class EventKeyData(BaseModel):
    """Event reduced to its extracted key phrases and key sentences."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    detail: str = ""
    key_phrases: List[str] = Field(default_factory=list, alias="keyPhrases")
    key_sentences: List[str] = Field(default_factory=list, alias="keySentences")

    @field_validator("key_phrases", mode="before")
    @classmethod
    def project_phrases(cls, v: Any) -> List[str]:
        """Accept stored EnhancedPhrase objects/dicts as well as plain strings."""
        if v is None:
            return []
        if isinstance(v, str) or not isinstance(v, (list, tuple)):
            raise ValueError("key phrases must be a list")
        phrases = []
        for item in v:
            phrase = item
            if isinstance(item, EnhancedPhrase):
                phrase = item.phrase
            elif isinstance(item, dict):
                phrase = item.get("phrase")
            if not isinstance(phrase, str):
                raise ValueError(
                    f"key phrase must be a string or an object with a 'phrase' string, got {item!r}"
                )
            phrases.append(phrase)
        return phrases

    @field_validator("key_sentences", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class RecommendedEvent(BaseModel):
    """One ranked event with a short justification."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    relevance_score: float = Field(alias="relevanceScore")
    relevance_reason: str = Field(alias="relevanceReason")


class TagRecommendations(BaseModel):
    """Recommendations for a single interest tag."""

    tag: str
    recommendations: List[RecommendedEvent] = Field(default_factory=list)
    message: Optional[str] = None


class QueryRecommendations(BaseModel):
    """Recommendations for a free-text query."""

    query: str
    recommendations: List[RecommendedEvent] = Field(default_factory=list)
    message: Optional[str] = None
