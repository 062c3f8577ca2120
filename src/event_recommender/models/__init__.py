# Data models for the keyphrase extraction and recommendation pipeline

from .keyphrases import (
    CandidatePhrase,
    EnhancedPhrase,
    KeyphraseExtractionResult,
    RawDocument,
)
from .events import (
    EventKeyData,
    QueryRecommendations,
    RecommendedEvent,
    TagRecommendations,
)

__all__ = [
    "RawDocument",
    "CandidatePhrase",
    "EnhancedPhrase",
    "KeyphraseExtractionResult",
    "EventKeyData",
    "RecommendedEvent",
    "TagRecommendations",
    "QueryRecommendations",
]
