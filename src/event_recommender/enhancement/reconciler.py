"""
Reconciliation of AI-enhanced phrases with lexical candidates.

AI phrases come first; lexical candidates fill the remaining capacity as
rank-scored fallbacks, skipping any phrase that overlaps an already merged one.
The merged list is filtered by the minimum score, ordered by score (stable) and
truncated.

Pure function of its inputs: the same (candidates, ai_result) pair always
yields the same ordered list.
"""

import re
from typing import List, Optional, Sequence

from event_recommender.config import EnhancementConfig
from event_recommender.models.keyphrases import CandidatePhrase, EnhancedPhrase


FALLBACK_CONFIDENCE = 0.6
FALLBACK_MIN_SCORE = 0.1
FALLBACK_SCORE_STEP = 0.1


def fallback_score(rank: int) -> float:
    """
    Rank-based score for a lexical fallback (1.0, 0.9, ... floored at 0.1).

    Examples:
        >>> [fallback_score(i) for i in (0, 2, 7, 12)]
        [1.0, 0.8, 0.3, 0.1]
    """
    return round(max(FALLBACK_MIN_SCORE, 1.0 - rank * FALLBACK_SCORE_STEP), 10)


def to_fallbacks(candidates: Sequence[CandidatePhrase]) -> List[EnhancedPhrase]:
    """Convert lexical candidates (in rank order) to fallback phrases."""
    return [
        EnhancedPhrase(
            phrase=candidate.phrase,
            score=fallback_score(index),
            confidence=FALLBACK_CONFIDENCE,
            ai_enhanced=False,
            original_rank=index,
        )
        for index, candidate in enumerate(candidates)
    ]


def contains_substring(a: str, b: str) -> bool:
    """Case-sensitive containment in either direction."""
    return a in b or b in a


def _contains_token(haystack: str, needle: str) -> bool:
    pattern = r"(?<![A-Za-z0-9])" + re.escape(needle) + r"(?![A-Za-z0-9])"
    return re.search(pattern, haystack) is not None


def contains_token(a: str, b: str) -> bool:
    """
    Containment in either direction, requiring Latin word boundaries.

    CJK text has no word boundaries and still matches as a plain substring.

    Examples:
        >>> contains_token("React", "React Hooks")
        True
        >>> contains_token("Go", "Good Practices")
        False
    """
    return _contains_token(b, a) or _contains_token(a, b)


def is_duplicate(
    phrase: str, merged: Sequence[EnhancedPhrase], token_boundary: bool = False
) -> bool:
    """Check a candidate phrase against every already merged phrase."""
    overlaps = contains_token if token_boundary else contains_substring
    return any(overlaps(existing.phrase, phrase) for existing in merged)


def merge(
    candidates: Sequence[CandidatePhrase],
    ai_result: Sequence[EnhancedPhrase],
    config: Optional[EnhancementConfig] = None,
) -> List[EnhancedPhrase]:
    """
    Merge AI-enhanced phrases with lexical fallbacks.

    Args:
        candidates: Lexical candidates in rank order
        ai_result: Enhancer output (possibly empty after retry exhaustion)
        config: Provides max_keyphrases, min_score and dedup_token_boundary

    Returns:
        At most ``max_keyphrases`` phrases, each with score >= ``min_score``,
        sorted by score desc (ties keep merge order)
    """
    if config is None:
        config = EnhancementConfig()

    merged = [phrase.model_copy() for phrase in ai_result]

    for fallback in to_fallbacks(candidates):
        if len(merged) >= config.max_keyphrases:
            break
        if is_duplicate(fallback.phrase, merged, config.dedup_token_boundary):
            continue
        merged.append(fallback)

    kept = [phrase for phrase in merged if phrase.score >= config.min_score]
    kept.sort(key=lambda p: p.score, reverse=True)
    return kept[: config.max_keyphrases]
