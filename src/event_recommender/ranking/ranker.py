"""
Relevance ranking of events against interest tags and free-text queries.

Process per tag:
1. Embed the tag, each event's joined key phrases and joined key sentences,
   and every individual phrase/sentence, in one batch
2. Rank events separately by phrase and by sentence similarity
3. Fuse both rankings (weighted RRF by default)
4. Keep events whose mean similarity reaches the threshold, then the top N
5. Optionally let an LLM filter the survivors

Events must be pre-filtered by the caller; the ranker only scores and orders.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import structlog

from event_recommender.config import RankingConfig
from event_recommender.llm.llm_client import LLMClient
from event_recommender.models.events import (
    EventKeyData,
    QueryRecommendations,
    RecommendedEvent,
    TagRecommendations,
)
from event_recommender.ranking.embeddings import EmbeddingBackend, cosine_similarities
from event_recommender.ranking.fusion import fuse_rankings, rank_by_similarity
from event_recommender.ranking.review import review_recommendations


logger = structlog.get_logger(__name__)

NO_EVENTS_MESSAGE = "No events matched the current filters."
NO_QUERY_MATCH_MESSAGE = "No events matched your request. Try different conditions."
NO_TAGS_MESSAGE = "No interest tags configured"
QUERY_JOINER = "・"

MAX_REASON_PHRASES = 3
MAX_REASON_SENTENCE_LENGTH = 80


# ============================================================================
# ERRORS
# ============================================================================

class InvalidRecommendationRequest(ValueError):
    """Raised for requests that cannot be ranked (blank tag, no message or tags)."""


class RankingError(Exception):
    """
    Raised when the semantic comparison fails for a tag or query.

    Carries the tag/query so callers can report and retry it.
    """

    def __init__(self, detail: str, tag: Optional[str] = None, query: Optional[str] = None):
        self.detail = detail
        self.tag = tag
        self.query = query
        subject = f"tag '{tag}'" if tag is not None else f"query '{query}'"
        super().__init__(f"Ranking failed for {subject}: {detail}")


# ============================================================================
# SIMILARITY MATRIX
# ============================================================================

@dataclass
class EventSimilarity:
    """Similarities of one event to the query."""
    phrase: float
    sentence: float
    best_phrases: List[str]
    best_sentence: Optional[str]

    @property
    def mean(self) -> float:
        return (self.phrase + self.sentence) / 2.0


class _TextIndex:
    """Deduplicating text collector so each distinct text is embedded once."""

    def __init__(self):
        self.texts: List[str] = []
        self._positions: Dict[str, int] = {}

    def add(self, text: str) -> int:
        if text not in self._positions:
            self._positions[text] = len(self.texts)
            self.texts.append(text)
        return self._positions[text]


def _joined(parts: Sequence[str]) -> str:
    return " ".join(parts).strip()


def _truncate(text: str, limit: int = MAX_REASON_SENTENCE_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def build_reason(similarity: EventSimilarity, query: str) -> str:
    """
    Terse justification naming the phrases and sentence that drove the match.

    Examples:
        >>> build_reason(EventSimilarity(0.8, 0.6, ["React", "Next.js"], "Next.jsでSSRを学ぶ"), "React")
        'Matched key phrases: React, Next.js. Closest key sentence: "Next.jsでSSRを学ぶ".'
    """
    parts = []
    if similarity.best_phrases:
        parts.append(f"Matched key phrases: {', '.join(similarity.best_phrases)}.")
    if similarity.best_sentence:
        parts.append(f'Closest key sentence: "{_truncate(similarity.best_sentence)}".')
    if not parts:
        return f'Overall description is similar to "{query}".'
    return " ".join(parts)


# ============================================================================
# RANKER
# ============================================================================

class RelevanceRanker:
    """
    Scores and orders pre-filtered events against a tag or query.

    Ties in relevance score resolve to the earlier event in the input list.
    """

    def __init__(
        self,
        embedding_backend: EmbeddingBackend,
        config: Optional[RankingConfig] = None,
        llm_client: Optional[LLMClient] = None,
    ):
        """
        Initialize ranker.

        Args:
            embedding_backend: Backend used for the semantic comparison
            config: Ranking options
            llm_client: Client for the optional LLM review step
        """
        self.embedding_backend = embedding_backend
        self.config = config or RankingConfig()
        self.llm_client = llm_client
        self.logger = logger.bind(
            ranker="RelevanceRanker",
            embedding_backend=getattr(embedding_backend, "name", "unknown"),
            fuse_method=self.config.fuse_method
        )

    def compute_similarities(
        self, query: str, events: Sequence[EventKeyData]
    ) -> List[EventSimilarity]:
        """
        Compare the query with every event in one batched embedding call.

        Raises:
            Exception: Whatever the embedding backend raises
        """
        index = _TextIndex()
        query_pos = index.add(query)

        layout = []
        for ev in events:
            phrase_text = _joined(ev.key_phrases)
            sentence_text = _joined(ev.key_sentences)
            layout.append((
                index.add(phrase_text) if phrase_text else None,
                index.add(sentence_text) if sentence_text else None,
                [(p, index.add(p)) for p in ev.key_phrases if p.strip()],
                [(s, index.add(s)) for s in ev.key_sentences if s.strip()],
            ))

        vectors = np.asarray(self.embedding_backend.embed(index.texts), dtype=float)
        if vectors.shape[0] != len(index.texts):
            raise ValueError(
                f"Embedding backend returned {vectors.shape[0]} vectors for {len(index.texts)} texts"
            )
        sims = np.clip(cosine_similarities(vectors[query_pos], vectors), 0.0, None)

        results = []
        for phrase_pos, sentence_pos, phrases, sentences in layout:
            phrase_scores = sorted(
                ((float(sims[pos]), i, text) for i, (text, pos) in enumerate(phrases)),
                key=lambda item: (-item[0], item[1]),
            )
            sentence_scores = sorted(
                ((float(sims[pos]), i, text) for i, (text, pos) in enumerate(sentences)),
                key=lambda item: (-item[0], item[1]),
            )
            results.append(EventSimilarity(
                phrase=float(sims[phrase_pos]) if phrase_pos is not None else 0.0,
                sentence=float(sims[sentence_pos]) if sentence_pos is not None else 0.0,
                best_phrases=[t for s, _, t in phrase_scores[:MAX_REASON_PHRASES] if s > 0],
                best_sentence=next((t for s, _, t in sentence_scores if s > 0), None),
            ))
        return results

    def _score(self, query: str, events: Sequence[EventKeyData]) -> List[RecommendedEvent]:
        similarities = self.compute_similarities(query, events)

        phrase_ranking = rank_by_similarity([s.phrase for s in similarities])
        sentence_ranking = rank_by_similarity([s.sentence for s in similarities])
        fused = fuse_rankings(
            self.config.fuse_method,
            [phrase_ranking, sentence_ranking],
            k=self.config.rrf_k,
            lam=self.config.hybrid_lambda,
        )

        strict = [
            (i, score) for i, score in fused
            if similarities[i].mean >= self.config.similarity_threshold
        ]
        self.logger.debug(
            "threshold_filter_applied",
            before=len(fused),
            after=len(strict),
            threshold=self.config.similarity_threshold
        )

        limit = self.config.top_n
        if self.config.llm_review_enabled and self.llm_client is not None:
            limit = max(limit, self.config.llm_review_top_k)
        candidates = strict[:limit]

        recommended = [
            RecommendedEvent(
                id=events[i].id,
                title=events[i].title,
                relevance_score=round(score, 6),
                relevance_reason=build_reason(similarities[i], query),
            )
            for i, score in candidates
        ]

        if self.config.llm_review_enabled and self.llm_client is not None:
            reviewed_events = [events[i] for i, _ in candidates][: self.config.llm_review_top_k]
            recommended = review_recommendations(
                self.llm_client,
                query,
                recommended[: self.config.llm_review_top_k],
                reviewed_events,
                timeout_seconds=self.config.timeout_ms / 1000.0,
            )

        return recommended[: self.config.top_n]

    def rank(self, tag: str, events: Sequence[EventKeyData]) -> TagRecommendations:
        """
        Rank events for one interest tag.

        Args:
            tag: Interest tag
            events: Pre-filtered candidate events

        Returns:
            TagRecommendations (empty with a message when there are no events)

        Raises:
            InvalidRecommendationRequest: If the tag is blank
            RankingError: If the semantic comparison fails
        """
        if not tag or not tag.strip():
            raise InvalidRecommendationRequest("tag must not be empty")

        if not events:
            return TagRecommendations(tag=tag, recommendations=[], message=NO_EVENTS_MESSAGE)

        try:
            recommendations = self._score(tag, events)
        except Exception as e:
            self.logger.error("ranking_failed", tag=tag, error=str(e), error_type=type(e).__name__)
            raise RankingError(f"{type(e).__name__}: {e}", tag=tag) from e

        self.logger.info(
            "tag_ranking_completed",
            tag=tag,
            events_count=len(events),
            recommendations_count=len(recommendations)
        )
        return TagRecommendations(tag=tag, recommendations=recommendations)

    def rank_tags(
        self, tags: Sequence[str], events: Sequence[EventKeyData]
    ) -> List[TagRecommendations]:
        """
        Rank events for each tag, one tag at a time.

        The first failing tag propagates its RankingError.
        """
        return [self.rank(tag, events) for tag in tags]

    def rank_query(
        self,
        message: Optional[str],
        tags: Optional[Sequence[str]],
        events: Sequence[EventKeyData],
    ) -> QueryRecommendations:
        """
        Rank events for a free-text message, tags, or both.

        Raises:
            InvalidRecommendationRequest: If neither message nor tags are given
            RankingError: If the semantic comparison fails
        """
        query = build_query(message, tags)

        if not events:
            return QueryRecommendations(query=query, recommendations=[], message=NO_EVENTS_MESSAGE)

        try:
            recommendations = self._score(query, events)
        except Exception as e:
            self.logger.error("ranking_failed", query=query, error=str(e), error_type=type(e).__name__)
            raise RankingError(f"{type(e).__name__}: {e}", query=query) from e

        self.logger.info(
            "query_ranking_completed",
            events_count=len(events),
            recommendations_count=len(recommendations)
        )
        if not recommendations:
            return QueryRecommendations(query=query, recommendations=[], message=NO_QUERY_MATCH_MESSAGE)
        return QueryRecommendations(query=query, recommendations=recommendations)


def build_query(message: Optional[str], tags: Optional[Sequence[str]]) -> str:
    """
    Combine a free-text message and tags into one query.

    Examples:
        >>> build_query("Reactを学びたい", ["TypeScript", "Next.js"])
        'Reactを学びたい・TypeScript・Next.js'
        >>> build_query(None, ["Go"])
        'Go'
    """
    message = (message or "").strip()
    clean_tags = [t.strip() for t in (tags or []) if t and t.strip()]

    if not message and not clean_tags:
        raise InvalidRecommendationRequest("Either message or tags is required")
    if not clean_tags:
        return message
    if not message:
        return QUERY_JOINER.join(clean_tags)
    return message + QUERY_JOINER + QUERY_JOINER.join(clean_tags)
