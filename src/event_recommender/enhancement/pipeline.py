"""
Keyphrase extraction pipeline.

Coordinates:
1. Lexical candidate generation (TextRank)
2. Cache lookup by text fingerprint
3. Semantic enhancement (bounded retries, timeout)
4. Reconciliation with lexical fallbacks
5. Cache write of the final result

Enhancer failures never reach the caller: the pipeline always returns the
lexical fallback set for non-trivial input.
"""

import time
from typing import Callable, List, Optional, Sequence

import structlog

from event_recommender.config import EnhancementConfig, Settings, TextRankConfig, settings
from event_recommender.enhancement.cache import InMemoryResultCache, ResultCache, fingerprint
from event_recommender.enhancement.enhancer import EnhancementError, SemanticEnhancer
from event_recommender.enhancement.prompts import PROMPT_VERSION
from event_recommender.enhancement.reconciler import merge
from event_recommender.lexical import TEXTRANK_VERSION, extract_candidates, extract_key_sentences
from event_recommender.llm.llm_client import create_llm_client
from event_recommender.llm.retry import RetryPolicy
from event_recommender.models.events import EventKeyData
from event_recommender.models.keyphrases import (
    EnhancedPhrase,
    KeyphraseExtractionResult,
    RawDocument,
)


logger = structlog.get_logger(__name__)


class KeyphrasePipeline:
    """
    Two-stage keyphrase extraction with caching and fallback merge.

    Invoked per document, sequentially; bulk callers go through
    ``extract_batch`` which spaces items out with a fixed delay.
    """

    def __init__(
        self,
        enhancer: Optional[SemanticEnhancer] = None,
        cache: Optional[ResultCache] = None,
        config: Optional[EnhancementConfig] = None,
        textrank_config: Optional[TextRankConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize pipeline.

        Args:
            enhancer: Semantic enhancer (None for lexical-only extraction)
            cache: Result cache (default: new in-memory cache)
            config: Enhancement options
            textrank_config: Lexical extraction options
            sleep: Sleep function used between batch items
        """
        self.enhancer = enhancer
        self.cache = cache if cache is not None else InMemoryResultCache()
        self.config = config or EnhancementConfig()
        self.textrank_config = textrank_config or TextRankConfig()
        self.sleep = sleep
        self.logger = logger.bind(
            pipeline="KeyphrasePipeline",
            ai_enabled=enhancer is not None
        )

    def _enhance_and_merge(self, text: str, candidates) -> tuple:
        """Run the AI branch; returns (phrases, attempts)."""
        if self.enhancer is None or not text.strip():
            return merge(candidates, [], self.config), 0

        phrases = [c.phrase for c in candidates]
        try:
            outcome = self.enhancer.run(text, phrases)
            ai_phrases, attempts = outcome.phrases, outcome.attempts
        except EnhancementError as e:
            self.logger.warning(
                "enhancement_failed_using_lexical_fallback",
                attempts=e.attempts,
                error=str(e.last_error)
            )
            ai_phrases, attempts = [], e.attempts

        return merge(candidates, ai_phrases, self.config), attempts

    def extract(self, document: RawDocument) -> KeyphraseExtractionResult:
        """
        Extract the final keyphrase set for one document.

        Args:
            document: RawDocument with event text

        Returns:
            KeyphraseExtractionResult (never raises for enhancer failures)
        """
        start_time = time.time()
        log = self.logger.bind(document_id=document.id)

        candidates = extract_candidates(document.text, self.textrank_config)
        log.debug("lexical_candidates_extracted", candidates_count=len(candidates))

        key = fingerprint(document.text)
        cache_hit = False
        attempts = 0

        cached = self.cache.get(key) if self.config.cache_enabled else None
        if cached is not None:
            log.info("cache_hit", cache_key=key)
            keyphrases: List[EnhancedPhrase] = cached
            cache_hit = True
        else:
            try:
                keyphrases, attempts = self._enhance_and_merge(document.text, candidates)
            except Exception as e:
                log.error(
                    "enhancement_branch_error_using_lexical_fallback",
                    error=str(e),
                    error_type=type(e).__name__
                )
                keyphrases = merge(candidates, [], self.config)

            if self.config.cache_enabled and keyphrases:
                self.cache.put(key, keyphrases, ttl_hours=self.config.cache_ttl_hours)

        processing_time_ms = (time.time() - start_time) * 1000

        log.info(
            "keyphrase_extraction_completed",
            keyphrases_count=len(keyphrases),
            cache_hit=cache_hit,
            ai_attempts=attempts,
            processing_time_ms=round(processing_time_ms, 1)
        )

        return KeyphraseExtractionResult(
            document_id=document.id,
            keyphrases=keyphrases,
            lexical_candidates=candidates,
            ai_enhanced=any(p.ai_enhanced for p in keyphrases),
            cache_hit=cache_hit,
            ai_attempts=attempts,
            processing_time_ms=processing_time_ms,
            textrank_version=TEXTRANK_VERSION,
            prompt_version=PROMPT_VERSION,
        )

    def extract_key_data(self, event_id: str, title: str = "", detail: str = "") -> EventKeyData:
        """
        Build the ranker's projection of an event.

        Keyphrases come from title + detail, key sentences from the detail.
        """
        text = "\n".join(part for part in (title, detail) if part)
        result = self.extract(RawDocument(id=event_id, text=text))
        sentences = extract_key_sentences(detail, self.textrank_config)

        return EventKeyData(
            id=event_id,
            title=title,
            detail=detail,
            key_phrases=[p.phrase for p in result.keyphrases],
            key_sentences=sentences,
        )

    def extract_batch(
        self,
        documents: Sequence[RawDocument],
        delay_seconds: float = 1.0,
        on_start: Optional[Callable[[int, RawDocument], None]] = None,
    ) -> List[KeyphraseExtractionResult]:
        """
        Extract documents one after another with a delay between items.

        The delay is a rate-limit courtesy towards the LLM provider; it is not
        applied after the last document. ``on_start(index, document)`` is
        called before each extraction (progress reporting).
        """
        results = []
        for index, document in enumerate(documents):
            if index > 0 and delay_seconds > 0:
                self.sleep(delay_seconds)
            if on_start is not None:
                on_start(index, document)
            results.append(self.extract(document))

        self.logger.info("batch_extraction_completed", documents_count=len(results))
        return results


def build_pipeline(config: Optional[Settings] = None) -> KeyphrasePipeline:
    """
    Wire a pipeline from settings.

    ``enable_ai_enhancement=False`` (or a provider that cannot be configured,
    e.g. a missing API key) yields a lexical-only pipeline.
    """
    config = config or settings
    enhancement_config = EnhancementConfig.from_settings(config)

    enhancer = None
    if config.enable_ai_enhancement:
        try:
            llm_client = create_llm_client(config=config)
        except (ValueError, ImportError) as e:
            logger.warning("llm_client_unavailable_lexical_only", error=str(e))
        else:
            enhancer = SemanticEnhancer(
                llm_client=llm_client,
                retry_policy=RetryPolicy(max_attempts=enhancement_config.max_retries),
                config=enhancement_config,
            )

    return KeyphrasePipeline(
        enhancer=enhancer,
        cache=InMemoryResultCache(),
        config=enhancement_config,
        textrank_config=TextRankConfig.from_settings(config),
    )
