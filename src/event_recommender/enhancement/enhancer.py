"""
Semantic enhancement of lexical keyphrase candidates with an LLM.

Coordinates:
1. Prompt building from raw text + candidate phrases
2. LLM call bounded by a timeout
3. Reply parsing and validation
4. Mapping to EnhancedPhrase (clamped scores, dedup, sort, truncate)

Every attempt is run through the injected RetryPolicy; timeouts, transport
errors and malformed replies each consume one attempt.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from event_recommender.config import EnhancementConfig
from event_recommender.enhancement.parsing import EnhancementReply, parse_enhancement_reply
from event_recommender.enhancement.prompts import SYSTEM_PROMPT, build_enhancement_prompt
from event_recommender.llm.llm_client import LLMClient, call_with_timeout
from event_recommender.llm.retry import RetryExhaustedError, RetryPolicy
from event_recommender.models.keyphrases import EnhancedPhrase


logger = structlog.get_logger(__name__)

DEFAULT_REPLY_SCORE = 0.5
MIN_CONFIDENCE = 0.1


class EnhancementError(RetryExhaustedError):
    """Raised when every enhancement attempt failed."""


@dataclass
class EnhancementOutcome:
    """Enhanced phrases plus the number of attempts it took to get them."""
    phrases: List[EnhancedPhrase]
    attempts: int


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def map_reply(reply: EnhancementReply, max_keyphrases: int) -> List[EnhancedPhrase]:
    """
    Map a validated reply to EnhancedPhrase objects.

    Missing or zero scores default to 0.5. Exact-duplicate phrases keep their
    first occurrence. The result is sorted by score desc (stable) and truncated.
    """
    phrases: List[EnhancedPhrase] = []
    seen = set()

    for index, item in enumerate(reply.enhanced_keyphrases):
        if item.phrase in seen:
            continue
        seen.add(item.phrase)

        raw_score = item.score or DEFAULT_REPLY_SCORE
        score = _clamp(raw_score, 0.0, 1.0)
        phrases.append(
            EnhancedPhrase(
                phrase=item.phrase,
                score=score,
                confidence=_clamp(score, MIN_CONFIDENCE, 1.0),
                ai_enhanced=True,
                original_rank=index,
            )
        )

    phrases.sort(key=lambda p: p.score, reverse=True)
    return phrases[:max_keyphrases]


class SemanticEnhancer:
    """
    Curates lexical candidates through an external language model.

    The enhancer never caches and never falls back; both are the pipeline's job.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        retry_policy: Optional[RetryPolicy] = None,
        config: Optional[EnhancementConfig] = None,
    ):
        """
        Initialize enhancer.

        Args:
            llm_client: Transport used for each attempt
            retry_policy: Retry policy (default: config.max_retries attempts, 2^n backoff)
            config: Enhancement options
        """
        self.config = config or EnhancementConfig()
        self.llm_client = llm_client
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=self.config.max_retries)
        self.logger = logger.bind(
            enhancer="SemanticEnhancer",
            model=getattr(llm_client, "model", "unknown")
        )

    def _attempt(self, prompt: str) -> List[EnhancedPhrase]:
        response = call_with_timeout(
            lambda: self.llm_client.generate(prompt, system_prompt=SYSTEM_PROMPT),
            self.config.timeout_ms / 1000.0,
        )
        reply = parse_enhancement_reply(response.text)
        return map_reply(reply, self.config.max_keyphrases)

    def run(self, raw_text: str, candidates: Sequence[str]) -> EnhancementOutcome:
        """
        Enhance candidates and report how many attempts were needed.

        Args:
            raw_text: Event text (truncated inside the prompt)
            candidates: Lexical candidate phrases in rank order

        Returns:
            EnhancementOutcome

        Raises:
            EnhancementError: When all attempts failed
        """
        prompt = build_enhancement_prompt(raw_text, list(candidates), self.config)
        failures = []

        def on_retry(attempt: int, error: Exception) -> None:
            failures.append(error)
            self.logger.warning(
                "enhancement_attempt_failed",
                attempt=attempt,
                max_attempts=self.retry_policy.max_attempts,
                error_type=type(error).__name__,
                error=str(error),
            )

        self.logger.info("enhancement_started", candidates_count=len(candidates))

        try:
            phrases = self.retry_policy.run(lambda: self._attempt(prompt), on_retry=on_retry)
        except RetryExhaustedError as e:
            self.logger.warning("enhancement_exhausted", attempts=e.attempts)
            raise EnhancementError(e.attempts, e.last_error) from e

        attempts = len(failures) + 1
        self.logger.info(
            "enhancement_completed",
            phrases_count=len(phrases),
            attempts=attempts
        )
        return EnhancementOutcome(phrases=phrases, attempts=attempts)

    def enhance(self, raw_text: str, candidates: Sequence[str]) -> List[EnhancedPhrase]:
        """
        Curate and re-score candidate phrases.

        Returns:
            EnhancedPhrase list, ai_enhanced=True, sorted by score desc,
            at most ``config.max_keyphrases`` entries

        Raises:
            EnhancementError: When all attempts failed
        """
        return self.run(raw_text, candidates).phrases
