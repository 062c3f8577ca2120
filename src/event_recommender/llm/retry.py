"""
Explicit retry policy for external calls.

The policy is a plain value object: callers pass it into components that talk
to external services, and tests substitute a recording ``sleep`` so no real
waiting happens.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

import structlog


logger = structlog.get_logger(__name__)

T = TypeVar("T")


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after the ``attempt``-th failure (1 → 2s, 2 → 4s, ...)."""
    return float(2 ** attempt)


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retried call failed."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"All {attempts} attempts failed: {last_error!r}")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Synchronous retry with backoff between failed attempts.

    Attributes:
        max_attempts: Total number of attempts (not retries after the first)
        backoff: Maps the 1-based failure count to a delay in seconds
        sleep: Sleep function (injectable for tests)
    """

    max_attempts: int = 3
    backoff: Callable[[int], float] = exponential_backoff
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def run(
        self,
        func: Callable[[], T],
        on_retry: Optional[Callable[[int, Exception], None]] = None,
    ) -> T:
        """
        Call ``func`` until it succeeds or attempts run out.

        Args:
            func: Zero-argument callable performing one attempt
            on_retry: Called with (attempt, error) after each failed attempt

        Returns:
            The first successful result

        Raises:
            RetryExhaustedError: If all attempts raised
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return func()
            except Exception as e:
                last_error = e
                if on_retry is not None:
                    on_retry(attempt, e)

                if attempt < self.max_attempts:
                    delay = self.backoff(attempt)
                    logger.debug("retry_backoff", attempt=attempt, delay_seconds=delay)
                    self.sleep(delay)

        raise RetryExhaustedError(self.max_attempts, last_error)
