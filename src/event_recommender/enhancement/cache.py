"""
Time-bounded result cache for reconciled keyphrase lists.

``ResultCache`` is the abstraction the pipeline depends on; the in-memory
implementation is process-local, rebuilt empty on restart, and safe for
concurrent reads and writes. Concurrent misses on the same key may both compute
and write; the later write wins.
"""

import hashlib
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

import structlog

from event_recommender.models.keyphrases import EnhancedPhrase


logger = structlog.get_logger(__name__)

FINGERPRINT_PREFIX = "ai_enhanced_"
FINGERPRINT_TEXT_LENGTH = 100


def fingerprint(text: str) -> str:
    """
    Derive the cache key for a text from its first 100 characters.

    Texts sharing the same 100-character prefix share a key.

    Examples:
        >>> fingerprint("abc") == fingerprint("abc")
        True
        >>> fingerprint("x" * 100 + "tail-a") == fingerprint("x" * 100 + "tail-b")
        True
    """
    prefix = text[:FINGERPRINT_TEXT_LENGTH].encode("utf-8")
    return FINGERPRINT_PREFIX + hashlib.sha1(prefix).hexdigest()[:32]


@dataclass
class CacheEntry:
    """Cached result with its creation time and validity window (seconds)."""
    result: List[EnhancedPhrase]
    created_at: float
    ttl_seconds: float

    def is_valid(self, now: float) -> bool:
        return now <= self.created_at + self.ttl_seconds


@dataclass
class CacheStats:
    """Snapshot of cache contents."""
    size: int
    keys: List[str] = field(default_factory=list)


def _copy(result: List[EnhancedPhrase]) -> List[EnhancedPhrase]:
    return [phrase.model_copy() for phrase in result]


class ResultCache(ABC):
    """Cache interface used by the extraction pipeline."""

    @abstractmethod
    def get(self, key: str) -> Optional[List[EnhancedPhrase]]:
        """Return the cached result, or None when absent or expired."""

    @abstractmethod
    def put(self, key: str, value: List[EnhancedPhrase], ttl_hours: float = 24.0) -> None:
        """Store a result for ``ttl_hours``."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Return size and keys of the cache."""


class InMemoryResultCache(ResultCache):
    """
    Dictionary-backed cache with lazy expiry.

    Expired entries are evicted when looked up. Stored lists are copied on the
    way in and out, so callers cannot mutate a cached entry.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Seconds-valued monotonic clock (injectable for tests)
        """
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[List[EnhancedPhrase]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            if not entry.is_valid(self._clock()):
                del self._entries[key]
                logger.debug("cache_entry_expired", key=key)
                return None

            return _copy(entry.result)

    def put(self, key: str, value: List[EnhancedPhrase], ttl_hours: float = 24.0) -> None:
        entry = CacheEntry(
            result=_copy(value),
            created_at=self._clock(),
            ttl_seconds=ttl_hours * 3600.0,
        )
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("cache_cleared", entries_removed=count)

    def stats(self) -> CacheStats:
        with self._lock:
            keys = list(self._entries)
        return CacheStats(size=len(keys), keys=keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
