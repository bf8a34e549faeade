"""
In-memory TTL cache for provider responses
Entries expire lazily: an expired entry is dropped by the read that finds it
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..utils import get_logger

logger = get_logger(__name__)

@dataclass
class CacheEntry:
    """Represents a cached value"""
    value: Any
    written_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.written_at > self.ttl_seconds

    def age_seconds(self, now: float) -> float:
        return now - self.written_at

class TTLCache:
    """
    Key/value store with per-entry time-to-live

    No background sweeper: expiry is checked when a key is read. Sizes stay
    small (one entry per symbol and data kind), so stale entries lingering
    until their next read cost nothing.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or time.time
        self._store: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._expirations = 0

    def set(self, key: str, value: Any, ttl_seconds: float):
        """Store value, replacing any previous entry and restarting its TTL"""
        self._store[key] = CacheEntry(
            value=value,
            written_at=self._clock(),
            ttl_seconds=ttl_seconds
        )
        logger.debug(f"Cached {key} with TTL {ttl_seconds}s")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a live value

        Returns:
            The cached value, or default if absent or expired
        """
        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return default

        now = self._clock()
        if entry.is_expired(now):
            del self._store[key]
            self._expirations += 1
            self._misses += 1
            logger.debug(f"Cache expired for {key}")
            return default

        self._hits += 1
        logger.debug(f"Cache hit for {key} (age: {entry.age_seconds(now):.1f}s)")
        return entry.value

    def delete(self, key: str):
        self._store.pop(key, None)

    def clear(self):
        self._store.clear()
        logger.info("Cleared cache")

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet read"""
        return len(self._store)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: str) -> bool:
        entry = self._store.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        lookups = self._hits + self._misses
        return {
            'entries': len(self._store),
            'hits': self._hits,
            'misses': self._misses,
            'expirations': self._expirations,
            'hit_rate': round(self._hits / lookups * 100, 1) if lookups else 0.0
        }
