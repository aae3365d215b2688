"""TTL-based caching for generated learning answers.

Identical queries at the same knowledge level return the cached answer
instead of calling the Sonar API again.
"""

import hashlib
import re
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


def normalize_query(text: str) -> str:
    """Lower-case and collapse whitespace so trivial variants share an entry."""
    return " ".join(text.lower().split())


def make_key(kind: str, level: str, text: str) -> str:
    """
    Build a cache key.

    Args:
        kind: Request kind (``query`` or ``path``)
        level: Knowledge level
        text: Query or topic text

    Returns:
        Key of the form ``kind:level:<sha1 of normalized text>``
    """
    digest = hashlib.sha1(normalize_query(text).encode("utf-8")).hexdigest()
    return f"{kind}:{level}:{digest}"


class ResponseCacheMetrics:
    """Metrics for response cache operations."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all metrics."""
        self.hits = 0
        self.misses = 0
        self.expirations = 0
        self.invalidations = 0
        self.evictions = 0

    def to_dict(self) -> Dict[str, float]:
        lookups = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "invalidations": self.invalidations,
            "evictions": self.evictions,
            "hit_rate": self.hits / lookups if lookups > 0 else 0.0
        }


class ResponseCache:
    """
    TTL cache with least-recently-used eviction.

    Entries older than the TTL are dropped on access; when the cache is
    full the entry with the oldest access is evicted.
    """

    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_size: int = 500,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize cache with TTL and size limit.

        Args:
            ttl_seconds: Time-to-live in seconds
            max_size: Maximum number of cached answers
            clock: Monotonic time source (seconds)
        """
        self._cache: Dict[str, Tuple[Any, float, int]] = {}
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._access_counter = 0
        self.metrics = ResponseCacheMetrics()

        logger.info(
            "response_cache_initialized",
            ttl_seconds=ttl_seconds,
            max_size=max_size
        )

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache and not self.is_expired(key)

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value if present and not expired.

        Returns:
            Cached value, or None if not found or expired
        """
        if key in self._cache:
            value, cached_at, _ = self._cache[key]
            age = self._clock() - cached_at

            if age < self._ttl:
                self._access_counter += 1
                self._cache[key] = (value, cached_at, self._access_counter)
                self.metrics.hits += 1
                logger.debug("response_cache_hit", key=key, age_seconds=round(age, 3))
                return value

            self.metrics.expirations += 1
            logger.debug("response_cache_expired", key=key, age_seconds=round(age, 3))
            del self._cache[key]

        self.metrics.misses += 1
        logger.debug("response_cache_miss", key=key)
        return None

    def set(self, key: str, value: Any) -> None:
        """
        Cache a value with the current timestamp.

        If the cache is full, the least recently used entry is evicted.
        """
        if len(self._cache) >= self._max_size and key not in self._cache:
            self._evict_lru()

        self._access_counter += 1
        self._cache[key] = (value, self._clock(), self._access_counter)
        logger.debug("response_cached", key=key, cache_size=len(self._cache))

    def _evict_lru(self):
        if not self._cache:
            return

        lru_key = min(self._cache.items(), key=lambda x: x[1][2])[0]
        del self._cache[lru_key]
        self.metrics.evictions += 1

        logger.info("response_cache_evicted_lru", key=lru_key, cache_size=len(self._cache))

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if it was cached."""
        if key in self._cache:
            del self._cache[key]
            self.metrics.invalidations += 1
            logger.debug("response_cache_invalidated", key=key)
            return True
        return False

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Remove every entry whose key matches a regular expression.

        Args:
            pattern: Regular expression searched in each key

        Returns:
            Number of entries removed
        """
        regex = re.compile(pattern)
        matched = [key for key in self._cache if regex.search(key)]
        for key in matched:
            del self._cache[key]
        self.metrics.invalidations += len(matched)

        logger.info("response_cache_pattern_invalidated", pattern=pattern, removed=len(matched))
        return len(matched)

    def clear(self):
        """Clear all cached answers."""
        count = len(self._cache)
        self._cache.clear()
        logger.info("response_cache_cleared", entries_removed=count)

    def is_expired(self, key: str) -> bool:
        """True if the entry is expired or missing (does not remove it)."""
        if key not in self._cache:
            return True
        _, cached_at, _ = self._cache[key]
        return self._clock() - cached_at >= self._ttl

    def keys(self) -> List[str]:
        return list(self._cache.keys())

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache metrics and state
        """
        return {
            "metrics": self.metrics.to_dict(),
            "cache_size": len(self._cache),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "utilization": len(self._cache) / self._max_size if self._max_size > 0 else 0.0
        }
