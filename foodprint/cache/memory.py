"""
foodprint/cache/memory.py

In-process LRU cache with TTL, used for resolved emission factors and for
whole calculation results.

FEATURES:
- LRU (Least Recently Used) eviction policy
- TTL (Time To Live) per entry
- Thread-safe operations
- Cache statistics tracking (hits, misses, hit rate)
- Prefix invalidation
"""

import time
from collections import OrderedDict
from threading import RLock
from typing import Any, Callable, Dict, Optional


class CacheEntry:
    """A single cache entry with TTL tracking."""

    def __init__(self, value: Any, ttl_seconds: float, now: float):
        self.value = value
        self.created_at = now
        self.expires_at = now + ttl_seconds
        self.access_count = 0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def access(self) -> Any:
        self.access_count += 1
        return self.value


class MemoryCache:
    """
    LRU cache with TTL.

    Implements the ``CacheBackend`` protocol. ``clock`` is injectable so tests
    can expire entries without sleeping.
    """

    def __init__(
        self,
        max_size: int = 5000,
        ttl_seconds: float = 3600,
        enable_stats: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries
            ttl_seconds: Default time to live in seconds
            enable_stats: Enable statistics tracking
            clock: Monotonic time source
        """
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.enable_stats = enable_stats
        self._clock = clock

        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                if self.enable_stats:
                    self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._cache[key]
                if self.enable_stats:
                    self._expirations += 1
                    self._misses += 1
                return None

            self._cache.move_to_end(key)
            if self.enable_stats:
                self._hits += 1
            return entry.access()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Put a value into the cache.

        Args:
            key: Cache key
            value: Value to cache (``None`` is ignored)
            ttl: Override default TTL in seconds
        """
        if value is None:
            return
        ttl_seconds = ttl if ttl is not None else self.ttl_seconds

        with self._lock:
            if key not in self._cache and len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
                if self.enable_stats:
                    self._evictions += 1

            self._cache[key] = CacheEntry(value, ttl_seconds, self._clock())
            self._cache.move_to_end(key)

    def ttl(self, key: str) -> Optional[float]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            remaining = entry.expires_at - self._clock()
            return remaining if remaining > 0 else None

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def invalidate(self, prefix: Optional[str] = None) -> int:
        """
        Invalidate entries whose key starts with ``prefix``.

        Returns:
            Number of entries invalidated
        """
        with self._lock:
            if prefix is None:
                count = len(self._cache)
                self._cache.clear()
                return count

            keys_to_remove = [k for k in self._cache if k.startswith(prefix)]
            for key in keys_to_remove:
                del self._cache[key]
            return len(keys_to_remove)

    def clear(self) -> None:
        """Clear all entries and reset statistics."""
        with self._lock:
            self._cache.clear()
            self.reset_stats()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with hits, misses, hit_rate, size, etc.
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "hits": self._hits,
                "misses": self._misses,
                "total_requests": total_requests,
                "hit_rate_pct": hit_rate,
                "size": len(self._cache),
                "max_size": self.max_size,
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._expirations = 0

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        """Check if key is live (doesn't update LRU order)."""
        with self._lock:
            entry = self._cache.get(key)
            return entry is not None and not entry.is_expired(self._clock())
