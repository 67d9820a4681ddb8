"""Caching for resolved factors and calculation results."""

from foodprint.cache.base import CacheBackend, factor_cache_key, result_cache_key
from foodprint.cache.memory import CacheEntry, MemoryCache

__all__ = [
    "CacheBackend",
    "CacheEntry",
    "MemoryCache",
    "factor_cache_key",
    "result_cache_key",
]
