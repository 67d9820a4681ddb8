# -*- coding: utf-8 -*-
"""
foodprint/resolution/resolver.py

Layered emission-factor resolution.

TIERS (each tried only when the previous one misses):
1. Memory cache, keyed ef:country:category:item
2. Structured store, exact country then "global"
3. External sources in priority order, first positive value wins;
   a hit is written back to the store
4. Average of the stored factors of the category (3.0 when none)
5. Hardcoded per-category constants, used when the store itself fails

Whatever tier answers, the value is cached before it is returned, and
resolution always ends with a float.

Example:
    >>> resolver = EmissionFactorResolver(store, sources, MemoryCache())
    >>> resolver.resolve("meat", "beef", "us")
    25.3
"""

import logging
import threading
import time
from dataclasses import replace
from typing import Callable, Dict, Optional, Sequence, Tuple, TypeVar

from foodprint.cache.base import CacheBackend, factor_cache_key
from foodprint.connectors.base import EmissionDataSource
from foodprint.connectors.errors import classify_connector_error
from foodprint.data.records import (
    GLOBAL_COUNTRY,
    EmissionFactorRecord,
    FactorResolution,
    ResolutionTier,
    coerce_positive,
)
from foodprint.data.store import EmissionFactorStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FACTOR_TTL_SECONDS = 3600
DEFAULT_EXTERNAL_TIMEOUT_SECONDS = 10.0

# kg CO2e per kg when no category data exists
DEFAULT_CATEGORY_FACTOR = 3.0

HARDCODED_FACTORS: Dict[str, float] = {
    "meat": 30.0,
    "dairy": 6.0,
    "vegetables": 0.5,
    "fruits": 0.8,
    "grains": 1.5,
    "legumes": 1.0,
    "seafood": 7.0,
    "default": 3.0,
}


# Fallbacks reached only because lookups were cut short are not cached
_FALLBACK_TIERS = (ResolutionTier.CATEGORY_AVERAGE, ResolutionTier.HARDCODED)


class _StoreUnavailable(Exception):
    pass


class EmissionFactorResolver:
    """Resolves kg CO2e per kg for (category, item, country)."""

    def __init__(
        self,
        store: Optional[EmissionFactorStore],
        sources: Sequence[EmissionDataSource],
        cache: CacheBackend,
        ttl_seconds: float = DEFAULT_FACTOR_TTL_SECONDS,
        external_timeout: float = DEFAULT_EXTERNAL_TIMEOUT_SECONDS,
    ):
        """
        Initialize resolver.

        Args:
            store: Structured store (None behaves like a failing store)
            sources: External sources, highest priority first
            cache: Cache shared by all tiers
            ttl_seconds: TTL of cached factors
            external_timeout: Timeout of each external call
        """
        self.store = store
        self.sources = list(sources)
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.external_timeout = external_timeout

    def resolve(
        self,
        category: str,
        item: str,
        country: str = GLOBAL_COUNTRY,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> float:
        """Resolve the factor value; never raises."""
        return self.resolve_with_provenance(category, item, country, deadline, cancel).value

    def resolve_with_provenance(
        self,
        category: str,
        item: str,
        country: str = GLOBAL_COUNTRY,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> FactorResolution:
        """
        Resolve a factor together with the tier that produced it.

        Args:
            category: Coarse category
            item: Specific item ("default" for the category itself)
            country: Country code or "global"
            deadline: ``time.monotonic()`` value after which external
                sources are no longer consulted
            cancel: Event that, once set, also stops external lookups

        Returns:
            FactorResolution with a positive value
        """
        category = (category or "unknown").lower().strip()
        item = (item or "default").lower().strip()
        country = (country or GLOBAL_COUNTRY).lower().strip()

        key = factor_cache_key(country, category, item)
        cached = self.cache.get(key)
        if cached is not None:
            return replace(cached, cached=True)

        resolution = self._resolve_uncached(category, item, country, deadline, cancel)
        if not (self._interrupted(deadline, cancel) and resolution.tier in _FALLBACK_TIERS):
            self.cache.set(key, resolution, ttl=self.ttl_seconds)
        logger.debug(
            f"Resolved {category}/{item}/{country} = {resolution.value} "
            f"via {resolution.tier.value} ({resolution.source})"
        )
        return resolution

    def resolve_offline(
        self, category: str, item: str, country: str = GLOBAL_COUNTRY
    ) -> FactorResolution:
        """
        Statistical fallback only (category average, then constants).

        Used for ingredients abandoned at the request deadline. The result
        is not cached so a later unhurried request can still find better
        data.
        """
        category = (category or "unknown").lower().strip()
        item = (item or "default").lower().strip()
        country = (country or GLOBAL_COUNTRY).lower().strip()

        cached = self.cache.get(factor_cache_key(country, category, item))
        if cached is not None:
            return replace(cached, cached=True)

        try:
            return self._category_average(category)
        except _StoreUnavailable:
            return self._hardcoded(category)

    @staticmethod
    def _interrupted(deadline: Optional[float], cancel: Optional[threading.Event]) -> bool:
        """Whether external lookups were (or would have been) cut short."""
        if cancel is not None and cancel.is_set():
            return True
        return deadline is not None and time.monotonic() >= deadline

    # ==================== TIERS ====================

    def _resolve_uncached(
        self,
        category: str,
        item: str,
        country: str,
        deadline: Optional[float],
        cancel: Optional[threading.Event],
    ) -> FactorResolution:
        try:
            record = self._store_call(lambda s: s.get(category, item, country))
            if record is not None:
                return self._from_record(record, ResolutionTier.STORE)

            if country != GLOBAL_COUNTRY:
                record = self._store_call(lambda s: s.get(category, item, GLOBAL_COUNTRY))
                if record is not None:
                    return self._from_record(record, ResolutionTier.STORE_GLOBAL)
        except _StoreUnavailable:
            return self._store_down_fallback(category, item, country, deadline, cancel)

        external = self._query_sources(category, item, country, deadline, cancel)
        if external is not None:
            value, source_name = external
            self._persist(
                EmissionFactorRecord(
                    category=category, item=item, country=country,
                    value=value, source=source_name,
                )
            )
            return FactorResolution(value, ResolutionTier.EXTERNAL, source_name)

        try:
            return self._category_average(category)
        except _StoreUnavailable:
            return self._hardcoded(category)

    def _store_down_fallback(
        self,
        category: str,
        item: str,
        country: str,
        deadline: Optional[float],
        cancel: Optional[threading.Event],
    ) -> FactorResolution:
        """External sources once (nothing persisted), then constants."""
        external = self._query_sources(category, item, country, deadline, cancel)
        if external is not None:
            value, source_name = external
            return FactorResolution(value, ResolutionTier.EXTERNAL, source_name)
        return self._hardcoded(category)

    def _category_average(self, category: str) -> FactorResolution:
        average = self._store_call(lambda s: s.category_average(category))
        value = coerce_positive(average)
        if value is None:
            return FactorResolution(
                DEFAULT_CATEGORY_FACTOR, ResolutionTier.CATEGORY_AVERAGE, "default"
            )
        return FactorResolution(value, ResolutionTier.CATEGORY_AVERAGE, "category_average")

    @staticmethod
    def _hardcoded(category: str) -> FactorResolution:
        value = HARDCODED_FACTORS.get(category, HARDCODED_FACTORS["default"])
        logger.warning(f"Using hardcoded emission factor for {category}: {value}")
        return FactorResolution(value, ResolutionTier.HARDCODED, "hardcoded")

    @staticmethod
    def _from_record(record: EmissionFactorRecord, tier: ResolutionTier) -> FactorResolution:
        return FactorResolution(
            value=record.value,
            tier=tier,
            source=record.source,
            low_reliability=record.is_low_reliability,
        )

    def _query_sources(
        self,
        category: str,
        item: str,
        country: str,
        deadline: Optional[float],
        cancel: Optional[threading.Event],
    ) -> Optional[Tuple[float, str]]:
        for source in self.sources:
            if cancel is not None and cancel.is_set():
                logger.debug(f"Lookup of {category}/{item} cancelled before {source.name}")
                return None

            timeout = self.external_timeout
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.debug(f"Deadline reached before querying {source.name}")
                    return None
                timeout = min(timeout, remaining)

            try:
                value = source.get_emission_factor(category, item, country, timeout=timeout)
            except Exception as e:
                logger.warning(f"Source lookup failed: {classify_connector_error(e, source.name)}")
                continue

            value = coerce_positive(value)
            if value is not None:
                return value, source.name
        return None

    # ==================== STORE ACCESS ====================

    def _store_call(self, operation: Callable[[EmissionFactorStore], T]) -> T:
        if self.store is None:
            raise _StoreUnavailable()
        try:
            return operation(self.store)
        except Exception as e:
            logger.warning(f"Emission factor store unavailable: {e}")
            raise _StoreUnavailable() from e

    def _persist(self, record: EmissionFactorRecord) -> None:
        if self.store is None:
            return
        try:
            self.store.upsert(record)
        except Exception as e:
            logger.warning(f"Could not persist {record.key} from {record.source}: {e}")
