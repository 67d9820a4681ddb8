# -*- coding: utf-8 -*-
"""
Shared pieces of the adjustment-factor providers.

Every provider answers ``get(ingredient, context) -> float`` and never
raises. Lookups go specific key -> default key -> constant; when the store
cannot be read the same chain runs over the bundled seed tables.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Optional, Protocol

from foodprint.data.records import GLOBAL_COUNTRY
from foodprint.data.store import AdjustmentStore

logger = logging.getLogger(__name__)

DEFAULT_ORIGIN = "regional"
DEFAULT_PROCESSING = "fresh"
DEFAULT_STAGE = "consumer"


@dataclass(frozen=True)
class AdjustmentContext:
    """
    Everything the providers may need to know about one ingredient.

    Attributes:
        category: Resolved coarse category
        country: Country of consumption
        on_date: Date used for seasonality
        origin: Origin label (local, regional, imported_sea, ...)
        processing: Processing method (fresh, frozen, ...)
        season: Pre-computed season label; determined on demand when None
        production: Explicit production method (greenhouse_heated, ...)
        stage: Supply-chain stage for waste fractions
    """

    category: str = "unknown"
    country: str = GLOBAL_COUNTRY
    on_date: date = field(default_factory=date.today)
    origin: str = DEFAULT_ORIGIN
    processing: str = DEFAULT_PROCESSING
    season: Optional[str] = None
    production: Optional[str] = None
    stage: str = DEFAULT_STAGE

    def with_season(self, season: str) -> "AdjustmentContext":
        return replace(self, season=season)


class AdjustmentProvider(Protocol):
    def get(self, ingredient: str, context: AdjustmentContext) -> float:
        ...


class TableProvider:
    """Base for providers backed by an ``AdjustmentStore`` table."""

    def __init__(self, store: Optional[AdjustmentStore] = None):
        self.store = store

    def _fetch(
        self,
        lookup: Callable[[AdjustmentStore], Optional[float]],
        bundled: Optional[float],
    ) -> Optional[float]:
        """
        Run ``lookup`` against the store.

        Returns ``bundled`` (the seed-table value for the same key) when
        there is no store or it fails.
        """
        if self.store is None:
            return bundled
        try:
            return lookup(self.store)
        except Exception as e:
            logger.warning(f"{self.__class__.__name__}: store lookup failed, using bundled table: {e}")
            return bundled
