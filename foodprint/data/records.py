# -*- coding: utf-8 -*-
"""
foodprint/data/records.py

Value types shared by the store, the source clients and the resolver.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


# ==================== ENUMERATIONS ====================

class DataSource(str, Enum):
    """Provenance class of an estimate; drives its uncertainty fraction."""

    PRIMARY_RESEARCH = "primary_research"
    SECONDARY_RESEARCH = "secondary_research"
    AI_ESTIMATED = "ai_estimated"
    EXTRAPOLATED = "extrapolated"
    ERROR = "error"
    ERROR_FALLBACK = "error_fallback"


class ResolutionTier(str, Enum):
    """Which layer of the resolver produced a factor."""

    STORE = "store"
    STORE_GLOBAL = "store_global"
    EXTERNAL = "external"
    CATEGORY_AVERAGE = "category_average"
    HARDCODED = "hardcoded"


GLOBAL_COUNTRY = "global"


# ==================== RECORDS ====================

@dataclass
class EmissionFactorRecord:
    """
    Emission factor for one (category, item, country).

    Attributes:
        category: Coarse food category (meat, dairy, ...)
        item: Specific item, or "default" for the category row
        country: ISO-ish country code or "global"
        value: kg CO2e per kg of food
        source: Provider name ("klimato", "reference", ...)
        last_updated: When the value was last written
        metadata: Provider-specific extras (uncertainty, reference, ...)
    """

    category: str
    item: str
    value: float
    source: str
    country: str = GLOBAL_COUNTRY
    last_updated: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.category = self.category.lower().strip()
        self.item = self.item.lower().strip()
        self.country = (self.country or GLOBAL_COUNTRY).lower().strip()
        self.value = float(self.value)

    @property
    def key(self) -> tuple:
        return (self.category, self.item, self.country)

    @property
    def is_low_reliability(self) -> bool:
        """Seeded or high-uncertainty rows count as extrapolated data."""
        reliability = str(self.metadata.get("reliability", "")).lower()
        uncertainty = str(self.metadata.get("uncertainty", "")).lower()
        return reliability == "low" or uncertainty in ("high", "h")


@dataclass(frozen=True)
class FactorResolution:
    """A resolved emission factor with the tier and source that produced it."""

    value: float
    tier: ResolutionTier
    source: str
    low_reliability: bool = False
    cached: bool = False

    @property
    def data_source(self) -> DataSource:
        if self.tier in (ResolutionTier.CATEGORY_AVERAGE, ResolutionTier.HARDCODED):
            return DataSource.EXTRAPOLATED
        if self.low_reliability:
            return DataSource.EXTRAPOLATED
        return DataSource.SECONDARY_RESEARCH


@dataclass(frozen=True)
class SeasonalCalendar:
    """Months (1-12) an item is in or near season in a country."""

    country: str
    item: str
    in_season: tuple
    near_season: tuple


@dataclass(frozen=True)
class SpecialCase:
    item: str
    origin: str
    season: str
    factor: float


def coerce_positive(value: Any) -> Optional[float]:
    """Return ``value`` as a float when it is a finite positive number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")) or number <= 0:
        return None
    return number
