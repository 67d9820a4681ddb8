"""Adjustment factor providers (seasonal, regional, processing, waste)."""

from foodprint.adjustments.base import AdjustmentContext, AdjustmentProvider
from foodprint.adjustments.processing import ProcessingProvider, normalize_processing
from foodprint.adjustments.regional import RegionalProvider, normalize_origin, production_method
from foodprint.adjustments.seasonal import (
    IN_SEASON,
    NEAR_SEASON,
    OUT_OF_SEASON,
    OUT_OF_SEASON_HEATED,
    SeasonalProvider,
    needs_heated_greenhouse,
)
from foodprint.adjustments.waste import WasteProvider

__all__ = [
    "AdjustmentContext",
    "AdjustmentProvider",
    "ProcessingProvider",
    "normalize_processing",
    "RegionalProvider",
    "normalize_origin",
    "production_method",
    "IN_SEASON",
    "NEAR_SEASON",
    "OUT_OF_SEASON",
    "OUT_OF_SEASON_HEATED",
    "SeasonalProvider",
    "needs_heated_greenhouse",
    "WasteProvider",
]
