# -*- coding: utf-8 -*-
"""
Regional origin and transport adjustments.

The regional factor folds production method into origin: out-of-season
greenhouse vegetables grown nearby are heated (1.8), explicitly unheated
greenhouse produce is 1.2, everything else uses the origin table.
"""

import logging
import re
from typing import Optional

from foodprint.adjustments.base import AdjustmentContext, TableProvider
from foodprint.adjustments.seasonal import OUT_OF_SEASON
from foodprint.data.reference_data import (
    DEFAULT_KEY,
    DISTANCES,
    REGIONAL_FACTORS,
    SPECIAL_CASES,
    TRANSPORT_FACTORS,
)
from foodprint.taxonomy.matcher import normalize_ingredient

logger = logging.getLogger(__name__)

GREENHOUSE_HEATED_FACTOR = 1.8
GREENHOUSE_UNHEATED_FACTOR = 1.2

DEFAULT_DISTANCE_KM = 3000.0
DEFAULT_TRANSPORT_FACTOR = 0.1
TRANSPORT_ERROR_FALLBACK = 0.05

GREENHOUSE_CROPS = re.compile(r"lettuce|spinach|kale|tomato|cucumber|pepper", re.IGNORECASE)

_ORIGIN_ALIASES = {
    "local": "local",
    "locally grown": "local",
    "regional": "regional",
    "national": "national",
    "domestic": "national",
    "imported": "imported_ground",
    "imported ground": "imported_ground",
    "imported by road": "imported_ground",
    "imported sea": "imported_sea",
    "imported by sea": "imported_sea",
    "sea freight": "imported_sea",
    "air freighted": "airFreighted",
    "airfreighted": "airFreighted",
    "air freight": "airFreighted",
    "imported by air": "airFreighted",
}


def normalize_origin(origin: Optional[str]) -> str:
    """Map free-text origin labels onto origin-table keys."""
    if not origin:
        return DEFAULT_KEY
    text = str(origin).strip()
    if text in REGIONAL_FACTORS:
        return text
    key = re.sub(r"[_\-]+", " ", text.lower())
    key = re.sub(r"\s+", " ", key).strip()
    return _ORIGIN_ALIASES.get(key, key.replace(" ", "_"))


def production_method(
    ingredient: str, origin: str, season: Optional[str], production: Optional[str] = None
) -> str:
    """greenhouse_heated, greenhouse_unheated or regular."""
    if production in ("greenhouse_heated", "greenhouse_unheated"):
        return production
    if season == OUT_OF_SEASON and GREENHOUSE_CROPS.search(ingredient or ""):
        if origin in ("local", "regional"):
            return "greenhouse_heated"
    return "regular"


class RegionalProvider(TableProvider):
    """Origin multiplier plus transport emissions."""

    def get(self, ingredient: str, context: AdjustmentContext) -> float:
        try:
            origin = normalize_origin(context.origin)
            season = context.season or DEFAULT_KEY
            item = normalize_ingredient(ingredient)

            special = self._fetch(
                lambda s: s.special_case(item, origin, season),
                SPECIAL_CASES.get((item, origin, season)),
            )
            if special is not None:
                return float(special)

            method = production_method(item, origin, season, context.production)
            if method == "greenhouse_heated":
                return GREENHOUSE_HEATED_FACTOR
            if method == "greenhouse_unheated":
                return GREENHOUSE_UNHEATED_FACTOR

            value = self._fetch(lambda s: s.regional_factor(origin), REGIONAL_FACTORS.get(origin))
            if value is None:
                value = self._fetch(
                    lambda s: s.regional_factor(DEFAULT_KEY), REGIONAL_FACTORS.get(DEFAULT_KEY)
                )
            return float(value) if value is not None else 1.0
        except Exception as e:
            logger.warning(f"Regional factor failed for {ingredient!r}: {e}")
            return 1.0

    def transport_emissions(
        self, origin: str, destination: str, mode: str = DEFAULT_KEY
    ) -> float:
        """
        kg CO2e per kg of food moved from ``origin`` to ``destination``.

        distance (km) x mode factor (kg CO2e per tonne-km) / 1000
        """
        try:
            distance = self._fetch(
                lambda s: s.distance(origin, destination), DISTANCES.get((origin, destination))
            )
            if distance is None:
                distance = self._fetch(
                    lambda s: s.distance(origin, DEFAULT_KEY), DISTANCES.get((origin, DEFAULT_KEY))
                )
            if distance is None:
                distance = self._fetch(
                    lambda s: s.distance(DEFAULT_KEY, DEFAULT_KEY),
                    DISTANCES.get((DEFAULT_KEY, DEFAULT_KEY)),
                )
            if distance is None:
                distance = DEFAULT_DISTANCE_KM

            factor = self._fetch(lambda s: s.transport_factor(mode), TRANSPORT_FACTORS.get(mode))
            if factor is None:
                factor = DEFAULT_TRANSPORT_FACTOR

            return float(distance) * float(factor) / 1000
        except Exception as e:
            logger.warning(f"Transport emissions failed for {origin}->{destination}: {e}")
            return TRANSPORT_ERROR_FALLBACK
