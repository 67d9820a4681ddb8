# -*- coding: utf-8 -*-
"""
Seasonality: determines the season label of an ingredient and its factor.

Season labels: inSeason, nearSeason, outOfSeason, outOfSeason_heated
(out-of-season greenhouse crops grown nearby) and default.
"""

import logging
import re
from datetime import date
from typing import List, Optional

from foodprint.adjustments.base import AdjustmentContext, TableProvider
from foodprint.data.records import GLOBAL_COUNTRY, SeasonalCalendar
from foodprint.data.reference_data import DEFAULT_KEY, SEASONAL_CALENDARS, SEASONAL_FACTORS
from foodprint.taxonomy.matcher import normalize_ingredient

logger = logging.getLogger(__name__)

IN_SEASON = "inSeason"
NEAR_SEASON = "nearSeason"
OUT_OF_SEASON = "outOfSeason"
OUT_OF_SEASON_HEATED = "outOfSeason_heated"

PRODUCE_CATEGORIES = ("vegetables", "fruits")

GREENHOUSE_CROPS = re.compile(r"tomato|cucumber|pepper|lettuce|eggplant|zucchini", re.IGNORECASE)
NEARBY_ORIGINS = ("local", "regional")

GREENHOUSE_HEATED = "greenhouse_heated"


def needs_heated_greenhouse(ingredient: str, season: str, context: AdjustmentContext) -> bool:
    """
    Out-of-season greenhouse vegetables grown nearby come from heated
    greenhouses; imports are assumed to come from the other hemisphere.
    An explicit production method overrides the origin heuristic.
    """
    if season != OUT_OF_SEASON or context.category != "vegetables":
        return False
    if not GREENHOUSE_CROPS.search(ingredient):
        return False
    if context.production:
        return context.production == GREENHOUSE_HEATED
    return context.origin in NEARBY_ORIGINS


class SeasonalProvider(TableProvider):
    """Seasonal multiplier from the produce calendar of a country."""

    def determine_season(
        self,
        ingredient: str,
        country: str = GLOBAL_COUNTRY,
        on_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> str:
        """
        Season label of ``ingredient`` in ``country`` on ``on_date``.

        Calendar items are matched exactly first, then by containment
        either way. Unlisted fruit and vegetables count as out of season;
        anything else is ``default``.
        """
        on_date = on_date or date.today()
        month = on_date.month
        try:
            name = normalize_ingredient(ingredient)
            calendars = self._calendars((country or GLOBAL_COUNTRY).lower())

            entry = next((c for c in calendars if c.item == name), None)
            if entry is None:
                entry = next(
                    (c for c in calendars if c.item in name or (name and name in c.item)), None
                )

            if entry is not None:
                if month in entry.in_season:
                    return IN_SEASON
                if month in entry.near_season:
                    return NEAR_SEASON
                return OUT_OF_SEASON
        except Exception as e:
            logger.warning(f"Season lookup failed for {ingredient!r}: {e}")
            return DEFAULT_KEY

        if category in PRODUCE_CATEGORIES:
            return OUT_OF_SEASON
        return DEFAULT_KEY

    def _calendars(self, country: str) -> List[SeasonalCalendar]:
        bundled = [
            SeasonalCalendar(c, i, tuple(ins), tuple(near))
            for (c, i), (ins, near) in SEASONAL_CALENDARS.items()
        ]

        def pick(code: str) -> List[SeasonalCalendar]:
            if self.store is None:
                return [c for c in bundled if c.country == code]
            try:
                return self.store.calendars(code)
            except Exception as e:
                logger.warning(f"Calendar lookup failed, using bundled calendars: {e}")
                return [c for c in bundled if c.country == code]

        calendars = pick(country)
        if not calendars and country != GLOBAL_COUNTRY:
            calendars = pick(GLOBAL_COUNTRY)
        return calendars

    def factor_for(self, season: str) -> float:
        """Multiplier for a season label: season -> default -> 1.0."""
        value = self._fetch(lambda s: s.seasonal_factor(season), SEASONAL_FACTORS.get(season))
        if value is None:
            value = self._fetch(
                lambda s: s.seasonal_factor(DEFAULT_KEY), SEASONAL_FACTORS.get(DEFAULT_KEY)
            )
        return float(value) if value is not None else 1.0

    def get(self, ingredient: str, context: AdjustmentContext) -> float:
        season = context.season or self.determine_season(
            ingredient, context.country, context.on_date, context.category
        )
        if needs_heated_greenhouse(ingredient, season, context):
            return self.factor_for(OUT_OF_SEASON_HEATED)
        return self.factor_for(season)
