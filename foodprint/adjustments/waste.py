# -*- coding: utf-8 -*-
"""Share of an ingredient lost at a supply-chain stage."""

import logging

from foodprint.adjustments.base import AdjustmentContext, TableProvider
from foodprint.data.reference_data import DEFAULT_KEY, WASTE_FACTORS

logger = logging.getLogger(__name__)

DEFAULT_WASTE_FRACTION = 0.1


class WasteProvider(TableProvider):
    """(category, stage) -> (default, stage) -> 0.1"""

    def get(self, ingredient: str, context: AdjustmentContext) -> float:
        try:
            stage = context.stage
            for category in (context.category, DEFAULT_KEY):
                value = self._fetch(
                    lambda s, c=category: s.waste_fraction(c, stage),
                    WASTE_FACTORS.get(category, {}).get(stage),
                )
                if value is not None:
                    return float(value)
            return DEFAULT_WASTE_FRACTION
        except Exception as e:
            logger.warning(f"Waste fraction failed for {ingredient!r}: {e}")
            return DEFAULT_WASTE_FRACTION
