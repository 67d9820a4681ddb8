# -*- coding: utf-8 -*-
"""Processing-method multiplier: (method, category) -> (method, default) -> (default, default) -> 1.0."""

import logging
import re
from typing import Optional

from foodprint.adjustments.base import AdjustmentContext, TableProvider
from foodprint.data.reference_data import DEFAULT_KEY, PROCESSING_FACTORS

logger = logging.getLogger(__name__)

_METHOD_ALIASES = {
    "minimally processed": "processed_minimal",
    "minimal": "processed_minimal",
    "moderately processed": "processed_moderate",
    "heavily processed": "processed_heavy",
    "highly processed": "processed_heavy",
    "ultra processed": "processed_heavy",
    "tinned": "canned",
    "dehydrated": "dried",
    "uncooked": "raw",
}


def normalize_processing(method: Optional[str]) -> str:
    if not method:
        return DEFAULT_KEY
    key = re.sub(r"[_\-\s]+", " ", str(method).lower()).strip()
    return _METHOD_ALIASES.get(key, key.replace(" ", "_"))


class ProcessingProvider(TableProvider):
    def get(self, ingredient: str, context: AdjustmentContext) -> float:
        try:
            method = normalize_processing(context.processing)
            category = context.category

            for key in ((method, category), (method, DEFAULT_KEY), (DEFAULT_KEY, DEFAULT_KEY)):
                value = self._fetch(
                    lambda s, k=key: s.processing_factor(*k), PROCESSING_FACTORS.get(key)
                )
                if value is not None:
                    return float(value)
            return 1.0
        except Exception as e:
            logger.warning(f"Processing factor failed for {ingredient!r}: {e}")
            return 1.0
