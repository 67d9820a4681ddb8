# -*- coding: utf-8 -*-
"""
Portion size estimation in grams.

Sizes are keyed by the ingredient's resolved category, refined by
sub-category or by keywords in the raw name, and most of them depend on
whether the ingredient is the main component of the dish.

Example:
    >>> estimator = PortionEstimator()
    >>> estimator.estimate("beef", "Beef Rice Bowl")
    180.0
"""

import logging
import re
from typing import Optional

from foodprint.taxonomy.matcher import MatchResult, TaxonomyMatcher

logger = logging.getLogger(__name__)

DEFAULT_PORTION_GRAMS = 50.0

_COUNT_PREFIX = re.compile(r"^(\d+)\s")

MAIN_INGREDIENT_PATTERNS = (
    re.compile(r"chicken\s+\w+", re.IGNORECASE),
    re.compile(r"beef\s+\w+", re.IGNORECASE),
    re.compile(r"\w+\s+soup", re.IGNORECASE),
    re.compile(r"\w+\s+salad", re.IGNORECASE),
    re.compile(r"\w+\s+curry", re.IGNORECASE),
    re.compile(r"\w+\s+pasta", re.IGNORECASE),
    re.compile(r"\w+\s+rice", re.IGNORECASE),
)


def extract_count(text: str) -> Optional[int]:
    """Leading integer count ("3 eggs" -> 3), if any."""
    match = _COUNT_PREFIX.match(text.strip())
    return int(match.group(1)) if match else None


def is_main_ingredient(ingredient: str, dish_name: str) -> bool:
    """
    Whether ``ingredient`` is a main component of ``dish_name``.

    True when the dish name contains the ingredient, or when a
    "<x> soup" / "chicken <x>" style phrase in the dish contains it.
    """
    ingredient = ingredient.lower().strip()
    dish = (dish_name or "").lower()
    if not ingredient or not dish:
        return False
    if ingredient in dish:
        return True

    for pattern in MAIN_INGREDIENT_PATTERNS:
        match = pattern.search(dish)
        if match and ingredient in match.group(0):
            return True
    return False


class PortionEstimator:
    """Estimates grams per serving for one ingredient of a dish."""

    def __init__(self, matcher: Optional[TaxonomyMatcher] = None):
        self.matcher = matcher or TaxonomyMatcher()

    def estimate(
        self,
        ingredient: str,
        dish_name: str = "",
        match: Optional[MatchResult] = None,
    ) -> float:
        """
        Estimate the portion of ``ingredient`` in grams.

        Args:
            ingredient: Raw ingredient string
            dish_name: Dish the ingredient belongs to
            match: Pre-computed classification (classified here if omitted)

        Returns:
            Grams; ``DEFAULT_PORTION_GRAMS`` on any internal error
        """
        try:
            match = match or self.matcher.match(ingredient)
            return float(self._estimate(ingredient.lower().strip(), dish_name, match))
        except Exception as e:
            logger.warning(f"Portion estimate failed for {ingredient!r}: {e}")
            return DEFAULT_PORTION_GRAMS

    def _estimate(self, name: str, dish_name: str, match: MatchResult) -> float:
        main = is_main_ingredient(name, dish_name)
        category = match.category
        subcategory = match.subcategory

        if category == "meat":
            if subcategory == "ruminant":
                return 180 if main else 120
            return 150 if main else 100

        if category == "seafood":
            if subcategory == "shellfish":
                return 120 if main else 80
            return 150 if main else 100

        if category == "dairy":
            if re.search(r"milk|yogh?urt", name):
                return 200
            if "cheese" in name:
                return 50 if main else 30
            if re.search(r"butter|cream", name):
                return 15
            if "egg" in name:
                return (extract_count(name) or 1) * 50
            return 50

        if category == "grains":
            if re.search(r"rice|pasta|potato", name):
                return 150 if main else 100
            if re.search(r"bread|toast", name):
                return (extract_count(name) or 2) * 30
            return 100 if main else 75

        if category == "vegetables":
            if subcategory == "leafy":
                return 60
            if subcategory == "root":
                return 100
            return 80

        if category == "fruits":
            if re.search(r"berry|berries", name):
                return 80
            if "melon" in name:
                return 150
            return (extract_count(name) or 1) * 120

        if category == "legumes":
            return 150 if main else 80

        if category == "nuts_and_seeds":
            return 30

        if category == "oils":
            return 15

        if category == "spices":
            if re.search(r"salt|pepper", name):
                return 1
            return 3

        return DEFAULT_PORTION_GRAMS
