# -*- coding: utf-8 -*-
"""
Dish-level aggregation.

Per ingredient:
    emissions = grams / 1000 * base factor * seasonal * regional * processing
    range     = emissions * (1 -/+ uncertainty)

Per dish:
    total = sum(emissions) * quantity      (ranges likewise)
    saved = total * waste prevention rate * perishable multiplier

The perishable multiplier only applies when some ingredient names a
perishable food. Rounding happens once, when the response is shaped:
totals to 2 decimals, ingredient emissions and ranges to 3, factors to 2.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from foodprint.calculation.uncertainty import confidence_level, overall_confidence, uncertainty_of
from foodprint.data.records import DataSource

logger = logging.getLogger(__name__)

WASTE_PREVENTION_RATE = 0.70
PERISHABLE_MULTIPLIER = 1.2
PERISHABLE_KEYWORDS: Tuple[str, ...] = (
    "bread", "banana", "strawberry", "fish", "salad", "milk", "cream", "mushroom",
)


class DetailLevel(str, Enum):
    BASIC = "basic"
    STANDARD = "standard"
    DETAILED = "detailed"


def round_half_up(value: float, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass
class IngredientEstimate:
    """
    Everything known about one ingredient of one request.

    Attributes:
        raw_name: Ingredient as given by the caller
        category: Resolved coarse category
        subcategory: Resolved sub-category
        specific_item: Item key used for factor resolution
        weight_grams: Estimated grams per serving
        emission_factor: kg CO2e per kg
        seasonal_factor: Seasonal multiplier
        regional_factor: Regional/production multiplier
        processing_factor: Processing multiplier
        waste_fraction: Share lost at the consumer stage
        data_source: Provenance of the estimate
    """

    raw_name: str
    category: str
    subcategory: str
    specific_item: str
    weight_grams: float
    emission_factor: float
    seasonal_factor: float = 1.0
    regional_factor: float = 1.0
    processing_factor: float = 1.0
    waste_fraction: float = 0.0
    data_source: DataSource = DataSource.SECONDARY_RESEARCH
    match_confidence: Optional[float] = None

    @property
    def data_quality(self) -> str:
        return self.data_source.value

    @property
    def emissions(self) -> float:
        """kg CO2e for one serving."""
        return (
            self.weight_grams / 1000
            * self.emission_factor
            * self.seasonal_factor
            * self.regional_factor
            * self.processing_factor
        )

    @property
    def uncertainty(self) -> float:
        return uncertainty_of(self.data_source)

    @property
    def range(self) -> Tuple[float, float]:
        emissions = self.emissions
        return emissions * (1 - self.uncertainty), emissions * (1 + self.uncertainty)

    @property
    def confidence(self) -> str:
        return confidence_level(self.uncertainty)

    def to_dict(self) -> Dict[str, Any]:
        lower, upper = self.range
        return {
            "name": self.raw_name,
            "weight": round_half_up(self.weight_grams, 2),
            "category": self.category,
            "emissions": round_half_up(self.emissions, 3),
            "range": {"lower": round_half_up(lower, 3), "upper": round_half_up(upper, 3)},
            "confidence": self.confidence,
            "factors": {
                "regional": round_half_up(self.regional_factor, 2),
                "seasonal": round_half_up(self.seasonal_factor, 2),
                "processing": round_half_up(self.processing_factor, 2),
            },
            "data_source": self.data_source.value,
            "waste_fraction": round_half_up(self.waste_fraction, 2),
        }


@dataclass
class EmissionsResult:
    """Unrounded dish-level result; ``to_response`` shapes and rounds it."""

    dish_name: str
    quantity: int
    per_ingredient: List[IngredientEstimate] = field(default_factory=list)
    total: float = 0.0
    saved: float = 0.0
    range: Tuple[float, float] = (0.0, 0.0)
    saved_range: Tuple[float, float] = (0.0, 0.0)
    confidence: str = "very low"
    perishable: bool = False

    def to_response(self, detail_level: str = DetailLevel.STANDARD.value) -> Dict[str, Any]:
        level = DetailLevel(detail_level)
        response: Dict[str, Any] = {
            "total": round_half_up(self.total, 2),
            "saved": round_half_up(self.saved, 2),
        }
        if level == DetailLevel.BASIC:
            return response

        response.update(
            {
                "range": {
                    "lower": round_half_up(self.range[0], 2),
                    "upper": round_half_up(self.range[1], 2),
                },
                "confidence": self.confidence,
                "saved_range": {
                    "lower": round_half_up(self.saved_range[0], 2),
                    "upper": round_half_up(self.saved_range[1], 2),
                },
                "dish": {
                    "name": self.dish_name,
                    "quantity": self.quantity,
                    "ingredient_count": len(self.per_ingredient),
                },
            }
        )
        if level == DetailLevel.DETAILED:
            response["ingredients"] = [e.to_dict() for e in self.per_ingredient]
        return response


def is_perishable(
    ingredients: Sequence[str], keywords: Sequence[str] = PERISHABLE_KEYWORDS
) -> bool:
    lowered = [name.lower() for name in ingredients]
    return any(keyword in name for name in lowered for keyword in keywords)


def aggregate(
    dish_name: str,
    estimates: Sequence[IngredientEstimate],
    quantity: int = 1,
    waste_prevention_rate: float = WASTE_PREVENTION_RATE,
    perishable_multiplier: float = PERISHABLE_MULTIPLIER,
    perishable_keywords: Sequence[str] = PERISHABLE_KEYWORDS,
) -> EmissionsResult:
    """
    Sum per-ingredient estimates into a dish result.

    Args:
        dish_name: Name of the dish
        estimates: One estimate per ingredient
        quantity: Number of servings
        waste_prevention_rate: Share of emissions avoided by rescuing food
        perishable_multiplier: Boost applied to perishable dishes
        perishable_keywords: Ingredient substrings that mark perishables

    Returns:
        EmissionsResult with unrounded values
    """
    estimates = list(estimates)
    total = sum(e.emissions for e in estimates) * quantity
    lower = sum(e.range[0] for e in estimates) * quantity
    upper = sum(e.range[1] for e in estimates) * quantity

    perishable = is_perishable([e.raw_name for e in estimates], perishable_keywords)
    saved_rate = waste_prevention_rate * (perishable_multiplier if perishable else 1.0)

    result = EmissionsResult(
        dish_name=dish_name,
        quantity=quantity,
        per_ingredient=estimates,
        total=total,
        saved=total * saved_rate,
        range=(lower, upper),
        saved_range=(lower * saved_rate, upper * saved_rate),
        confidence=overall_confidence(e.confidence for e in estimates),
        perishable=perishable,
    )
    logger.debug(
        f"Aggregated {dish_name!r}: {len(estimates)} ingredients, total={total:.4f} kg CO2e"
    )
    return result
