"""Uncertainty and dish-level aggregation."""

from foodprint.calculation.aggregator import (
    PERISHABLE_KEYWORDS,
    PERISHABLE_MULTIPLIER,
    WASTE_PREVENTION_RATE,
    DetailLevel,
    EmissionsResult,
    IngredientEstimate,
    aggregate,
    is_perishable,
    round_half_up,
)
from foodprint.calculation.uncertainty import (
    ConfidenceLevel,
    confidence_level,
    overall_confidence,
    uncertainty_of,
)

__all__ = [
    "PERISHABLE_KEYWORDS",
    "PERISHABLE_MULTIPLIER",
    "WASTE_PREVENTION_RATE",
    "DetailLevel",
    "EmissionsResult",
    "IngredientEstimate",
    "aggregate",
    "is_perishable",
    "round_half_up",
    "ConfidenceLevel",
    "confidence_level",
    "overall_confidence",
    "uncertainty_of",
]
