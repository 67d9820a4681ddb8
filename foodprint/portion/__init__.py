"""Portion size estimation."""

from foodprint.portion.estimator import (
    DEFAULT_PORTION_GRAMS,
    PortionEstimator,
    extract_count,
    is_main_ingredient,
)

__all__ = ["DEFAULT_PORTION_GRAMS", "PortionEstimator", "extract_count", "is_main_ingredient"]
