"""Emission factor resolution."""

from foodprint.resolution.resolver import (
    DEFAULT_CATEGORY_FACTOR,
    HARDCODED_FACTORS,
    EmissionFactorResolver,
)

__all__ = ["DEFAULT_CATEGORY_FACTOR", "HARDCODED_FACTORS", "EmissionFactorResolver"]
