# -*- coding: utf-8 -*-
"""Response shape expected from the enrichment service."""

import re
from typing import List, Optional

from pydantic import BaseModel, Field, PositiveFloat, field_validator

# Free-text category labels the service tends to use
_CATEGORY_ALIASES = {
    "grain": "grains",
    "cereal": "grains",
    "cereals": "grains",
    "vegetable": "vegetables",
    "veg": "vegetables",
    "fruit": "fruits",
    "oil": "oils",
    "fat": "oils",
    "fats": "oils",
    "spice": "spices",
    "herb": "spices",
    "herbs": "spices",
    "legume": "legumes",
    "pulse": "legumes",
    "pulses": "legumes",
    "nut": "nuts_and_seeds",
    "nuts": "nuts_and_seeds",
    "seeds": "nuts_and_seeds",
    "fish": "seafood",
    "egg": "dairy",
    "eggs": "dairy",
}

_SEASON_ALIASES = {
    "in season": "inSeason",
    "near season": "nearSeason",
    "out of season": "outOfSeason",
}


class EnrichedIngredient(BaseModel):
    """One ingredient as estimated by the enrichment service."""

    name: str = Field(..., min_length=1)
    weight: PositiveFloat = Field(..., description="Grams of the ingredient in one serving")
    category: str = Field(..., min_length=1)
    subcategory: Optional[str] = None
    processing: str = "fresh"
    origin: str = "regional"
    seasonality: Optional[str] = None
    production: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        key = re.sub(r"[\s\-]+", "_", v.strip().lower())
        return _CATEGORY_ALIASES.get(key, key)

    @field_validator("subcategory", "processing", "origin", "production")
    @classmethod
    def lower(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("seasonality")
    @classmethod
    def normalize_seasonality(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        key = re.sub(r"[_\-\s]+", " ", v.strip().lower())
        return _SEASON_ALIASES.get(key)


class EnrichmentResponse(BaseModel):
    ingredients: List[EnrichedIngredient]
