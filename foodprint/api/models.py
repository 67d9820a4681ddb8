# -*- coding: utf-8 -*-
"""Request and response schemas of the emissions API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CalculateRequest(BaseModel):
    """
    Body of POST /emissions/calculate.

    Fields are untyped: the engine validates the request and every
    problem comes back as a 400.
    """

    dish_name: Optional[Any] = Field(default=None, description="Name of the dish")
    ingredients: Optional[Any] = Field(default=None, description="List of ingredient names")
    quantity: Any = Field(default=1, description="Number of servings")
    country: str = Field(default="global", description="Country of consumption")
    detail_level: str = Field(default="standard", description="basic, standard or detailed")

    model_config = {
        "json_schema_extra": {
            "example": {
                "dish_name": "Beef Rice Bowl",
                "ingredients": ["beef", "rice"],
                "quantity": 1,
                "country": "global",
                "detail_level": "standard",
            }
        }
    }


class EmissionFactorResponse(BaseModel):
    category: str
    item: str
    country: str
    value: float
    tier: str
    source: str
    data_source: str


class CategorizeResponse(BaseModel):
    name: str
    category: str
    subcategory: str
    specificItem: str
    confidence: float
    matchType: str


class PortionSizeResponse(BaseModel):
    ingredient: str
    dish_name: str
    grams: float


class SeasonalityResponse(BaseModel):
    ingredient: str
    country: str
    date: str
    season: str
    factor: float


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    rules_version: str


class ErrorResponse(BaseModel):
    error_type: str
    error_code: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str
