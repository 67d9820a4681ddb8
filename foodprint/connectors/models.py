# -*- coding: utf-8 -*-
"""
Connector payload models.

Provider payloads name their fields differently; profiles map them onto
``ProviderFactor`` before anything reaches the store.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, PositiveFloat, field_validator


class ProviderFactor(BaseModel):
    """One emission factor as reported by an external provider."""

    category: str = Field(..., min_length=1, description="Food category")
    item: str = Field(..., min_length=1, description="Specific item")
    country: Optional[str] = Field(None, description="Country, None for global")
    value: PositiveFloat = Field(..., description="kg CO2e per kg")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("category", "item")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.lower().strip()

    @field_validator("country")
    @classmethod
    def normalize_country(cls, v: Optional[str]) -> Optional[str]:
        return v.lower().strip() if v else None
