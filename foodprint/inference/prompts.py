# -*- coding: utf-8 -*-
"""Prompt templates for the enrichment service."""

from datetime import date
from typing import List, Optional

SYSTEM_PROMPT = (
    "You are a food scientist specializing in environmental impact assessment. "
    "Answer with JSON only."
)

ENRICHMENT_TEMPLATE = """Analyze the ingredients of this dish for a CO2 emissions estimate.

Dish: {dish_name}
Ingredients: {ingredients}

For EACH ingredient, in the same order, provide:
1. weight: typical grams of the ingredient in one serving of this dish
2. category: meat/seafood/dairy/vegetables/fruits/grains/legumes/nuts_and_seeds/oils/spices
3. subcategory: e.g. ruminant, leafy, shellfish, cheese
4. processing: fresh/frozen/canned/dried/processed
5. origin: local/regional/national/imported_ground/imported_sea/airFreighted
6. seasonality: in-season/near-season/out-of-season (today is {today})
7. production: regular/greenhouse_heated/greenhouse_unheated

JSON FORMAT ONLY:
{{
  "ingredients": [
    {{
      "name": "string",
      "weight": number,
      "category": "string",
      "subcategory": "string",
      "processing": "string",
      "origin": "string",
      "seasonality": "string",
      "production": "string"
    }}
  ]
}}
"""


def build_enrichment_prompt(
    dish_name: str, ingredients: List[str], today: Optional[date] = None
) -> str:
    return ENRICHMENT_TEMPLATE.format(
        dish_name=dish_name,
        ingredients=", ".join(ingredients),
        today=(today or date.today()).isoformat(),
    )
