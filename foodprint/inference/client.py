# -*- coding: utf-8 -*-
"""
Inference enrichment client.

Asks an OpenAI-compatible chat-completions endpoint to estimate weight,
category, processing, origin and seasonality for every ingredient of a
dish. The contract is strict: ``enrich`` returns a list with exactly one
validated entry per requested ingredient, or None. It never raises.
"""

import json
import logging
import re
from datetime import date
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from foodprint.config.schemas import InferenceConfig
from foodprint.inference.models import EnrichedIngredient, EnrichmentResponse
from foodprint.inference.prompts import SYSTEM_PROMPT, build_enrichment_prompt
from foodprint.taxonomy.matcher import normalize_ingredient

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def extract_json(text: str) -> Optional[Dict[str, Any]]:
    """First-to-last brace span of ``text`` parsed as a JSON object."""
    if not text:
        return None
    match = _JSON_BLOCK.search(text)
    candidate = match.group(0) if match else text
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


class InferenceClient:
    """Client for the enrichment service."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        model: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        temperature: float = 0.2,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    @classmethod
    def from_config(cls, config: InferenceConfig) -> Optional["InferenceClient"]:
        """None when enrichment is disabled or has no credentials."""
        if not config.is_configured:
            return None
        return cls(
            api_url=config.api_url,
            api_key=config.api_key,
            model=config.model,
            timeout=config.timeout_seconds,
            temperature=config.temperature,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_url)

    def enrich(
        self,
        dish_name: str,
        ingredients: List[str],
        today: Optional[date] = None,
        timeout: Optional[float] = None,
    ) -> Optional[List[EnrichedIngredient]]:
        """
        Estimate every ingredient of a dish.

        Args:
            dish_name: Name of the dish
            ingredients: Raw ingredient strings
            today: Date given to the service for seasonality
            timeout: Seconds left for the call; never exceeds the client timeout

        Returns:
            One EnrichedIngredient per input ingredient, in input order,
            or None when the service is unavailable or its answer is
            incomplete or malformed
        """
        if not self.is_configured or not ingredients:
            return None

        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_enrichment_prompt(dish_name, ingredients, today)},
            ],
        }

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout if timeout is None else min(self.timeout, timeout),
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            logger.warning(f"Enrichment request failed: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Enrichment response is not JSON: {e}")
            return None

        text = self._message_text(body)
        data = extract_json(text) if text else None
        if data is None:
            logger.warning("Enrichment response carried no JSON object")
            return None

        try:
            parsed = EnrichmentResponse.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(f"Enrichment response has unexpected shape: {e.error_count()} errors")
            return None

        return self._align(ingredients, parsed.ingredients)

    @staticmethod
    def _message_text(body: Any) -> Optional[str]:
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
        return content if isinstance(content, str) else None

    @staticmethod
    def _align(
        requested: List[str], enriched: List[EnrichedIngredient]
    ) -> Optional[List[EnrichedIngredient]]:
        """
        Pair answers with requested ingredients, by name when every name
        matches and by position otherwise. A count mismatch rejects the
        whole answer.
        """
        if len(enriched) != len(requested):
            logger.warning(
                f"Enrichment returned {len(enriched)} ingredients for {len(requested)} requested"
            )
            return None

        by_name = {normalize_ingredient(item.name): item for item in enriched}
        keys = [normalize_ingredient(raw) for raw in requested]
        if all(key in by_name for key in keys):
            return [by_name[key] for key in keys]
        return list(enriched)
