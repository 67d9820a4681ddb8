"""Optional inference enrichment of ingredient estimates."""

from foodprint.inference.client import InferenceClient, extract_json
from foodprint.inference.models import EnrichedIngredient, EnrichmentResponse
from foodprint.inference.prompts import build_enrichment_prompt

__all__ = [
    "InferenceClient",
    "extract_json",
    "EnrichedIngredient",
    "EnrichmentResponse",
    "build_enrichment_prompt",
]
