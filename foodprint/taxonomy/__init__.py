"""Food taxonomy and ingredient classification."""

from foodprint.taxonomy.matcher import (
    MatchResult,
    MatchTier,
    TaxonomyMatcher,
    normalize_ingredient,
)
from foodprint.taxonomy.rules import PATTERN_RULES, RULES_VERSION, PatternRule
from foodprint.taxonomy.tree import (
    Taxonomy,
    TaxonomyLevel,
    TaxonomyNode,
    Uncertainty,
    default_taxonomy,
)

__all__ = [
    "MatchResult",
    "MatchTier",
    "TaxonomyMatcher",
    "normalize_ingredient",
    "PATTERN_RULES",
    "RULES_VERSION",
    "PatternRule",
    "Taxonomy",
    "TaxonomyLevel",
    "TaxonomyNode",
    "Uncertainty",
    "default_taxonomy",
]
