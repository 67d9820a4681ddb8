# -*- coding: utf-8 -*-
"""
Taxonomy matcher: free-text ingredient -> (category, subcategory, item).

Tiers, first hit wins:
    1. exact item name                      confidence 1.0
    2. exact alias                          confidence 0.95
    3. whole-word containment               confidence 0.8
    4. ordered pattern rules                confidence per rule (0.7-0.8)
    5. unknown / unknown / default          confidence 0.3

The matcher never raises; anything it cannot place is ``unknown``.

Example:
    >>> matcher = TaxonomyMatcher()
    >>> matcher.match("Minced Beef").specific_item
    'beef'
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple

from foodprint.taxonomy.rules import DEFAULT_ITEM, PATTERN_RULES, PatternRule, first_matching_rule
from foodprint.taxonomy.tree import Taxonomy, TaxonomyNode, default_taxonomy

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"

EXACT_CONFIDENCE = 1.0
ALIAS_CONFIDENCE = 0.95
SUBSTRING_CONFIDENCE = 0.8
UNKNOWN_CONFIDENCE = 0.3

# Reverse containment ("oil" inside "olive oil") needs a minimally specific input
# and only looks at item names, never aliases
MIN_REVERSE_LENGTH = 3

_COUNT_PREFIX = re.compile(r"^\d+\s+")
_NON_WORD = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"\s+")


def _word_pattern(term: str) -> Pattern:
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)")


class MatchTier(str, Enum):
    EXACT = "exact"
    ALIAS = "alias"
    SUBSTRING = "substring"
    PATTERN = "pattern"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class MatchResult:
    """Classification of one raw ingredient string."""

    name: str
    category: str
    subcategory: str
    specific_item: str
    confidence: float
    tier: MatchTier
    node: Optional[TaxonomyNode] = None

    @property
    def is_unknown(self) -> bool:
        return self.tier == MatchTier.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "subcategory": self.subcategory,
            "specificItem": self.specific_item,
            "confidence": self.confidence,
            "matchType": self.tier.value,
        }


def normalize_ingredient(raw: str) -> str:
    """
    Canonical form used for matching.

    Lower-cases, strips accents and punctuation, drops a leading count
    ("2 eggs" -> "eggs") and collapses whitespace.
    """
    text = unicodedata.normalize("NFKD", str(raw))
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower().strip()
    text = _NON_WORD.sub(" ", text)
    text = _SPACES.sub(" ", text).strip()
    return _COUNT_PREFIX.sub("", text)


class TaxonomyMatcher:
    """Classifies ingredient strings against a taxonomy and a rule table."""

    def __init__(
        self,
        taxonomy: Optional[Taxonomy] = None,
        rules: Sequence[PatternRule] = PATTERN_RULES,
    ):
        self.taxonomy = taxonomy or default_taxonomy()
        self.rules = tuple(rules)

        self._names: Dict[str, TaxonomyNode] = {}
        self._aliases: Dict[str, TaxonomyNode] = {}
        # (term, word pattern, node) in declaration order
        self._terms: List[Tuple[str, Pattern, TaxonomyNode]] = []

        for node in self.taxonomy.items():
            self._names.setdefault(node.name, node)
            self._terms.append((node.name, _word_pattern(node.name), node))
            for alias in node.aliases:
                self._aliases.setdefault(alias, node)
                self._terms.append((alias, _word_pattern(alias), node))

    def match(self, raw_ingredient: str) -> MatchResult:
        try:
            text = normalize_ingredient(raw_ingredient)
        except Exception as e:
            logger.warning(f"Cannot normalize ingredient {raw_ingredient!r}: {e}")
            return self._unknown(str(raw_ingredient))

        if not text:
            return self._unknown(str(raw_ingredient))

        node = self._names.get(text)
        if node is not None:
            return self._from_node(raw_ingredient, node, EXACT_CONFIDENCE, MatchTier.EXACT)

        node = self._aliases.get(text)
        if node is not None:
            return self._from_node(raw_ingredient, node, ALIAS_CONFIDENCE, MatchTier.ALIAS)

        node = self._substring_match(text)
        if node is not None:
            return self._from_node(
                raw_ingredient, node, SUBSTRING_CONFIDENCE, MatchTier.SUBSTRING
            )

        rule = first_matching_rule(text, self.rules)
        if rule is not None:
            subcategory = rule.subcategory_for(text)
            item = rule.item_for(text)
            return MatchResult(
                name=raw_ingredient,
                category=rule.category,
                subcategory=subcategory,
                specific_item=item,
                confidence=rule.confidence,
                tier=MatchTier.PATTERN,
                node=self.taxonomy.most_specific(
                    rule.category, subcategory, None if item == DEFAULT_ITEM else item
                ),
            )

        logger.debug(f"No taxonomy match for {raw_ingredient!r}")
        return self._unknown(raw_ingredient)

    def categorize(self, raw_ingredient: str) -> Dict[str, Any]:
        """Plain-dict classification for API responses."""
        return self.match(raw_ingredient).to_dict()

    def _substring_match(self, text: str) -> Optional[TaxonomyNode]:
        """
        Longest known term found in the input as whole words; failing that,
        the shortest item name that contains the input as whole words. Ties
        keep declaration order.
        """
        best: Optional[Tuple[str, TaxonomyNode]] = None
        for term, pattern, node in self._terms:
            if pattern.search(text) and (best is None or len(term) > len(best[0])):
                best = (term, node)
        if best is not None:
            return best[1]

        if len(text) < MIN_REVERSE_LENGTH:
            return None

        pattern = _word_pattern(text)
        for name, node in self._names.items():
            if pattern.search(name) and (best is None or len(name) < len(best[0])):
                best = (name, node)
        return best[1] if best is not None else None

    @staticmethod
    def _from_node(
        raw: str, node: TaxonomyNode, confidence: float, tier: MatchTier
    ) -> MatchResult:
        return MatchResult(
            name=raw,
            category=node.category,
            subcategory=node.subcategory,
            specific_item=node.name,
            confidence=confidence,
            tier=tier,
            node=node,
        )

    @staticmethod
    def _unknown(raw: str) -> MatchResult:
        return MatchResult(
            name=raw,
            category=UNKNOWN,
            subcategory=UNKNOWN,
            specific_item=DEFAULT_ITEM,
            confidence=UNKNOWN_CONFIDENCE,
            tier=MatchTier.UNKNOWN,
        )
