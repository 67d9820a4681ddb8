# -*- coding: utf-8 -*-
"""
Ordered pattern rules used when no catalogue name matches.

Rules are evaluated top to bottom and the first rule whose pattern matches
wins; inside a rule the first matching sub-category and specific-item
pattern win. Order is significant ("black pepper" is a spice, "pepper" a
vegetable), so any change to the table bumps ``RULES_VERSION``.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern, Sequence, Tuple

RULES_VERSION = "2.1.0"

DEFAULT_ITEM = "default"


@dataclass(frozen=True)
class PatternRule:
    """One category rule with its refinements."""

    category: str
    pattern: Pattern
    confidence: float
    default_subcategory: str
    subcategories: Tuple[Tuple[str, Pattern], ...] = ()
    items: Tuple[Tuple[str, Pattern], ...] = ()

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None

    def subcategory_for(self, text: str) -> str:
        for name, pattern in self.subcategories:
            if pattern.search(text):
                return name
        return self.default_subcategory

    def item_for(self, text: str) -> str:
        for name, pattern in self.items:
            if pattern.search(text):
                return name
        return DEFAULT_ITEM


def _re(expression: str) -> Pattern:
    return re.compile(expression, re.IGNORECASE)


def _rule(
    category: str,
    pattern: str,
    confidence: float,
    default_subcategory: str,
    subcategories: Sequence[Tuple[str, str]] = (),
    items: Sequence[Tuple[str, str]] = (),
) -> PatternRule:
    return PatternRule(
        category=category,
        pattern=_re(pattern),
        confidence=confidence,
        default_subcategory=default_subcategory,
        subcategories=tuple((name, _re(p)) for name, p in subcategories),
        items=tuple((name, _re(p)) for name, p in items),
    )


PATTERN_RULES: Tuple[PatternRule, ...] = (
    _rule(
        "spices",
        r"\bsalt\b|black pepper|white pepper|peppercorn|cumin|paprika|cinnamon|"
        r"oregano|thyme|turmeric|nutmeg|spice|dried herbs",
        0.7,
        "spices",
        items=[("salt", r"\bsalt\b"), ("pepper", r"pepper")],
    ),
    _rule(
        "meat",
        r"beef|steak|ground meat|burger|lamb|mutton|pork|\bham\b|bacon|chicken|"
        r"turkey|duck|goat|venison|rabbit|sausage|salami|jerky",
        0.8,
        "non_ruminant",
        subcategories=[
            ("ruminant", r"beef|steak|lamb|mutton|goat|venison"),
            ("processed", r"bacon|\bham\b|sausage|salami|jerky"),
        ],
        items=[
            ("beef", r"beef"),
            ("lamb", r"lamb|mutton"),
            ("pork", r"pork|\bham\b|bacon"),
            ("chicken", r"chicken"),
            ("turkey", r"turkey"),
            ("duck", r"duck"),
            ("goat", r"goat"),
            ("venison", r"venison"),
            ("rabbit", r"rabbit"),
        ],
    ),
    _rule(
        "seafood",
        r"fish|salmon|tuna|\bcod\b|tilapia|shrimp|prawn|crab|lobster|oyster|clam|"
        r"mussel|scallop|seafood",
        0.8,
        "fish_wild",
        subcategories=[
            ("fish_farmed", r"farmed|farm-raised"),
            ("shellfish", r"shrimp|prawn|crab|lobster"),
            ("molluscs", r"oyster|clam|mussel|scallop"),
            ("processed", r"canned|smoked|processed"),
        ],
        items=[
            ("salmon", r"salmon"),
            ("tuna", r"tuna"),
            ("shrimp", r"shrimp|prawn"),
            ("mussels", r"mussel"),
            ("cod", r"\bcod\b"),
            ("tilapia", r"tilapia"),
            ("fish", r"fish"),
        ],
    ),
    _rule(
        "dairy",
        r"milk|cheese|yogh?urt|butter|cream|dairy|\beggs?\b",
        0.8,
        "milk_products",
        subcategories=[
            ("plant_based", r"almond milk|soy milk|oat milk|plant milk"),
            ("cheese", r"cheese"),
            ("high_fat", r"butter|cream"),
            ("egg_products", r"\beggs?\b"),
        ],
        items=[
            ("plant_milk_almond", r"almond milk"),
            ("plant_milk_soy", r"soy milk"),
            ("plant_milk_oat", r"oat milk"),
            ("cheese", r"cheese"),
            ("butter", r"butter"),
            ("ice_cream", r"ice cream"),
            ("cream", r"cream"),
            ("eggs", r"\beggs?\b"),
            ("milk", r"milk"),
            ("yogurt", r"yogh?urt"),
        ],
    ),
    _rule(
        "vegetables",
        r"tomato|potato|onion|carrot|lettuce|spinach|broccoli|cauliflower|pepper|"
        r"eggplant|aubergine|cucumber|zucchini|courgette|garlic|mushroom|cabbage|"
        r"kale|leek|vegetable",
        0.8,
        "other",
        subcategories=[
            ("leafy", r"lettuce|spinach|kale|cabbage|chard|salad greens"),
            ("root", r"potato|carrot|turnip|radish|beet|root"),
            ("fruit_vegetables", r"tomato|pepper|eggplant|aubergine|cucumber|zucchini|courgette|squash"),
            ("allium", r"onion|garlic|leek|shallot"),
        ],
        items=[
            ("tomatoes", r"tomato"),
            ("potatoes", r"potato"),
            ("onions", r"onion"),
            ("carrots", r"carrot"),
            ("lettuce", r"lettuce"),
            ("spinach", r"spinach"),
        ],
    ),
    _rule(
        "fruits",
        r"apple|banana|orange|mango|strawberr|grape|peach|pear|pineapple|berry|"
        r"berries|melon|lemon|lime|fruit",
        0.8,
        "other",
        subcategories=[
            ("berries", r"berry|berries|strawberr"),
            ("citrus", r"orange|lemon|lime|grapefruit"),
            ("tropical", r"banana|mango|pineapple|papaya"),
            ("pome", r"apple|pear"),
        ],
        items=[
            ("apples", r"apple"),
            ("bananas", r"banana"),
            ("oranges", r"orange"),
            ("strawberries", r"strawberr"),
            ("grapes", r"grape"),
        ],
    ),
    _rule(
        "grains",
        r"rice|wheat|flour|bread|toast|pasta|noodle|\boats?\b|oatmeal|barley|quinoa|"
        r"millet|cereal|grain",
        0.7,
        "cereals",
        items=[
            ("rice", r"rice"),
            ("wheat", r"wheat|flour"),
            ("bread", r"bread|toast"),
            ("pasta", r"pasta|noodle"),
            ("oats", r"\boats?\b|oatmeal"),
            ("barley", r"barley"),
            ("quinoa", r"quinoa"),
            ("millet", r"millet"),
        ],
    ),
    _rule(
        "legumes",
        r"bean|lentil|chickpea|\bpeas?\b|tofu|tempeh|\bsoy|edamame|legume",
        0.8,
        "pulses",
        subcategories=[("soy_products", r"tofu|tempeh|\bsoy|edamame")],
        items=[
            ("lentils", r"lentil"),
            ("chickpeas", r"chickpea"),
            ("beans", r"bean"),
            ("peas", r"\bpeas?\b"),
            ("tofu", r"tofu"),
            ("tempeh", r"tempeh"),
            ("soybeans", r"\bsoy|edamame"),
        ],
    ),
    _rule(
        "nuts_and_seeds",
        r"almond|walnut|cashew|pistachio|peanut|hazelnut|seed|\bnuts?\b",
        0.7,
        "nuts",
    ),
    _rule(
        "oils",
        r"\boil\b|\bfat\b|lard|ghee",
        0.7,
        "vegetable_oils",
    ),
)


def first_matching_rule(
    text: str, rules: Sequence[PatternRule] = PATTERN_RULES
) -> Optional[PatternRule]:
    """First rule (in table order) whose pattern matches ``text``."""
    for rule in rules:
        if rule.matches(text):
            return rule
    return None
