# -*- coding: utf-8 -*-
"""
foodprint/taxonomy/tree.py

Reference food taxonomy: typology -> sub-typology -> item.

Typologies are the coarse categories used everywhere else (meat, dairy, ...),
sub-typologies refine them (ruminant, leafy, shellfish, ...) and items are
specific foods with their aliases. Every node carries a median emission
factor in kg CO2e per kg (SU-EATABLE LIFE medians where published) and a
low/high uncertainty flag. The tree is built once and never mutated.

Example:
    >>> taxonomy = default_taxonomy()
    >>> beef = taxonomy.item("beef")
    >>> beef.parent.name, beef.parent.parent.name
    ('ruminant', 'meat')
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterator, List, Optional, Tuple


# ==================== ENUMERATIONS ====================

class TaxonomyLevel(str, Enum):
    ITEM = "item"
    SUBTYPOLOGY = "subtypology"
    TYPOLOGY = "typology"


class Uncertainty(str, Enum):
    LOW = "low"
    HIGH = "high"


# ==================== NODES ====================

@dataclass(frozen=True)
class TaxonomyNode:
    """
    One node of the taxonomy.

    Attributes:
        name: Node name (item names are the store's item keys)
        level: item, subtypology or typology
        category: Typology this node rolls up to
        emission_factor: Median kg CO2e per kg
        uncertainty: Data uncertainty flag
        parent: Enclosing node (None for typologies)
        aliases: Alternative names (items only)
    """

    name: str
    level: TaxonomyLevel
    category: str
    emission_factor: float
    uncertainty: Uncertainty = Uncertainty.LOW
    parent: Optional["TaxonomyNode"] = field(default=None, repr=False, compare=False)
    aliases: Tuple[str, ...] = ()

    @property
    def subcategory(self) -> str:
        if self.level == TaxonomyLevel.ITEM and self.parent is not None:
            return self.parent.name
        if self.level == TaxonomyLevel.SUBTYPOLOGY:
            return self.name
        return self.category

    def names(self) -> Tuple[str, ...]:
        """Name followed by aliases."""
        return (self.name,) + self.aliases

    def lineage(self) -> List["TaxonomyNode"]:
        """This node and its ancestors, nearest first."""
        chain = []
        node: Optional[TaxonomyNode] = self
        while node is not None:
            chain.append(node)
            node = node.parent
        return chain


# ==================== REFERENCE DATA ====================

# typology -> (factor, uncertainty)
TYPOLOGIES: Dict[str, Tuple[float, str]] = {
    "meat": (4.2, "low"),
    "seafood": (8.0, "low"),
    "dairy": (2.8, "low"),
    "vegetables": (0.4, "low"),
    "fruits": (0.5, "low"),
    "grains": (1.4, "low"),
    "legumes": (0.8, "low"),
    "nuts_and_seeds": (2.3, "high"),
    "oils": (4.2, "low"),
    "spices": (0.1, "high"),
}

# (typology, subtypology) -> (factor, uncertainty)
SUBTYPOLOGIES: Dict[Tuple[str, str], Tuple[float, str]] = {
    ("meat", "ruminant"): (22.0, "low"),
    ("meat", "non_ruminant"): (4.2, "low"),
    ("meat", "processed"): (7.2, "high"),
    ("seafood", "fish_wild"): (8.0, "low"),
    ("seafood", "fish_farmed"): (8.0, "high"),
    ("seafood", "shellfish"): (18.2, "low"),
    ("seafood", "molluscs"): (9.5, "high"),
    ("dairy", "milk_products"): (2.8, "low"),
    ("dairy", "cheese"): (8.6, "low"),
    ("dairy", "high_fat"): (9.0, "low"),
    ("dairy", "egg_products"): (4.5, "high"),
    ("dairy", "plant_based"): (0.9, "high"),
    ("vegetables", "fruit_vegetables"): (0.7, "low"),
    ("vegetables", "leafy"): (0.4, "low"),
    ("vegetables", "root"): (0.3, "low"),
    ("vegetables", "allium"): (0.3, "low"),
    ("fruits", "pome"): (0.3, "low"),
    ("fruits", "citrus"): (0.4, "low"),
    ("fruits", "tropical"): (0.7, "low"),
    ("fruits", "berries"): (1.1, "high"),
    ("grains", "cereals"): (1.4, "low"),
    ("legumes", "pulses"): (0.8, "low"),
    ("legumes", "soy_products"): (2.0, "low"),
    ("nuts_and_seeds", "nuts"): (2.3, "high"),
    ("oils", "vegetable_oils"): (4.2, "low"),
}

# item -> (typology, subtypology, factor, uncertainty, aliases)
ITEMS: Dict[str, Tuple[str, str, float, str, Tuple[str, ...]]] = {
    "beef": ("meat", "ruminant", 25.3, "low",
             ("ground beef", "minced beef", "hamburger meat", "beef mince", "steak")),
    "lamb": ("meat", "ruminant", 39.2, "high", ("mutton", "lamb chops")),
    "pork": ("meat", "non_ruminant", 7.2, "high", ("pork chops", "pork loin")),
    "chicken": ("meat", "non_ruminant", 3.7, "low",
                ("chicken breast", "chicken fillets", "chicken cutlets", "boneless chicken")),
    "salmon": ("seafood", "fish_farmed", 11.9, "low", ("salmon fillet",)),
    "tuna": ("seafood", "fish_wild", 6.1, "low", ("tuna steak",)),
    "fish": ("seafood", "fish_wild", 5.4, "high", ("white fish",)),
    "shrimp": ("seafood", "shellfish", 18.2, "high", ("shrimps", "prawns", "prawn")),
    "mussels": ("seafood", "molluscs", 9.5, "high", ("mussel",)),
    "milk": ("dairy", "milk_products", 1.4, "low", ("whole milk", "skim milk")),
    "cheese": ("dairy", "cheese", 8.6, "low", ("cheddar", "mozzarella", "parmesan")),
    "butter": ("dairy", "high_fat", 9.0, "low", ()),
    "yogurt": ("dairy", "milk_products", 1.9, "low", ("yoghurt", "greek yogurt")),
    "plant_milk_almond": ("dairy", "plant_based", 0.7, "high", ("almond milk",)),
    "plant_milk_soy": ("dairy", "plant_based", 1.0, "high", ("soy milk", "soya milk")),
    "plant_milk_oat": ("dairy", "plant_based", 0.9, "high", ("oat milk",)),
    "tomatoes": ("vegetables", "fruit_vegetables", 0.7, "low",
                 ("tomato", "cherry tomato", "plum tomato")),
    "potatoes": ("vegetables", "root", 0.3, "low", ("potato",)),
    "carrots": ("vegetables", "root", 0.3, "low", ("carrot",)),
    "onions": ("vegetables", "allium", 0.3, "low", ("onion",)),
    "lettuce": ("vegetables", "leafy", 0.4, "low", ("romaine", "iceberg lettuce")),
    "spinach": ("vegetables", "leafy", 0.5, "high", ("baby spinach",)),
    "apples": ("fruits", "pome", 0.3, "low", ("apple", "green apple", "red apple")),
    "bananas": ("fruits", "tropical", 0.7, "high", ("banana",)),
    "oranges": ("fruits", "citrus", 0.4, "high", ("orange",)),
    "strawberries": ("fruits", "berries", 1.1, "high", ("strawberry",)),
    "rice": ("grains", "cereals", 2.7, "low", ("white rice", "brown rice", "basmati rice")),
    "wheat": ("grains", "cereals", 1.4, "high", ("flour", "wheat flour")),
    "pasta": ("grains", "cereals", 1.3, "high", ("spaghetti", "penne")),
    "bread": ("grains", "cereals", 1.5, "high", ("toast", "sourdough")),
    "beans": ("legumes", "pulses", 0.8, "low", ("kidney beans", "black beans")),
    "lentils": ("legumes", "pulses", 0.9, "low", ("lentil", "red lentils")),
    "chickpeas": ("legumes", "pulses", 0.8, "low", ("chickpea", "garbanzo beans")),
    "tofu": ("legumes", "soy_products", 2.0, "high", ("bean curd",)),
    "peanut butter": ("nuts_and_seeds", "nuts", 2.9, "high", ("peanut paste",)),
    "olive oil": ("oils", "vegetable_oils", 5.4, "low", ("extra virgin olive oil",)),
    "vegetable oil": ("oils", "vegetable_oils", 3.1, "high", ("sunflower oil", "canola oil")),
}


# ==================== TREE ====================

class Taxonomy:
    """Read-only index over a built set of TaxonomyNodes."""

    def __init__(self, nodes: List[TaxonomyNode]):
        self._nodes = tuple(nodes)
        self._typologies: Dict[str, TaxonomyNode] = {}
        self._subtypologies: Dict[Tuple[str, str], TaxonomyNode] = {}
        self._items: Dict[str, TaxonomyNode] = {}

        for node in self._nodes:
            if node.level == TaxonomyLevel.TYPOLOGY:
                self._typologies[node.name] = node
            elif node.level == TaxonomyLevel.SUBTYPOLOGY:
                self._subtypologies[(node.category, node.name)] = node
            else:
                self._items[node.name] = node

    @classmethod
    def build(
        cls,
        typologies: Dict[str, Tuple[float, str]],
        subtypologies: Dict[Tuple[str, str], Tuple[float, str]],
        items: Dict[str, Tuple[str, str, float, str, Tuple[str, ...]]],
    ) -> "Taxonomy":
        """Build a taxonomy from declarative tables, linking parents upward."""
        nodes: List[TaxonomyNode] = []
        typology_nodes: Dict[str, TaxonomyNode] = {}
        for name, (factor, uncertainty) in typologies.items():
            node = TaxonomyNode(
                name=name,
                level=TaxonomyLevel.TYPOLOGY,
                category=name,
                emission_factor=factor,
                uncertainty=Uncertainty(uncertainty),
            )
            typology_nodes[name] = node
            nodes.append(node)

        sub_nodes: Dict[Tuple[str, str], TaxonomyNode] = {}
        for (category, name), (factor, uncertainty) in subtypologies.items():
            node = TaxonomyNode(
                name=name,
                level=TaxonomyLevel.SUBTYPOLOGY,
                category=category,
                emission_factor=factor,
                uncertainty=Uncertainty(uncertainty),
                parent=typology_nodes[category],
            )
            sub_nodes[(category, name)] = node
            nodes.append(node)

        for name, (category, sub, factor, uncertainty, aliases) in items.items():
            nodes.append(
                TaxonomyNode(
                    name=name,
                    level=TaxonomyLevel.ITEM,
                    category=category,
                    emission_factor=factor,
                    uncertainty=Uncertainty(uncertainty),
                    parent=sub_nodes.get((category, sub), typology_nodes[category]),
                    aliases=tuple(aliases),
                )
            )

        return cls(nodes)

    def __iter__(self) -> Iterator[TaxonomyNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def categories(self) -> List[str]:
        return list(self._typologies)

    def typology(self, category: str) -> Optional[TaxonomyNode]:
        return self._typologies.get(category)

    def subtypology(self, category: str, name: str) -> Optional[TaxonomyNode]:
        return self._subtypologies.get((category, name))

    def item(self, name: str) -> Optional[TaxonomyNode]:
        return self._items.get(name)

    def items(self) -> List[TaxonomyNode]:
        """Item nodes in declaration order."""
        return list(self._items.values())

    def most_specific(
        self, category: str, subcategory: Optional[str] = None, item: Optional[str] = None
    ) -> Optional[TaxonomyNode]:
        """Deepest node known for a (category, subcategory, item) triple."""
        if item and item in self._items and self._items[item].category == category:
            return self._items[item]
        if subcategory and (category, subcategory) in self._subtypologies:
            return self._subtypologies[(category, subcategory)]
        return self._typologies.get(category)


@lru_cache(maxsize=1)
def default_taxonomy() -> Taxonomy:
    """The bundled reference taxonomy (built once per process)."""
    return Taxonomy.build(TYPOLOGIES, SUBTYPOLOGIES, ITEMS)
