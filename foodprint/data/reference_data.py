# -*- coding: utf-8 -*-
"""
Seed tables for the adjustment-factor store.

Every table has a ``default`` row so that lookups can always fall back.
Providers also carry these values as in-code constants for the case where
the store itself is unavailable.
"""

from typing import Dict, List, Tuple

DEFAULT_KEY = "default"

# origin -> multiplier on the base factor
REGIONAL_FACTORS: Dict[str, float] = {
    "local": 0.85,
    "regional": 0.92,
    "national": 1.0,
    "imported_ground": 1.15,
    "imported_sea": 1.05,
    "airFreighted": 2.5,
    DEFAULT_KEY: 1.0,
}

# season -> multiplier
SEASONAL_FACTORS: Dict[str, float] = {
    "inSeason": 0.85,
    "nearSeason": 0.95,
    "outOfSeason": 1.2,
    "outOfSeason_heated": 1.5,
    DEFAULT_KEY: 1.0,
}

# (method, category) -> multiplier
PROCESSING_FACTORS: Dict[Tuple[str, str], float] = {
    ("fresh", DEFAULT_KEY): 0.9,
    ("frozen", "vegetables"): 1.1,
    ("frozen", "fruits"): 1.15,
    ("frozen", "meat"): 1.05,
    ("frozen", "seafood"): 1.08,
    ("frozen", DEFAULT_KEY): 1.1,
    ("canned", "vegetables"): 1.2,
    ("canned", "fruits"): 1.25,
    ("canned", "meat"): 1.3,
    ("canned", "seafood"): 1.2,
    ("canned", DEFAULT_KEY): 1.25,
    ("dried", DEFAULT_KEY): 0.95,
    ("processed_minimal", DEFAULT_KEY): 1.1,
    ("processed_moderate", DEFAULT_KEY): 1.3,
    ("processed_heavy", DEFAULT_KEY): 1.5,
    ("processed", DEFAULT_KEY): 1.3,
    ("fermented", DEFAULT_KEY): 1.05,
    ("smoked", DEFAULT_KEY): 1.15,
    ("raw", DEFAULT_KEY): 0.85,
    (DEFAULT_KEY, DEFAULT_KEY): 1.0,
}

WASTE_STAGES = ("farming", "processing", "retail", "consumer")

# category -> stage -> fraction lost
WASTE_FACTORS: Dict[str, Dict[str, float]] = {
    "fruits": {"farming": 0.10, "processing": 0.05, "retail": 0.10, "consumer": 0.15},
    "vegetables": {"farming": 0.20, "processing": 0.05, "retail": 0.10, "consumer": 0.15},
    "meat": {"farming": 0.05, "processing": 0.05, "retail": 0.05, "consumer": 0.10},
    "dairy": {"farming": 0.03, "processing": 0.02, "retail": 0.08, "consumer": 0.12},
    "grains": {"farming": 0.02, "processing": 0.05, "retail": 0.02, "consumer": 0.15},
    DEFAULT_KEY: {"farming": 0.05, "processing": 0.05, "retail": 0.07, "consumer": 0.12},
}

# mode -> kg CO2e per tonne-km
TRANSPORT_FACTORS: Dict[str, float] = {
    "ship": 0.015,
    "rail": 0.028,
    "truck": 0.062,
    "plane": 0.602,
    DEFAULT_KEY: 0.100,
}

# (origin, destination) -> km
DISTANCES: Dict[Tuple[str, str], float] = {
    (DEFAULT_KEY, DEFAULT_KEY): 3000.0,
}

# (country, item) -> (in-season months, near-season months)
SEASONAL_CALENDARS: Dict[Tuple[str, str], Tuple[List[int], List[int]]] = {
    ("us", "apple"): ([9, 10, 11], [7, 8, 12, 1]),
    ("us", "tomato"): ([6, 7, 8, 9], [5, 10]),
    ("us", "strawberry"): ([5, 6, 7], [4, 8]),
    ("uk", "apple"): ([9, 10, 11], [8, 12]),
    ("uk", "tomato"): ([7, 8, 9], [6, 10]),
}

# (item, origin, season) -> regional multiplier
SPECIAL_CASES: Dict[Tuple[str, str, str], float] = {}
