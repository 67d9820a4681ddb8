"""
Foodprint: carbon-footprint estimates for dishes from free-text ingredients.

Example:
    >>> from foodprint import calculate_emissions
    >>> calculate_emissions("Beef Rice Bowl", ["beef", "rice"])["confidence"]
    'medium'
"""

from foodprint._version import __version__
from foodprint.engine import EmissionsEngine, calculate_emissions
from foodprint.exceptions import FoodprintException, ValidationError

__all__ = [
    "__version__",
    "EmissionsEngine",
    "calculate_emissions",
    "FoodprintException",
    "ValidationError",
]
