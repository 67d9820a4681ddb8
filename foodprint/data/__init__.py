"""Records, reference tables and the structured store.

Maintenance jobs live in ``foodprint.data.maintenance`` and are not
imported here, since they depend on the connector layer.
"""

from foodprint.data.records import (
    GLOBAL_COUNTRY,
    DataSource,
    EmissionFactorRecord,
    FactorResolution,
    ResolutionTier,
    SeasonalCalendar,
    SpecialCase,
)
from foodprint.data.store import AdjustmentStore, EmissionFactorStore

__all__ = [
    "GLOBAL_COUNTRY",
    "DataSource",
    "EmissionFactorRecord",
    "FactorResolution",
    "ResolutionTier",
    "SeasonalCalendar",
    "SpecialCase",
    "AdjustmentStore",
    "EmissionFactorStore",
]
