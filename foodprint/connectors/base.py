# -*- coding: utf-8 -*-
"""Emission-data source interface."""

from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from foodprint.data.records import EmissionFactorRecord


@runtime_checkable
class EmissionDataSource(Protocol):
    """
    An external provider of emission factors.

    Implementations never raise: a provider that cannot answer returns
    ``None`` (single lookups) or an empty list (bulk calls).
    """

    name: str

    def get_emission_factor(
        self,
        category: str,
        item: str,
        country: str,
        timeout: Optional[float] = None,
    ) -> Optional[float]:
        ...

    def get_initial_data(self) -> List[EmissionFactorRecord]:
        ...

    def get_updates(self, since: Optional[datetime]) -> List[EmissionFactorRecord]:
        ...
