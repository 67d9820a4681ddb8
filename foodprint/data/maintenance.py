# -*- coding: utf-8 -*-
"""
Reference data maintenance.

- ``initialize_reference_data`` seeds the adjustment tables
- ``populate_initial_data`` fills an empty factor store, first from the
  external sources and otherwise from the bundled taxonomy
- ``update_local_database`` pulls incremental updates per source
- ``RefreshScheduler`` runs the update on a background thread

Source failures are isolated: one failing provider never stops the others.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from foodprint.connectors.base import EmissionDataSource
from foodprint.data import reference_data
from foodprint.data.records import EmissionFactorRecord
from foodprint.data.store import AdjustmentStore, EmissionFactorStore
from foodprint.taxonomy.tree import Taxonomy, default_taxonomy

logger = logging.getLogger(__name__)

TAXONOMY_SOURCE = "reference"


def initialize_reference_data(store: AdjustmentStore) -> Dict[str, int]:
    """Seed every empty adjustment table from the bundled reference tables."""
    inserted = store.seed(
        regional=reference_data.REGIONAL_FACTORS,
        seasonal=reference_data.SEASONAL_FACTORS,
        processing=reference_data.PROCESSING_FACTORS,
        waste=reference_data.WASTE_FACTORS,
        transport=reference_data.TRANSPORT_FACTORS,
        distances=reference_data.DISTANCES,
        calendars=reference_data.SEASONAL_CALENDARS,
    )
    logger.info(f"Reference tables initialized: {sum(inserted.values())} rows")
    return inserted


def taxonomy_records(taxonomy: Optional[Taxonomy] = None) -> List[EmissionFactorRecord]:
    """
    Factor rows derived from the reference taxonomy.

    Items are stored under their own names; each typology becomes the
    category's ``default`` row. All rows are marked low reliability.
    """
    taxonomy = taxonomy or default_taxonomy()
    records = []
    for category in taxonomy.categories:
        node = taxonomy.typology(category)
        records.append(
            EmissionFactorRecord(
                category=category,
                item="default",
                value=node.emission_factor,
                source=TAXONOMY_SOURCE,
                metadata={"reliability": "low", "uncertainty": node.uncertainty.value},
            )
        )
    for node in taxonomy.items():
        records.append(
            EmissionFactorRecord(
                category=node.category,
                item=node.name,
                value=node.emission_factor,
                source=TAXONOMY_SOURCE,
                metadata={
                    "reliability": "low",
                    "uncertainty": node.uncertainty.value,
                    "subcategory": node.subcategory,
                },
            )
        )
    return records


def _collect(sources: Sequence[EmissionDataSource], fetch) -> List[EmissionFactorRecord]:
    """Run ``fetch(source)`` for every source in parallel and merge the results."""
    if not sources:
        return []

    records: List[EmissionFactorRecord] = []
    with ThreadPoolExecutor(max_workers=len(sources)) as executor:
        future_to_source = {executor.submit(fetch, source): source for source in sources}
        for future in as_completed(future_to_source):
            source = future_to_source[future]
            try:
                fetched = future.result() or []
            except Exception as e:
                logger.error(f"Fetching from {source.name} failed: {e}")
                continue
            logger.info(f"{source.name}: {len(fetched)} records")
            records.extend(fetched)
    return records


def populate_initial_data(
    store: EmissionFactorStore,
    sources: Sequence[EmissionDataSource],
    taxonomy: Optional[Taxonomy] = None,
) -> int:
    """
    Fill the factor store when it is empty.

    Returns:
        Number of rows written (0 when the store already had data)
    """
    if store.count() > 0:
        logger.info("Emission factor store already populated")
        return 0

    records = _collect(sources, lambda source: source.get_initial_data())
    written = store.bulk_upsert(records)

    if written == 0:
        logger.warning("No external data available, seeding from the reference taxonomy")
        written = store.bulk_upsert(taxonomy_records(taxonomy))

    logger.info(f"Initial population wrote {written} emission factors")
    return written


def update_local_database(
    store: EmissionFactorStore, sources: Sequence[EmissionDataSource]
) -> int:
    """
    Upsert each source's records changed since its latest stored row.

    Returns:
        Number of rows written across all sources
    """

    def fetch(source: EmissionDataSource) -> List[EmissionFactorRecord]:
        since = store.latest_update(source.name)
        return source.get_updates(since)

    records = _collect(sources, fetch)
    written = store.bulk_upsert(records)
    logger.info(f"Refresh wrote {written} emission factors")
    return written


class RefreshScheduler:
    """
    Periodic refresh on a daemon thread.

    Example:
        >>> scheduler = RefreshScheduler(store, sources, interval_seconds=86400)
        >>> scheduler.start()
        >>> scheduler.stop()
    """

    def __init__(
        self,
        store: EmissionFactorStore,
        sources: Sequence[EmissionDataSource],
        interval_seconds: float = 24 * 3600,
    ):
        self.store = store
        self.sources = list(sources)
        self.interval_seconds = interval_seconds
        self.last_run: Optional[datetime] = None
        self.runs = 0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="foodprint-refresh", daemon=True
        )
        self._thread.start()
        logger.info(f"Refresh scheduled every {self.interval_seconds}s")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def run_once(self) -> int:
        """Run one refresh; errors are logged, not raised."""
        try:
            return update_local_database(self.store, self.sources)
        except Exception as e:
            logger.error(f"Scheduled refresh failed: {e}")
            return 0
        finally:
            self.last_run = datetime.utcnow()
            self.runs += 1

    def _run(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.run_once()


__all__ = [
    "RefreshScheduler",
    "initialize_reference_data",
    "populate_initial_data",
    "taxonomy_records",
    "update_local_database",
]
