# -*- coding: utf-8 -*-
"""Pytest configuration and shared fixtures."""

import threading
from datetime import date
from typing import Dict, List, Optional, Tuple

import pytest

from foodprint.adjustments import ProcessingProvider, RegionalProvider, SeasonalProvider, WasteProvider
from foodprint.cache.memory import MemoryCache
from foodprint.config.manager import ConfigManager
from foodprint.data.maintenance import initialize_reference_data, taxonomy_records
from foodprint.data.records import EmissionFactorRecord
from foodprint.data.store import AdjustmentStore, EmissionFactorStore
from foodprint.db.base import build_engine, get_session_factory, init_db
from foodprint.engine import EmissionsEngine
from foodprint.resolution.resolver import EmissionFactorResolver

# Mid-January: outside every bundled produce window
WINTER_DAY = date(2024, 1, 15)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSource:
    """In-memory emission-data source recording every call."""

    def __init__(
        self,
        name: str = "fake",
        values: Optional[Dict[Tuple[str, str, str], float]] = None,
        initial: Optional[List[EmissionFactorRecord]] = None,
        updates: Optional[List[EmissionFactorRecord]] = None,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self.values = values or {}
        self.initial = initial or []
        self.updates = updates or []
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []
        self.update_requests: List = []

    def get_emission_factor(self, category, item, country="global", timeout=None):
        self.calls.append((category, item, country))
        if self.error is not None:
            raise self.error
        return self.values.get((category, item, country))

    def get_initial_data(self):
        if self.error is not None:
            raise self.error
        return list(self.initial)

    def get_updates(self, since):
        self.update_requests.append(since)
        if self.error is not None:
            raise self.error
        return list(self.updates)


class BlockingSource(FakeSource):
    """Source that holds every lookup until ``release`` is set."""

    def __init__(self, name: str = "slow"):
        super().__init__(name=name)
        self.release = threading.Event()

    def get_emission_factor(self, category, item, country="global", timeout=None):
        self.calls.append((category, item, country))
        self.release.wait(5)
        return 99.0


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh configuration per test, without provider or inference keys."""
    for name in ("GEMINI_API_KEY", "FOODPRINT_INFERENCE_API_KEY", "KLIMATO_API_KEY",
                 "SUEATABLE_API_KEY", "EATERNITY_API_KEY", "MYEMISSIONS_API_KEY", "IPCC_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset_instance()
    yield
    ConfigManager.reset_instance()


@pytest.fixture
def session_factory(tmp_path):
    """Session factory on a fresh SQLite file."""
    engine = build_engine(f"sqlite:///{tmp_path / 'foodprint.db'}")
    init_db(engine)
    yield get_session_factory(engine)
    engine.dispose()


@pytest.fixture
def factor_store(session_factory):
    return EmissionFactorStore(session_factory)


@pytest.fixture
def seeded_factor_store(factor_store):
    """Factor store holding the taxonomy reference rows."""
    factor_store.bulk_upsert(taxonomy_records())
    return factor_store


@pytest.fixture
def adjustment_store(session_factory):
    store = AdjustmentStore(session_factory)
    initialize_reference_data(store)
    return store


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def factor_cache(fake_clock):
    return MemoryCache(ttl_seconds=3600, clock=fake_clock)


@pytest.fixture
def resolver(seeded_factor_store, factor_cache):
    return EmissionFactorResolver(seeded_factor_store, [], factor_cache)


def make_engine(resolver, adjustment_store, **kwargs) -> EmissionsEngine:
    kwargs.setdefault("today", lambda: WINTER_DAY)
    return EmissionsEngine(
        resolver=resolver,
        seasonal=SeasonalProvider(adjustment_store),
        regional=RegionalProvider(adjustment_store),
        processing=ProcessingProvider(adjustment_store),
        waste=WasteProvider(adjustment_store),
        **kwargs,
    )


@pytest.fixture
def engine(resolver, adjustment_store):
    """Engine on the seeded store with no external sources."""
    return make_engine(resolver, adjustment_store)


@pytest.fixture
def engine_factory(adjustment_store):
    """Build engines around a custom resolver on the seeded adjustment store."""

    def factory(resolver, **kwargs):
        return make_engine(resolver, adjustment_store, **kwargs)

    return factory


@pytest.fixture
def fake_source():
    """Factory for FakeSource instances."""
    return FakeSource


@pytest.fixture
def blocking_source():
    source = BlockingSource()
    yield source
    source.release.set()
