"""
Adjustment Provider Tests

This test suite validates:
- Season determination from produce calendars
- Seasonal, regional, processing and waste fallback chains
- Heated greenhouse handling for out-of-season vegetables
- Transport emissions
- Bundled tables when the store is missing or failing
"""

from datetime import date
from unittest.mock import MagicMock

import pytest

from foodprint.adjustments import (
    AdjustmentContext,
    ProcessingProvider,
    RegionalProvider,
    SeasonalProvider,
    WasteProvider,
)
from foodprint.adjustments.processing import normalize_processing
from foodprint.adjustments.regional import normalize_origin, production_method
from foodprint.adjustments.seasonal import needs_heated_greenhouse
from foodprint.data.records import SpecialCase
from foodprint.exceptions import DataAccessError

JANUARY = date(2024, 1, 15)
MAY = date(2024, 5, 10)
JULY = date(2024, 7, 10)
AUGUST = date(2024, 8, 10)


@pytest.fixture
def failing_store():
    """Adjustment store whose every lookup fails."""
    store = MagicMock()
    error = DataAccessError("down")
    for name in (
        "regional_factor", "seasonal_factor", "processing_factor", "waste_fraction",
        "transport_factor", "distance", "special_case", "calendars",
    ):
        getattr(store, name).side_effect = error
    return store


def vegetables(**overrides):
    values = {"category": "vegetables", "on_date": JANUARY}
    values.update(overrides)
    return AdjustmentContext(**values)


# ==================== SEASONAL ====================

class TestSeasonDetermination:
    @pytest.mark.parametrize(
        "ingredient, country, on_date, category, expected",
        [
            ("tomato", "us", JULY, "vegetables", "inSeason"),
            ("tomato", "us", MAY, "vegetables", "nearSeason"),
            ("tomato", "us", JANUARY, "vegetables", "outOfSeason"),
            ("Cherry Tomato", "us", JULY, "vegetables", "inSeason"),
            ("apple", "uk", AUGUST, "fruits", "nearSeason"),
            ("tomato", "FR", JULY, "vegetables", "outOfSeason"),
            ("lettuce", "global", JULY, "vegetables", "outOfSeason"),
            ("beef", "global", JULY, "meat", "default"),
        ],
    )
    def test_determine_season(self, adjustment_store, ingredient, country, on_date, category, expected):
        provider = SeasonalProvider(adjustment_store)
        assert provider.determine_season(ingredient, country, on_date, category) == expected

    def test_bundled_calendars_without_store(self):
        assert SeasonalProvider().determine_season("tomato", "us", JULY) == "inSeason"

    def test_failing_store_uses_bundled_calendars(self, failing_store):
        provider = SeasonalProvider(failing_store)
        assert provider.determine_season("strawberry", "us", JULY, "fruits") == "inSeason"


class TestSeasonalFactor:
    def test_factor_for(self, adjustment_store):
        provider = SeasonalProvider(adjustment_store)
        assert provider.factor_for("inSeason") == 0.85
        assert provider.factor_for("nearSeason") == 0.95
        assert provider.factor_for("outOfSeason") == 1.2
        assert provider.factor_for("no-such-season") == 1.0

    def test_nearby_greenhouse_vegetable_is_heated(self, adjustment_store):
        provider = SeasonalProvider(adjustment_store)
        assert provider.get("lettuce", vegetables()) == 1.5

    @pytest.mark.parametrize("origin", ["imported_sea", "national", "airFreighted"])
    def test_distant_origin_is_not_heated(self, adjustment_store, origin):
        provider = SeasonalProvider(adjustment_store)
        assert provider.get("lettuce", vegetables(origin=origin)) == 1.2

    def test_explicit_production_overrides_origin(self, adjustment_store):
        provider = SeasonalProvider(adjustment_store)
        assert provider.get("tomato", vegetables(origin="imported_sea", production="greenhouse_heated")) == 1.5
        assert provider.get("tomato", vegetables(production="greenhouse_unheated")) == 1.2

    def test_in_season_vegetable(self, adjustment_store):
        provider = SeasonalProvider(adjustment_store)
        context = vegetables(country="us", on_date=JULY)
        assert provider.get("tomato", context) == 0.85

    def test_non_produce_is_neutral(self, adjustment_store):
        provider = SeasonalProvider(adjustment_store)
        assert provider.get("beef", AdjustmentContext(category="meat", on_date=JANUARY)) == 1.0

    def test_failing_store_uses_bundled_factors(self, failing_store):
        assert SeasonalProvider(failing_store).get("lettuce", vegetables()) == 1.5

    def test_needs_heated_greenhouse(self):
        assert needs_heated_greenhouse("zucchini", "outOfSeason", vegetables(origin="local"))
        assert not needs_heated_greenhouse("zucchini", "inSeason", vegetables())
        assert not needs_heated_greenhouse("carrots", "outOfSeason", vegetables())
        assert not needs_heated_greenhouse(
            "tomato", "outOfSeason", AdjustmentContext(category="fruits")
        )


# ==================== REGIONAL ====================

class TestOriginNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("imported", "imported_ground"),
            ("Air-Freighted", "airFreighted"),
            ("airFreighted", "airFreighted"),
            ("Sea Freight", "imported_sea"),
            ("imported_sea", "imported_sea"),
            ("Locally grown", "local"),
            (None, "default"),
            ("somewhere else", "somewhere_else"),
        ],
    )
    def test_normalize_origin(self, raw, expected):
        assert normalize_origin(raw) == expected

    def test_production_method(self):
        assert production_method("lettuce", "regional", "outOfSeason") == "greenhouse_heated"
        assert production_method("lettuce", "imported_sea", "outOfSeason") == "regular"
        assert production_method("beef", "local", "default") == "regular"
        assert production_method("beef", "local", "default", "greenhouse_unheated") == "greenhouse_unheated"


class TestRegionalFactor:
    def test_origin_table(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        meat = AdjustmentContext(category="meat", season="default")
        assert provider.get("beef", meat) == 0.92
        assert provider.get("beef", AdjustmentContext(category="meat", origin="local")) == 0.85
        assert provider.get("beef", AdjustmentContext(category="meat", origin="imported by air")) == 2.5

    def test_unknown_origin_uses_default_row(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        assert provider.get("beef", AdjustmentContext(origin="mars")) == 1.0

    def test_heated_greenhouse(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        assert provider.get("lettuce", vegetables(season="outOfSeason")) == 1.8

    def test_imported_out_of_season_vegetable(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        assert provider.get("lettuce", vegetables(season="outOfSeason", origin="imported_sea")) == 1.05
        assert provider.get("lettuce", vegetables(season="outOfSeason", origin="national")) == 1.0

    def test_unheated_greenhouse(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        context = vegetables(season="outOfSeason", production="greenhouse_unheated")
        assert provider.get("tomato", context) == 1.2

    def test_special_case_wins(self, adjustment_store):
        adjustment_store.add_special_case(SpecialCase("avocado", "airFreighted", "default", 3.1))
        provider = RegionalProvider(adjustment_store)
        context = AdjustmentContext(category="fruits", origin="air freight", season="default")
        assert provider.get("Avocado", context) == 3.1

    def test_without_store(self):
        assert RegionalProvider().get("beef", AdjustmentContext(origin="local")) == 0.85

    def test_failing_store(self, failing_store):
        assert RegionalProvider(failing_store).get("beef", AdjustmentContext(origin="local")) == 0.85


class TestTransportEmissions:
    def test_default_route_and_mode(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        assert provider.transport_emissions("spain", "uk") == pytest.approx(0.3)

    def test_mode_factor(self, adjustment_store):
        provider = RegionalProvider(adjustment_store)
        assert provider.transport_emissions("spain", "uk", "ship") == pytest.approx(0.045)

    def test_failing_store(self, failing_store):
        provider = RegionalProvider(failing_store)
        assert provider.transport_emissions("spain", "uk", "plane") == pytest.approx(1.806)


# ==================== PROCESSING ====================

class TestProcessingFactor:
    @pytest.mark.parametrize(
        "method, category, expected",
        [
            ("fresh", "meat", 0.9),
            ("frozen", "meat", 1.05),
            ("frozen", "dairy", 1.1),
            ("canned", "fruits", 1.25),
            ("Minimally Processed", "grains", 1.1),
            ("tinned", "vegetables", 1.2),
            ("sous vide", "meat", 1.0),
        ],
    )
    def test_chain(self, adjustment_store, method, category, expected):
        provider = ProcessingProvider(adjustment_store)
        context = AdjustmentContext(category=category, processing=method)
        assert provider.get("x", context) == expected

    def test_normalize_processing(self):
        assert normalize_processing("heavily-processed") == "processed_heavy"
        assert normalize_processing(None) == "default"
        assert normalize_processing("Frozen") == "frozen"

    def test_failing_store(self, failing_store):
        context = AdjustmentContext(category="seafood", processing="frozen")
        assert ProcessingProvider(failing_store).get("cod", context) == 1.08


# ==================== WASTE ====================

class TestWasteFraction:
    def test_category_and_stage(self, adjustment_store):
        provider = WasteProvider(adjustment_store)
        assert provider.get("lettuce", AdjustmentContext(category="vegetables")) == 0.15
        assert provider.get("beef", AdjustmentContext(category="meat", stage="farming")) == 0.05

    def test_default_category(self, adjustment_store):
        provider = WasteProvider(adjustment_store)
        assert provider.get("tofu", AdjustmentContext(category="legumes")) == 0.12

    def test_unknown_stage(self, adjustment_store):
        provider = WasteProvider(adjustment_store)
        assert provider.get("beef", AdjustmentContext(category="meat", stage="shipping")) == 0.1

    def test_without_store(self):
        assert WasteProvider().get("milk", AdjustmentContext(category="dairy")) == 0.12
