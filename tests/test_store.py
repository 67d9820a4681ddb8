"""
Reference Store Tests

This test suite validates:
- Emission factor upsert and exact lookup
- Category averages and per-source update timestamps
- Adjustment table seeding (idempotent) and lookups
- DataAccessError on database failures
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from foodprint.data.records import EmissionFactorRecord, SpecialCase
from foodprint.data.store import AdjustmentStore, EmissionFactorStore
from foodprint.exceptions import DataAccessError


class TestEmissionFactorStore:
    def test_upsert_and_get(self, factor_store):
        factor_store.upsert(EmissionFactorRecord("Meat", "Beef", 27.0, "klimato"))
        record = factor_store.get("meat", "beef")
        assert record.value == 27.0
        assert record.source == "klimato"
        assert record.country == "global"

    def test_lookup_is_case_insensitive(self, factor_store):
        factor_store.upsert(EmissionFactorRecord("meat", "beef", 27.0, "klimato", country="us"))
        assert factor_store.get("MEAT", "Beef", "US").value == 27.0

    def test_missing_returns_none(self, factor_store):
        assert factor_store.get("meat", "beef") is None

    def test_upsert_supersedes(self, factor_store):
        factor_store.upsert(EmissionFactorRecord("meat", "beef", 27.0, "klimato"))
        factor_store.upsert(
            EmissionFactorRecord("meat", "beef", 26.0, "ipcc", metadata={"year": 2023})
        )
        record = factor_store.get("meat", "beef")
        assert record.value == 26.0
        assert record.source == "ipcc"
        assert record.metadata == {"year": 2023}
        assert factor_store.count() == 1

    def test_bulk_upsert_counts(self, factor_store):
        written = factor_store.bulk_upsert(
            [
                EmissionFactorRecord("meat", "beef", 27.0, "klimato"),
                EmissionFactorRecord("meat", "lamb", 39.0, "klimato"),
            ]
        )
        assert written == 2
        assert factor_store.bulk_upsert([]) == 0

    def test_category_average(self, factor_store):
        factor_store.bulk_upsert(
            [
                EmissionFactorRecord("meat", "beef", 30.0, "klimato"),
                EmissionFactorRecord("meat", "chicken", 4.0, "klimato"),
                EmissionFactorRecord("dairy", "milk", 1.4, "klimato"),
            ]
        )
        assert factor_store.category_average("meat") == pytest.approx(17.0)
        assert factor_store.category_average("spices") is None

    def test_latest_update_per_source(self, factor_store):
        factor_store.bulk_upsert(
            [
                EmissionFactorRecord(
                    "meat", "beef", 27.0, "klimato", last_updated=datetime(2024, 1, 1)
                ),
                EmissionFactorRecord(
                    "meat", "lamb", 39.0, "klimato", last_updated=datetime(2024, 3, 1)
                ),
            ]
        )
        assert factor_store.latest_update("klimato") == datetime(2024, 3, 1)
        assert factor_store.latest_update("ipcc") is None

    def test_low_reliability_metadata_survives(self, seeded_factor_store):
        record = seeded_factor_store.get("meat", "beef")
        assert record.value == 25.3
        assert record.is_low_reliability


class TestStoreFailures:
    """Database errors surface as DataAccessError."""

    @pytest.fixture
    def broken_factory(self):
        factory = MagicMock()
        factory.return_value.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        return factory

    def test_get_raises_data_access_error(self, broken_factory):
        with pytest.raises(DataAccessError) as info:
            EmissionFactorStore(broken_factory).get("meat", "beef")
        assert info.value.context["operation"] == "get"

    def test_adjustment_lookup_raises_data_access_error(self, broken_factory):
        with pytest.raises(DataAccessError):
            AdjustmentStore(broken_factory).regional_factor("local")


class TestAdjustmentStore:
    def test_seeded_lookups(self, adjustment_store):
        assert adjustment_store.regional_factor("local") == 0.85
        assert adjustment_store.seasonal_factor("outOfSeason_heated") == 1.5
        assert adjustment_store.processing_factor("frozen", "meat") == 1.05
        assert adjustment_store.waste_fraction("vegetables", "farming") == 0.20
        assert adjustment_store.transport_factor("ship") == 0.015
        assert adjustment_store.distance("default", "default") == 3000.0
        assert adjustment_store.regional_factor("mars") is None

    def test_calendars(self, adjustment_store):
        calendars = {c.item: c for c in adjustment_store.calendars("us")}
        assert set(calendars) == {"apple", "tomato", "strawberry"}
        assert calendars["tomato"].in_season == (6, 7, 8, 9)
        assert adjustment_store.calendars("global") == []

    def test_seeding_is_idempotent(self, adjustment_store):
        from foodprint.data.maintenance import initialize_reference_data

        assert sum(initialize_reference_data(adjustment_store).values()) == 0

    def test_special_case(self, adjustment_store):
        adjustment_store.add_special_case(SpecialCase("avocado", "airFreighted", "default", 3.1))
        assert adjustment_store.special_case("avocado", "airFreighted", "default") == 3.1
        assert adjustment_store.special_case("avocado", "local", "default") is None
