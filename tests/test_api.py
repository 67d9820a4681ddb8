"""
Emissions API Tests

This test suite validates:
- POST /emissions/calculate responses and 400 mapping of bad requests
- The single-ingredient lookup endpoints
- The health endpoint
- Startup and shutdown: logging setup and the store refresh
"""

import pytest
from fastapi.testclient import TestClient

from foodprint._version import __version__
from foodprint.api import create_app
from foodprint.data.maintenance import RefreshScheduler


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine))


BOWL = {"dish_name": "Beef Rice Bowl", "ingredients": ["beef", "rice"]}


class TestCalculateEndpoint:
    def test_standard_response(self, client):
        response = client.post("/emissions/calculate", json=BOWL)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 4.11
        assert body["confidence"] == "medium"
        assert body["dish"]["ingredient_count"] == 2

    def test_detail_level_and_quantity(self, client):
        response = client.post(
            "/emissions/calculate", json={**BOWL, "quantity": 2, "detail_level": "detailed"}
        )
        body = response.json()
        assert body["total"] == 8.21
        assert [i["name"] for i in body["ingredients"]] == ["beef", "rice"]

    def test_missing_dish_name(self, client):
        response = client.post("/emissions/calculate", json={"ingredients": ["beef"]})
        assert response.status_code == 400
        body = response.json()
        assert body["error_type"] == "ValidationError"
        assert "dish_name" in body["context"]["invalid_fields"]

    @pytest.mark.parametrize(
        "payload",
        [
            {**BOWL, "ingredients": "beef"},
            {**BOWL, "ingredients": []},
            {**BOWL, "quantity": "abc"},
            {**BOWL, "quantity": 0},
            {**BOWL, "detail_level": "everything"},
        ],
    )
    def test_bad_fields(self, client, payload):
        response = client.post("/emissions/calculate", json=payload)
        assert response.status_code == 400
        assert response.json()["error_code"]

    def test_body_must_be_an_object(self, client):
        response = client.post("/emissions/calculate", json=["beef", "rice"])
        assert response.status_code == 400
        assert response.json()["error_type"] == "ValidationError"


class TestLookupEndpoints:
    def test_emission_factor(self, client):
        body = client.get("/emissions/emission-factor/meat/beef").json()
        assert body["value"] == 25.3
        assert body["tier"] == "store"

    def test_emission_factor_country(self, client):
        body = client.get("/emissions/emission-factor/meat/beef", params={"country": "FR"}).json()
        assert body["country"] == "fr"
        assert body["tier"] == "store_global"

    def test_categorize(self, client):
        body = client.get("/emissions/categorize/beef").json()
        assert body["category"] == "meat"
        assert body["specificItem"] == "beef"

    def test_portion_size(self, client):
        body = client.get(
            "/emissions/portion-size/beef", params={"dish_name": "Beef Rice Bowl"}
        ).json()
        assert body["grams"] == 180.0

    def test_seasonality(self, client):
        body = client.get(
            "/emissions/seasonality/tomato", params={"country": "us", "date": "2024-07-10"}
        ).json()
        assert body["season"] == "inSeason"
        assert body["factor"] == 0.85

    def test_seasonality_bad_date(self, client):
        response = client.get("/emissions/seasonality/tomato", params={"date": "July"})
        assert response.status_code == 400


class TestHealth:
    def test_health(self, client):
        assert client.get("/emissions/health").json() == {
            "status": "ok",
            "version": __version__,
            "rules_version": "2.1.0",
        }


# ==================== LIFESPAN ====================

class TestLifespan:
    def test_refresh_runs_while_app_is_up(self, engine, factor_store, fake_source):
        engine.scheduler = RefreshScheduler(factor_store, [fake_source()], interval_seconds=3600)

        with TestClient(create_app(engine)) as client:
            assert engine.scheduler.is_running
            assert client.get("/emissions/health").status_code == 200
        assert not engine.scheduler.is_running

    def test_app_without_scheduler_starts(self, engine):
        with TestClient(create_app(engine)) as client:
            assert client.get("/emissions/health").status_code == 200

    def test_logging_configured_on_startup(self, engine, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "foodprint.api.routes.setup_logging", lambda *args, **kwargs: calls.append(args)
        )
        monkeypatch.setenv("FOODPRINT_LOG_LEVEL", "WARNING")

        with TestClient(create_app(engine)):
            pass
        assert calls == [("WARNING", None)]
