"""
Connector Tests

This test suite validates:
- Error classification of transport and HTTP failures
- Provider wire profiles (endpoints, auth headers, field names)
- Single lookups and bulk record parsing
- Source list construction from configuration
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from foodprint.config.schemas import SourcesConfig
from foodprint.connectors import (
    PROFILES,
    ConnectorAuthError,
    ConnectorBadRequest,
    ConnectorError,
    ConnectorNetworkError,
    ConnectorNotFound,
    ConnectorRateLimit,
    ConnectorServerError,
    ConnectorTimeoutError,
    ConnectorValidationError,
    EmissionDataSource,
    HttpEmissionSource,
    build_sources,
    classify_connector_error,
)
from foodprint.connectors.profiles import EATERNITY, KLIMATO, MYEMISSIONS, SUEATABLE


def http_error(status_code, headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.headers = headers or {}
    return requests.HTTPError(f"{status_code} error", response=response)


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = http_error(status_code)
    return response


# ==================== ERROR CLASSIFICATION ====================

class TestClassifyConnectorError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (requests.Timeout("slow"), ConnectorTimeoutError),
            (requests.ConnectionError("dns"), ConnectorNetworkError),
            (http_error(401), ConnectorAuthError),
            (http_error(403), ConnectorAuthError),
            (http_error(404), ConnectorNotFound),
            (http_error(422), ConnectorBadRequest),
            (http_error(503), ConnectorServerError),
            (ValueError("not json"), ConnectorValidationError),
            (RuntimeError("odd"), ConnectorError),
        ],
    )
    def test_classification(self, error, expected):
        classified = classify_connector_error(error, "klimato", "https://x")
        assert type(classified) is expected
        assert classified.connector == "klimato"

    def test_rate_limit_retry_after(self):
        classified = classify_connector_error(http_error(429, {"Retry-After": "30"}), "ipcc")
        assert isinstance(classified, ConnectorRateLimit)
        assert classified.retry_after == 30
        assert classified.context["retry_after"] == 30

    def test_connector_errors_pass_through(self):
        error = ConnectorNotFound("missing", connector="ipcc")
        assert classify_connector_error(error, "klimato") is error

    def test_to_dict(self):
        data = classify_connector_error(http_error(500), "eaternity", "https://e").to_dict()
        assert data["error_type"] == "ConnectorServerError"
        assert data["status_code"] == 500
        assert data["url"] == "https://e"


# ==================== SINGLE LOOKUPS ====================

class TestHttpEmissionSource:
    @pytest.fixture
    def klimato(self):
        return HttpEmissionSource(KLIMATO, api_key="k-key", base_url="https://api.klimato.com/v1/")

    def test_satisfies_source_protocol(self, klimato):
        assert isinstance(klimato, EmissionDataSource)

    @patch("foodprint.connectors.http_source.requests.get")
    def test_lookup(self, mock_get, klimato):
        mock_get.return_value = json_response({"factor": 27.0})
        assert klimato.get_emission_factor("meat", "beef", "us", timeout=2.5) == 27.0

        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.klimato.com/v1/emissions"
        assert kwargs["params"] == {"category": "meat", "item": "beef", "country": "us"}
        assert kwargs["headers"]["Authorization"] == "Bearer k-key"
        assert kwargs["timeout"] == 2.5

    @patch("foodprint.connectors.http_source.requests.get")
    def test_api_key_header_profile(self, mock_get):
        source = HttpEmissionSource(SUEATABLE, api_key="s-key", base_url="https://api.sueatable.org/v1")
        mock_get.return_value = json_response({"emissionFactor": 3.7})
        assert source.get_emission_factor("meat", "chicken") == 3.7

        kwargs = mock_get.call_args.kwargs
        assert kwargs["headers"]["X-API-Key"] == "s-key"
        assert "Authorization" not in kwargs["headers"]

    @patch("foodprint.connectors.http_source.requests.get")
    def test_renamed_query_parameters(self, mock_get):
        source = HttpEmissionSource(MYEMISSIONS, api_key="m-key", base_url="https://api.myemissions.co/v1")
        mock_get.return_value = json_response({"carbonFactor": 1.2})
        source.get_emission_factor("grains", "rice", "uk")
        assert mock_get.call_args.kwargs["params"] == {
            "category": "grains", "food": "rice", "region": "uk"
        }

    @pytest.mark.parametrize("payload", [{"factor": 0}, {"factor": -3}, {"factor": "n/a"}, {}])
    @patch("foodprint.connectors.http_source.requests.get")
    def test_unusable_values_are_no_data(self, mock_get, klimato, payload):
        mock_get.return_value = json_response(payload)
        assert klimato.get_emission_factor("meat", "beef") is None

    @patch("foodprint.connectors.http_source.requests.get")
    def test_http_error_is_no_data(self, mock_get, klimato):
        mock_get.return_value = json_response({}, status_code=500)
        assert klimato.get_emission_factor("meat", "beef") is None

    @patch("foodprint.connectors.http_source.requests.get")
    def test_timeout_is_no_data(self, mock_get, klimato):
        mock_get.side_effect = requests.Timeout("slow")
        assert klimato.get_emission_factor("meat", "beef") is None

    @patch("foodprint.connectors.http_source.requests.get")
    def test_unconfigured_source_skips_network(self, mock_get):
        source = HttpEmissionSource(KLIMATO, api_key=None, base_url="https://api.klimato.com/v1")
        assert source.is_configured is False
        assert source.get_emission_factor("meat", "beef") is None
        assert source.get_initial_data() == []
        mock_get.assert_not_called()


# ==================== BULK ====================

class TestBulkRecords:
    @patch("foodprint.connectors.http_source.requests.get")
    def test_initial_data_parses_and_skips_malformed(self, mock_get):
        source = HttpEmissionSource(KLIMATO, api_key="k", base_url="https://api.klimato.com/v1")
        mock_get.return_value = json_response(
            {
                "factors": [
                    {"category": "Meat", "item": "Beef", "value": 27.0, "metadata": {"year": 2023}},
                    {"category": "dairy", "item": "milk", "country": "FR", "value": 1.3},
                    {"category": "dairy", "item": "cheese", "value": -1},
                    {"item": "no category", "value": 2.0},
                    "garbage",
                ]
            }
        )
        records = source.get_initial_data()

        assert [r.key for r in records] == [("meat", "beef", "global"), ("dairy", "milk", "fr")]
        assert records[0].source == "klimato"
        assert records[0].metadata == {"year": 2023}
        assert mock_get.call_args.args[0] == "https://api.klimato.com/v1/emissions/bulk"

    @patch("foodprint.connectors.http_source.requests.get")
    def test_updates_send_since(self, mock_get):
        source = HttpEmissionSource(EATERNITY, api_key="e", base_url="https://eaternity.ch/api/v1")
        mock_get.return_value = json_response(
            {"values": [{"category": "meat", "item": "lamb", "co2value": 38.0, "unit": "kg"}]}
        )
        records = source.get_updates(datetime(2024, 1, 1))

        assert records[0].value == 38.0
        assert records[0].metadata == {"unit": "kg"}
        assert mock_get.call_args.kwargs["params"] == {"since": "2024-01-01T00:00:00"}

    @patch("foodprint.connectors.http_source.requests.get")
    def test_updates_without_since(self, mock_get):
        source = HttpEmissionSource(KLIMATO, api_key="k", base_url="https://api.klimato.com/v1")
        mock_get.return_value = json_response({"updates": []})
        assert source.get_updates(None) == []
        assert mock_get.call_args.kwargs["params"] == {}

    @patch("foodprint.connectors.http_source.requests.get")
    def test_missing_list_field(self, mock_get):
        source = HttpEmissionSource(KLIMATO, api_key="k", base_url="https://api.klimato.com/v1")
        mock_get.return_value = json_response({"unexpected": True})
        assert source.get_initial_data() == []


# ==================== REGISTRY ====================

class TestBuildSources:
    def test_priority_order(self):
        sources = build_sources(SourcesConfig(klimato_api_key="k"))
        assert [s.name for s in sources] == ["klimato", "sueatable", "eaternity", "myemissions", "ipcc"]
        assert [s.name for s in sources if s.is_configured] == ["klimato"]

    def test_custom_priority_skips_unknown(self):
        config = SourcesConfig(priority=["ipcc", "nonexistent", "Klimato"])
        assert [s.name for s in build_sources(config)] == ["ipcc", "klimato"]

    def test_disabled(self):
        assert build_sources(SourcesConfig(enabled=False)) == []

    def test_timeout_is_applied(self):
        sources = build_sources(SourcesConfig(), timeout=3.0)
        assert all(s.timeout == 3.0 for s in sources)

    def test_every_profile_registered(self):
        assert set(PROFILES) == {"klimato", "sueatable", "eaternity", "myemissions", "ipcc"}
