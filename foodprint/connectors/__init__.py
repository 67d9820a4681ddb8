"""External emission-data sources."""

from foodprint.connectors.base import EmissionDataSource
from foodprint.connectors.errors import (
    ConnectorAuthError,
    ConnectorBadRequest,
    ConnectorConfigError,
    ConnectorError,
    ConnectorNetworkError,
    ConnectorNotFound,
    ConnectorRateLimit,
    ConnectorServerError,
    ConnectorTimeoutError,
    ConnectorValidationError,
    classify_connector_error,
)
from foodprint.connectors.http_source import HttpEmissionSource, SourceProfile
from foodprint.connectors.profiles import PROFILES
from foodprint.connectors.registry import build_sources

__all__ = [
    "EmissionDataSource",
    "ConnectorAuthError",
    "ConnectorBadRequest",
    "ConnectorConfigError",
    "ConnectorError",
    "ConnectorNetworkError",
    "ConnectorNotFound",
    "ConnectorRateLimit",
    "ConnectorServerError",
    "ConnectorTimeoutError",
    "ConnectorValidationError",
    "classify_connector_error",
    "HttpEmissionSource",
    "SourceProfile",
    "PROFILES",
    "build_sources",
]
