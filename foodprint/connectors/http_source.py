# -*- coding: utf-8 -*-
"""
HTTP emission-data source.

One implementation serves every provider; the differences between
providers (endpoints, field names, auth header) live in ``SourceProfile``
data.

Example:
    >>> source = HttpEmissionSource(KLIMATO, api_key="...")
    >>> source.get_emission_factor("meat", "beef", "global")
    27.0
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError as PydanticValidationError

from foodprint.connectors.errors import (
    ConnectorConfigError,
    ConnectorError,
    ConnectorValidationError,
    classify_connector_error,
)
from foodprint.connectors.models import ProviderFactor
from foodprint.data.records import GLOBAL_COUNTRY, EmissionFactorRecord, coerce_positive

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0

AUTH_BEARER = "bearer"
AUTH_API_KEY_HEADER = "x-api-key"


@dataclass(frozen=True)
class SourceProfile:
    """
    Wire description of one provider.

    Attributes:
        name: Provider identifier, also written as the record source
        display_name: Name used in logs
        auth: ``bearer`` or ``x-api-key``
        factor_endpoint: Single-lookup endpoint
        factor_field: Response field holding the factor
        item_param / country_param: Query parameter names for lookups
        bulk_endpoint / updates_endpoint: Bulk endpoints
        bulk_field / updates_field: Response fields holding record lists
        record_item_field / record_country_field / record_value_field:
            Field names inside bulk records
        metadata_fields: Record fields copied into metadata
        metadata_object: Record field holding a metadata dict, if any
    """

    name: str
    display_name: str
    factor_endpoint: str
    factor_field: str
    bulk_endpoint: str
    updates_endpoint: str
    auth: str = AUTH_BEARER
    item_param: str = "item"
    country_param: str = "country"
    bulk_field: str = "factors"
    updates_field: str = "factors"
    record_item_field: str = "item"
    record_country_field: str = "country"
    record_value_field: str = "value"
    metadata_fields: Tuple[str, ...] = ()
    metadata_object: Optional[str] = None


class HttpEmissionSource:
    """Emission-data source backed by a provider's REST API."""

    def __init__(
        self,
        profile: SourceProfile,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.profile = profile
        self.name = profile.name
        self.api_key = api_key
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.base_url)

    def __repr__(self) -> str:
        return f"HttpEmissionSource(name={self.name!r}, base_url={self.base_url!r})"

    # ==================== WIRE ====================

    def _headers(self) -> Dict[str, str]:
        if self.profile.auth == AUTH_API_KEY_HEADER:
            return {"X-API-Key": self.api_key, "Accept": "application/json"}
        return {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}

    def _request(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        GET ``{base_url}/{endpoint}`` and return the decoded JSON object.

        Raises:
            ConnectorError: Classified failure (config, network, HTTP, payload)
        """
        if not self.is_configured:
            raise ConnectorConfigError(
                f"{self.profile.display_name} API key not configured",
                connector=self.name,
                context={"required_env": f"{self.name.upper()}_API_KEY"},
            )

        url = f"{self.base_url}/{endpoint}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        try:
            response = requests.get(
                url,
                params=query,
                headers=self._headers(),
                timeout=timeout if timeout is not None else self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            raise classify_connector_error(e, self.name, url) from e

        if not isinstance(data, dict):
            raise ConnectorValidationError(
                "Expected a JSON object", connector=self.name, url=url
            )
        return data

    def _parse_record(self, raw: Any) -> Optional[EmissionFactorRecord]:
        if not isinstance(raw, dict):
            return None
        profile = self.profile

        metadata: Dict[str, Any] = {}
        if profile.metadata_object and isinstance(raw.get(profile.metadata_object), dict):
            metadata.update(raw[profile.metadata_object])
        for key in profile.metadata_fields:
            if raw.get(key) is not None:
                metadata[key] = raw[key]

        try:
            factor = ProviderFactor(
                category=raw.get("category"),
                item=raw.get(profile.record_item_field),
                country=raw.get(profile.record_country_field),
                value=raw.get(profile.record_value_field),
                metadata=metadata,
            )
        except PydanticValidationError as e:
            logger.debug(f"{self.name}: skipping malformed record: {e.error_count()} errors")
            return None

        return EmissionFactorRecord(
            category=factor.category,
            item=factor.item,
            country=factor.country or GLOBAL_COUNTRY,
            value=factor.value,
            source=self.name,
            last_updated=datetime.utcnow(),
            metadata=factor.metadata,
        )

    def _fetch_records(
        self, endpoint: str, field_name: str, params: Optional[Dict[str, Any]] = None
    ) -> List[EmissionFactorRecord]:
        try:
            data = self._request(endpoint, params)
        except ConnectorConfigError as e:
            logger.debug(str(e))
            return []
        except ConnectorError as e:
            logger.warning(f"{self.profile.display_name} bulk request failed: {e}")
            return []

        raw_records = data.get(field_name)
        if not isinstance(raw_records, list):
            logger.warning(
                f"{self.profile.display_name}: response has no '{field_name}' list"
            )
            return []

        records = [r for r in (self._parse_record(raw) for raw in raw_records) if r is not None]
        skipped = len(raw_records) - len(records)
        if skipped:
            logger.info(f"{self.profile.display_name}: skipped {skipped} malformed records")
        return records

    # ==================== SOURCE API ====================

    def get_emission_factor(
        self,
        category: str,
        item: str,
        country: str = GLOBAL_COUNTRY,
        timeout: Optional[float] = None,
    ) -> Optional[float]:
        """
        Look up one factor.

        Returns:
            Positive kg CO2e per kg, or None when the provider has no answer
        """
        params = {
            "category": category,
            self.profile.item_param: item,
            self.profile.country_param: country,
        }
        try:
            data = self._request(self.profile.factor_endpoint, params, timeout=timeout)
        except ConnectorConfigError as e:
            logger.debug(str(e))
            return None
        except ConnectorError as e:
            logger.warning(f"{self.profile.display_name} lookup failed: {e}")
            return None

        value = coerce_positive(data.get(self.profile.factor_field))
        if value is None:
            logger.debug(f"{self.profile.display_name}: no factor for {category}/{item}/{country}")
        return value

    def get_initial_data(self) -> List[EmissionFactorRecord]:
        """Full dataset for first-run population."""
        return self._fetch_records(self.profile.bulk_endpoint, self.profile.bulk_field)

    def get_updates(self, since: Optional[datetime]) -> List[EmissionFactorRecord]:
        """Records changed since ``since`` (everything when None)."""
        return self._fetch_records(
            self.profile.updates_endpoint,
            self.profile.updates_field,
            {"since": since.isoformat() if since else None},
        )
