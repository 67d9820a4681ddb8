# -*- coding: utf-8 -*-
"""Wire profiles of the supported emission-data providers."""

from typing import Dict

from foodprint.connectors.http_source import AUTH_API_KEY_HEADER, SourceProfile

KLIMATO = SourceProfile(
    name="klimato",
    display_name="Klimato",
    factor_endpoint="emissions",
    factor_field="factor",
    bulk_endpoint="emissions/bulk",
    updates_endpoint="emissions/updates",
    bulk_field="factors",
    updates_field="updates",
    metadata_object="metadata",
)

SUEATABLE = SourceProfile(
    name="sueatable",
    display_name="SU-EATABLE",
    auth=AUTH_API_KEY_HEADER,
    factor_endpoint="emission-factors",
    factor_field="emissionFactor",
    bulk_endpoint="emission-factors/all",
    updates_endpoint="emission-factors/updates",
    bulk_field="factors",
    updates_field="updates",
    metadata_fields=("uncertainty", "reference"),
)

EATERNITY = SourceProfile(
    name="eaternity",
    display_name="Eaternity",
    factor_endpoint="co2values",
    factor_field="co2value",
    bulk_endpoint="co2values/database",
    updates_endpoint="co2values/updates",
    bulk_field="values",
    updates_field="values",
    record_value_field="co2value",
    metadata_fields=("unit", "origin"),
)

MYEMISSIONS = SourceProfile(
    name="myemissions",
    display_name="MyEmissions",
    factor_endpoint="carbon-factors",
    factor_field="carbonFactor",
    bulk_endpoint="carbon-factors/all",
    updates_endpoint="carbon-factors/updates",
    item_param="food",
    country_param="region",
    record_item_field="food",
    record_country_field="region",
    record_value_field="carbonFactor",
    metadata_fields=("rating", "systemBoundaries"),
)

IPCC = SourceProfile(
    name="ipcc",
    display_name="IPCC",
    factor_endpoint="emissions-factors",
    factor_field="factor",
    bulk_endpoint="emissions-factors/database",
    updates_endpoint="emissions-factors/updates",
    country_param="region",
    record_country_field="region",
    record_value_field="factor",
    metadata_fields=("year", "uncertainty"),
)

PROFILES: Dict[str, SourceProfile] = {
    profile.name: profile for profile in (KLIMATO, SUEATABLE, EATERNITY, MYEMISSIONS, IPCC)
}
