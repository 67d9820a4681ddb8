# -*- coding: utf-8 -*-
"""Builds the ranked list of emission-data sources from configuration."""

import logging
from typing import List

from foodprint.config.schemas import SourcesConfig
from foodprint.connectors.base import EmissionDataSource
from foodprint.connectors.http_source import DEFAULT_TIMEOUT_SECONDS, HttpEmissionSource
from foodprint.connectors.profiles import PROFILES

logger = logging.getLogger(__name__)


def build_sources(
    config: SourcesConfig, timeout: float = DEFAULT_TIMEOUT_SECONDS
) -> List[EmissionDataSource]:
    """
    Sources in priority order, highest first.

    Unknown provider names are logged and skipped. Providers without an API
    key are kept; they answer "no data" without touching the network.
    """
    if not config.enabled:
        logger.info("External emission sources disabled")
        return []

    sources: List[EmissionDataSource] = []
    for name in config.priority:
        key = name.lower().strip()
        profile = PROFILES.get(key)
        if profile is None:
            logger.warning(f"Unknown emission source in priority list: {name}")
            continue
        sources.append(
            HttpEmissionSource(
                profile,
                api_key=config.api_key(key),
                base_url=config.base_url(key),
                timeout=timeout,
            )
        )

    configured = [s.name for s in sources if s.is_configured]
    logger.info(f"Emission sources: {[s.name for s in sources]} (configured: {configured})")
    return sources
