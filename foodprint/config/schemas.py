# -*- coding: utf-8 -*-
"""
Configuration schemas for Foodprint.

Each section is its own settings class with an environment prefix, composed
into ``FoodprintConfig``. Values come from the environment by default or
from a YAML/JSON file via ``load_config_from_file``.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from foodprint.exceptions import ConfigurationError


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class DatabaseConfig(BaseSettings):
    """Structured reference store configuration."""

    url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy database URL; overrides path when set",
    )
    path: str = Field(
        default="~/.foodprint/foodprint.db",
        description="SQLite file used when no URL is configured",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_DB_")


class CacheConfig(BaseSettings):
    """Memory cache configuration."""

    factor_ttl_seconds: int = Field(
        default=3600, ge=1, description="TTL for resolved emission factors"
    )
    result_ttl_seconds: int = Field(
        default=300, ge=1, description="TTL for whole calculation results"
    )
    max_size: int = Field(default=5000, ge=1, description="Maximum entries per cache")

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_CACHE_")


class ResolverConfig(BaseSettings):
    """Emission factor resolution and request concurrency."""

    external_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout applied to each external source call"
    )
    request_deadline_seconds: float = Field(
        default=20.0, gt=0, description="Overall deadline for one calculation request"
    )
    max_workers: int = Field(
        default=8, ge=1, description="Worker threads for per-ingredient resolution"
    )
    default_country: str = Field(default="global", description="Country when none is given")

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_RESOLVER_")


class SourcesConfig(BaseSettings):
    """External emission-data providers.

    Base URLs and keys use the providers' own variable names
    (``KLIMATO_API_URL``, ``KLIMATO_API_KEY``, ...).
    """

    enabled: bool = Field(
        default=True,
        validation_alias=AliasChoices("FOODPRINT_SOURCES_ENABLED", "enabled"),
        description="Consult external providers at all",
    )
    priority: List[str] = Field(
        default=["klimato", "sueatable", "eaternity", "myemissions", "ipcc"],
        validation_alias=AliasChoices("FOODPRINT_SOURCES_PRIORITY", "priority"),
        description="Provider order, highest priority first",
    )

    klimato_api_url: str = "https://api.klimato.com/v1"
    klimato_api_key: Optional[str] = None
    sueatable_api_url: str = "https://api.sueatable.org/v1"
    sueatable_api_key: Optional[str] = None
    eaternity_api_url: str = "https://eaternity.ch/api/v1"
    eaternity_api_key: Optional[str] = None
    myemissions_api_url: str = "https://api.myemissions.co/v1"
    myemissions_api_key: Optional[str] = None
    ipcc_api_url: str = "https://ipcc-emissions-factors.org/api"
    ipcc_api_key: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True, extra="ignore")

    def base_url(self, name: str) -> str:
        return getattr(self, f"{name}_api_url")

    def api_key(self, name: str) -> Optional[str]:
        return getattr(self, f"{name}_api_key")


class InferenceConfig(BaseSettings):
    """Inference enrichment service (OpenAI-compatible chat completions)."""

    enabled: bool = Field(default=True, description="Use enrichment when a key is configured")
    api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
        description="Chat-completions endpoint",
    )
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("FOODPRINT_INFERENCE_API_KEY", "GEMINI_API_KEY", "api_key"),
        description="Bearer credential for the inference service",
    )
    model: str = Field(default="gemini-1.5-flash", description="Model identifier")
    timeout_seconds: float = Field(default=15.0, gt=0, description="Request timeout")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_INFERENCE_", populate_by_name=True)

    @property
    def is_configured(self) -> bool:
        return self.enabled and bool(self.api_key)


class AggregationConfig(BaseSettings):
    """Dish-level aggregation constants."""

    waste_prevention_rate: float = Field(
        default=0.70, ge=0.0, le=1.0, description="Share of emissions avoided by rescue"
    )
    perishable_multiplier: float = Field(
        default=1.2, ge=1.0, description="Saved-emissions boost for perishable dishes"
    )
    perishable_keywords: List[str] = Field(
        default=["bread", "banana", "strawberry", "fish", "salad", "milk", "cream", "mushroom"],
    )

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_AGGREGATION_")


class RefreshConfig(BaseSettings):
    """Periodic reference-data refresh."""

    enabled: bool = Field(
        default=True, description="Refresh in the background while the HTTP app runs"
    )
    interval_hours: float = Field(default=24.0, gt=0)
    populate_on_start: bool = Field(
        default=True, description="Populate an empty store on first run"
    )

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_REFRESH_")


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_LOG_")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class FoodprintConfig(BaseSettings):
    """Main Foodprint configuration."""

    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = False

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="FOODPRINT_", extra="ignore")

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    def is_test(self) -> bool:
        return self.environment == Environment.TEST


def load_config_from_env() -> FoodprintConfig:
    """Build configuration from environment variables only."""
    return FoodprintConfig()


def load_config_from_file(config_path: Union[Path, str]) -> FoodprintConfig:
    """
    Load configuration from a YAML or JSON file.

    Missing sections fall back to environment values and defaults.

    Raises:
        ConfigurationError: If the file is missing or not a mapping
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}", config_key=str(config_path)
        )

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            data: Dict[str, Any] = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    return FoodprintConfig(**data)
