"""Foodprint configuration."""

from foodprint.config.manager import (
    ConfigManager,
    get_config,
    override_config,
)
from foodprint.config.schemas import (
    AggregationConfig,
    CacheConfig,
    DatabaseConfig,
    Environment,
    FoodprintConfig,
    InferenceConfig,
    LoggingConfig,
    RefreshConfig,
    ResolverConfig,
    SourcesConfig,
    load_config_from_env,
    load_config_from_file,
)

__all__ = [
    "ConfigManager",
    "get_config",
    "override_config",
    "AggregationConfig",
    "CacheConfig",
    "DatabaseConfig",
    "Environment",
    "FoodprintConfig",
    "InferenceConfig",
    "LoggingConfig",
    "RefreshConfig",
    "ResolverConfig",
    "SourcesConfig",
    "load_config_from_env",
    "load_config_from_file",
]
