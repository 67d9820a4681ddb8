"""
Foodprint Configuration Manager
===============================

One ``FoodprintConfig`` per process. It is read from the environment on
first use, or from the file given to ``foodprint --config``. Tests layer
temporary overrides on top with ``override_config``.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from foodprint.config.schemas import (
    FoodprintConfig,
    load_config_from_env,
    load_config_from_file,
)

logger = logging.getLogger(__name__)


def _merge(base: Dict[str, Any], updates: Dict[str, Any]) -> None:
    """Merge ``updates`` into ``base`` section by section."""
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


class ConfigManager:
    """
    Process-wide configuration holder.

    Usage:
        >>> ConfigManager.get_instance().load_from_file("foodprint.yaml")
        >>> with ConfigManager.get_instance().override(resolver={"max_workers": 2}) as config:
        ...     assert config.resolver.max_workers == 2
    """

    _instance: Optional["ConfigManager"] = None
    _lock = threading.Lock()

    def __init__(self):
        self._config: Optional[FoodprintConfig] = None
        self._overrides: List[Dict[str, Any]] = []
        self._config_lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the loaded configuration (for testing)."""
        with cls._lock:
            cls._instance = None

    def load_from_file(self, config_path: Union[Path, str]) -> FoodprintConfig:
        """
        Replace the process configuration with a YAML or JSON file.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        config = load_config_from_file(config_path)
        with self._config_lock:
            self._config = config
        logger.info(f"Config loaded from file: {config_path}")
        return config

    def get_config(self) -> FoodprintConfig:
        """Current configuration with active overrides applied."""
        with self._config_lock:
            if self._config is None:
                self._config = load_config_from_env()
                logger.debug(f"Config loaded from environment: {self._config.environment.value}")
            if not self._overrides:
                return self._config

            data = self._config.model_dump()
            for overrides in self._overrides:
                _merge(data, overrides)
            return FoodprintConfig(**data)

    @contextmanager
    def override(self, **overrides) -> Iterator[FoodprintConfig]:
        """Apply section overrides until the block exits; blocks nest."""
        with self._config_lock:
            self._overrides.append(overrides)
        try:
            yield self.get_config()
        finally:
            with self._config_lock:
                self._overrides.pop()


def get_config() -> FoodprintConfig:
    """Get current configuration."""
    return ConfigManager.get_instance().get_config()


def override_config(**overrides):
    """
    Override configuration temporarily.

    Example:
        >>> with override_config(debug=True):
        ...     assert get_config().debug is True
    """
    return ConfigManager.get_instance().override(**overrides)
