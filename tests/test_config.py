"""
Configuration Tests

This test suite validates:
- Defaults of every configuration section
- Environment variable overrides
- YAML and JSON file loading
- File loading and temporary overrides through the config manager
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from foodprint.config import ConfigManager, get_config, override_config
from foodprint.config.schemas import (
    Environment,
    FoodprintConfig,
    InferenceConfig,
    LoggingConfig,
    SourcesConfig,
    load_config_from_file,
)
from foodprint.exceptions import ConfigurationError


# ==================== DEFAULTS ====================

class TestDefaults:
    def test_section_defaults(self):
        config = FoodprintConfig()
        assert config.environment == Environment.DEVELOPMENT
        assert config.cache.factor_ttl_seconds == 3600
        assert config.resolver.request_deadline_seconds == 20.0
        assert config.resolver.external_timeout_seconds == 10.0
        assert config.aggregation.waste_prevention_rate == 0.70
        assert config.aggregation.perishable_multiplier == 1.2
        assert config.refresh.enabled is True
        assert config.refresh.interval_hours == 24.0

    def test_source_priority(self):
        assert SourcesConfig().priority == [
            "klimato", "sueatable", "eaternity", "myemissions", "ipcc"
        ]

    def test_inference_unconfigured_without_key(self):
        assert InferenceConfig().is_configured is False


# ==================== ENVIRONMENT ====================

class TestEnvironment:
    """Values read from environment variables."""

    def test_provider_key_from_env(self, monkeypatch):
        monkeypatch.setenv("KLIMATO_API_KEY", "secret")
        assert SourcesConfig().api_key("klimato") == "secret"

    def test_gemini_key_enables_inference(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        config = InferenceConfig()
        assert config.api_key == "g-key"
        assert config.is_configured

    def test_cache_ttl_from_env(self, monkeypatch):
        monkeypatch.setenv("FOODPRINT_CACHE_FACTOR_TTL_SECONDS", "120")
        assert FoodprintConfig().cache.factor_ttl_seconds == 120

    def test_log_level_is_validated(self):
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(PydanticValidationError):
            LoggingConfig(level="chatty")


# ==================== FILES ====================

class TestFileLoading:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "foodprint.yaml"
        path.write_text(
            "environment: test\n"
            "resolver:\n"
            "  max_workers: 2\n"
            "aggregation:\n"
            "  waste_prevention_rate: 0.5\n"
        )
        config = load_config_from_file(path)
        assert config.is_test()
        assert not config.is_production()
        assert config.resolver.max_workers == 2
        assert config.aggregation.waste_prevention_rate == 0.5
        assert config.cache.factor_ttl_seconds == 3600

    def test_json_file(self, tmp_path):
        path = tmp_path / "foodprint.json"
        path.write_text('{"cache": {"result_ttl_seconds": 60}}')
        assert load_config_from_file(path).cache.result_ttl_seconds == 60

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config_from_file(tmp_path / "absent.yaml")

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_config_from_file(path)

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config_from_file(path)


# ==================== MANAGER ====================

class TestConfigManager:
    def test_singleton(self):
        assert ConfigManager.get_instance() is ConfigManager.get_instance()

    def test_override_is_temporary(self):
        with override_config(resolver={"max_workers": 2}) as config:
            assert config.resolver.max_workers == 2
            assert get_config().resolver.max_workers == 2
        assert get_config().resolver.max_workers == 8

    def test_nested_overrides_merge(self):
        with override_config(resolver={"max_workers": 2}):
            with override_config(cache={"max_size": 10}):
                config = get_config()
                assert config.resolver.max_workers == 2
                assert config.cache.max_size == 10

    def test_load_from_file_replaces_config(self, tmp_path):
        path = tmp_path / "foodprint.yaml"
        path.write_text("debug: true\nrefresh:\n  interval_hours: 6\n")
        ConfigManager.get_instance().load_from_file(path)
        assert get_config().debug is True
        assert get_config().refresh.interval_hours == 6

    def test_failed_load_keeps_current_config(self, tmp_path):
        before = get_config()
        with pytest.raises(ConfigurationError):
            ConfigManager.get_instance().load_from_file(tmp_path / "absent.yaml")
        assert get_config() is before

    def test_override_removed_after_error(self):
        with pytest.raises(RuntimeError):
            with override_config(debug=True):
                raise RuntimeError("boom")
        assert get_config().debug is False
