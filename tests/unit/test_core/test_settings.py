"""Unit tests for Pydantic Settings v2 configuration."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from flagfactory.core.settings import (
    FactorySettings,
    LoggingSettings,
    clear_all_caches,
    get_factory_settings,
    get_logging_settings,
)


@pytest.mark.unit
class TestFactorySettings:
    """Test suite for FactorySettings."""

    def test_defaults(self):
        settings = FactorySettings()

        assert settings.sdk_url == "https://sdk.flagfactory.io/api"
        assert settings.features_refresh_rate == 60.0
        assert settings.fetch_max_attempts == 3
        assert settings.block_until_ready is None
        assert settings.localhost_home is None

    def test_dump_contains_only_declared_fields(self):
        settings = FactorySettings()

        assert set(settings.model_dump()) == set(FactorySettings.model_fields)

    def test_frozen(self):
        settings = FactorySettings()

        with pytest.raises(ValidationError):
            settings.sdk_url = "http://other"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FLAGS_SDK_URL", "http://flags.internal/api/")
        monkeypatch.setenv("FLAGS_BLOCK_UNTIL_READY", "2.5")
        monkeypatch.setenv("FLAGS_LOCALHOST_HOME", "/srv/flags")

        settings = FactorySettings()

        assert settings.sdk_url == "http://flags.internal/api"
        assert settings.block_until_ready == 2.5
        assert settings.localhost_home == Path("/srv/flags")

    def test_url_scheme_is_required(self):
        with pytest.raises(ValidationError, match="sdk_url"):
            FactorySettings(sdk_url="flags.internal")

    @pytest.mark.parametrize(
        "field",
        ["features_refresh_rate", "connect_timeout", "read_timeout", "block_until_ready"],
    )
    def test_non_positive_durations_rejected(self, field):
        with pytest.raises(ValidationError):
            FactorySettings(**{field: 0})

    def test_yaml_config(self, tmp_path):
        conf = tmp_path / "conf"
        (conf / "flags.d").mkdir(parents=True)
        (conf / "flags.yaml").write_text("features_refresh_rate: 30\nfetch_max_attempts: 5\n")
        (conf / "flags.d" / "10-local.yaml").write_text("features_refresh_rate: 15\n")

        settings = FactorySettings()

        assert settings.features_refresh_rate == 15
        assert settings.fetch_max_attempts == 5

    def test_yaml_config_dir_override(self, tmp_path, monkeypatch):
        custom = tmp_path / "custom"
        custom.mkdir()
        (custom / "flags.yaml").write_text("read_timeout: 5\n")
        monkeypatch.setenv("FLAGS_CONFIG_DIR", str(custom))

        assert FactorySettings().read_timeout == 5

    def test_init_kwargs_win(self, monkeypatch):
        monkeypatch.setenv("FLAGS_FEATURES_REFRESH_RATE", "10")

        assert FactorySettings(features_refresh_rate=3).features_refresh_rate == 3


@pytest.mark.unit
class TestLoggingSettings:
    """Test suite for LoggingSettings."""

    def test_defaults(self):
        settings = LoggingSettings()

        assert settings.level == "WARNING"
        assert settings.json_logs is False
        assert settings.include_thread_info is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_JSON_LOGS", "true")

        settings = LoggingSettings()

        assert settings.level == "DEBUG"
        assert settings.json_logs is True

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="VERBOSE")

    def test_to_logging_kwargs(self):
        settings = LoggingSettings(level="info", json_logs=True)

        assert settings.to_logging_kwargs() == {
            "log_level": "INFO",
            "json_logs": True,
            "service_name": "flagfactory",
            "include_thread_info": False,
        }


@pytest.mark.unit
class TestLoaders:
    """Test suite for cached loaders."""

    def test_loaders_cache(self):
        assert get_factory_settings() is get_factory_settings()
        assert get_logging_settings() is get_logging_settings()

    def test_clear_all_caches(self, monkeypatch):
        first = get_factory_settings()
        monkeypatch.setenv("FLAGS_FETCH_MAX_ATTEMPTS", "7")
        clear_all_caches()

        second = get_factory_settings()

        assert second is not first
        assert second.fetch_max_attempts == 7
