"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, and default values.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from gemini_proxy.core.config import settings as settings_module
from gemini_proxy.core.config.settings import Settings, get_settings, reload_settings


@pytest.mark.unit
class TestSettingsDefaults:
    """Test default values when nothing is configured."""

    def test_upstream_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.GEMINI_API_KEY is None
        assert settings.GEMINI_MODEL == "gemini-1.5-pro"
        assert settings.GEMINI_BASE_URL == "https://generative.googleapis.com/v1beta2"
        assert settings.GEMINI_MAX_OUTPUT_TOKENS == 512
        assert settings.REQUEST_TIMEOUT == 30000

    def test_server_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.PORT == 3000
        assert settings.MAX_REQUEST_BODY_BYTES == 256 * 1024
        assert settings.SSE_HEARTBEAT_INTERVAL == 15.0
        assert settings.CORS_ORIGINS == ["*"]
        assert settings.LOG_FORMAT == "json"

    def test_api_key_not_configured_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.api_key_configured is False


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Test environment variable loading and validation."""

    def test_environment_overrides_defaults(self):
        env = {
            "GEMINI_API_KEY": "from-env",
            "GEMINI_MODEL": "text-bison-001",
            "REQUEST_TIMEOUT": "5000",
            "PORT": "8080",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.GEMINI_API_KEY == "from-env"
        assert settings.GEMINI_MODEL == "text-bison-001"
        assert settings.REQUEST_TIMEOUT == 5000
        assert settings.PORT == 8080

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_api_key_counts_as_missing(self, value):
        with patch.dict(os.environ, {"GEMINI_API_KEY": value}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.GEMINI_API_KEY is None
        assert settings.api_key_configured is False

    def test_log_level_is_uppercased(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "VERBOSE"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    @pytest.mark.parametrize("value", ["0", "-100"])
    def test_non_positive_timeout_rejected(self, value):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT": value}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_unknown_variables_are_ignored(self):
        with patch.dict(os.environ, {"SOMETHING_ELSE": "x"}, clear=True):
            settings = Settings(_env_file=None)

        assert not hasattr(settings, "SOMETHING_ELSE")


@pytest.mark.unit
class TestDerivedSettings:
    """Test computed properties."""

    def test_upstream_url(self):
        settings = Settings(_env_file=None, GEMINI_BASE_URL="https://example.test/v1beta2/", GEMINI_MODEL="m1")

        assert settings.upstream_url == "https://example.test/v1beta2/models/m1:generateText"

    def test_request_timeout_seconds(self):
        settings = Settings(_env_file=None, REQUEST_TIMEOUT=1500)

        assert settings.request_timeout_seconds == 1.5


@pytest.mark.unit
class TestSettingsSingleton:
    """Test get_settings caching and reload."""

    def test_get_settings_returns_same_instance(self):
        with patch.object(settings_module, "_settings", None):
            assert get_settings() is get_settings()

    def test_reload_settings_picks_up_environment(self):
        with patch.object(settings_module, "_settings", None):
            first = get_settings()
            with patch.dict(os.environ, {"GEMINI_MODEL": "reloaded-model"}):
                reloaded = reload_settings()

            assert reloaded is not first
            assert reloaded.GEMINI_MODEL == "reloaded-model"
            assert get_settings() is reloaded
