"""Tests for settings and logging setup."""

import logging

from fusion.config import FusionSettings
from fusion.utilities import setup_logging


class TestFusionSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FUSION_API_BASE_URL", "FUSION_DEFAULT_TIMEOUT_MS", "FUSION_CACHE_ENABLED"):
            monkeypatch.delenv(name, raising=False)
        settings = FusionSettings(_env_file=None)
        assert settings.api_base_url == "http://localhost:8080"
        assert settings.default_timeout_ms == 30000
        assert settings.cache_enabled is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FUSION_API_BASE_URL", "https://platform.test")
        monkeypatch.setenv("FUSION_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("FUSION_CACHE_ENABLED", "false")

        settings = FusionSettings(_env_file=None)

        assert settings.api_base_url == "https://platform.test"
        assert settings.cache_ttl_seconds == 60
        assert settings.cache_enabled is False


class TestSetupLogging:
    def test_quiets_http_loggers(self):
        setup_logging("debug")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_unknown_level_name_does_not_raise(self):
        setup_logging("chatty")
