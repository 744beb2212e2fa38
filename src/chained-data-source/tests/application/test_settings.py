"""Tests for application settings."""

import logging

import pytest

from application.settings import Settings, configure_logging


class TestSettings:
    """Test Settings defaults and environment overrides."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.identity_authority_url == "https://login.microsoftonline.com"
        assert settings.tenant_scoped_auth is True
        assert settings.identity_load_frame_timeout == 6.0
        assert settings.default_client_id_storage_key == "ValoAadClientId"
        assert settings.template_unauthenticated_links is True
        assert settings.template_multi_placeholder is False
        assert settings.parallel_client_acquisition is False

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CHAIN_HTTP_TIMEOUT", "12.5")
        monkeypatch.setenv("TEMPLATE_MULTI_PLACEHOLDER", "true")

        settings = Settings()

        assert settings.chain_http_timeout == 12.5
        assert settings.template_multi_placeholder is True

    @pytest.mark.parametrize("name", ["debug", "environment", "service_name", "service_version"])
    def test_declares_only_consumed_options(self, name: str) -> None:
        assert name not in Settings.model_fields


class TestConfigureLogging:
    """Test logging configuration."""

    def test_quiets_http_client_loggers(self) -> None:
        configure_logging("DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
