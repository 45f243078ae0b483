"""Unit tests for configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config import Settings, get_settings

REQUIRED_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SECRET_KEY": "test-secret",
    "SUPABASE_SIGNING_KEY_JWK": "{}",
    "OPENAI_API_KEY": "sk-test",
}


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_environment(self) -> None:
        """Test that Settings loads values from environment variables."""
        env_vars = {
            **REQUIRED_ENV,
            "APP_NAME": "test-app",
            "APP_ENV": "staging",
            "DEBUG": "true",
            "PORT": "9000",
            "OPENAI_MODEL": "llama-3.1-8b-instant",
            "OPENAI_BASE_URL": "https://api.groq.com/openai/v1",
            "MUTUAL_REQUEST_POLICY": "auto_accept",
            "QR_PAYLOAD_KIND": "acme_connect",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.app_name == "test-app"
            assert settings.debug is True
            assert settings.port == 9000
            assert settings.openai_model == "llama-3.1-8b-instant"
            assert settings.openai_base_url == "https://api.groq.com/openai/v1"
            assert settings.mutual_request_policy == "auto_accept"
            assert settings.qr_payload_kind == "acme_connect"

    def test_defaults(self) -> None:
        """Test defaults for connection and AI settings."""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.qr_payload_kind == "netwify_connect"
            assert settings.mutual_request_policy == "independent"
            assert settings.supabase_jwt_audience == "authenticated"
            assert settings.db_read_max_attempts == 3
            assert settings.recent_contacts_limit == 5

    def test_rejects_unknown_mutual_policy(self) -> None:
        """Test that only the supported policies are accepted."""
        with patch.dict(os.environ, {**REQUIRED_ENV, "MUTUAL_REQUEST_POLICY": "merge"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_missing_required_settings(self) -> None:
        """Test that missing credentials fail validation."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_settings_cors_origins_list(self) -> None:
        """Test that CORS origins are correctly parsed into a list."""
        env_vars = {**REQUIRED_ENV, "CORS_ORIGINS": "http://localhost:8081, http://example.com , "}

        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

            assert settings.cors_origins_list == ["http://localhost:8081", "http://example.com"]


class TestMockOpenAI:
    """Tests for the mock_openai default."""

    @pytest.mark.parametrize(
        ("app_env", "expected"),
        [("development", True), ("test", True), ("production", False)],
    )
    def test_default_follows_environment(self, app_env: str, expected: bool) -> None:
        """Test that generation is mocked everywhere except production."""
        with patch.dict(os.environ, {**REQUIRED_ENV, "APP_ENV": app_env}, clear=True):
            assert Settings(_env_file=None).mock_openai is expected

    def test_explicit_value_wins_in_production(self) -> None:
        """Test that MOCK_OPENAI overrides the environment default."""
        with patch.dict(os.environ, {**REQUIRED_ENV, "APP_ENV": "production", "MOCK_OPENAI": "true"}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.mock_openai is True
            assert settings.is_production is True


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_is_cached(self) -> None:
        """Test that get_settings returns the same instance."""
        assert get_settings() is get_settings()
