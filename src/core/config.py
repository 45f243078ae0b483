"""Application configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MutualRequestPolicy = Literal["independent", "auto_accept"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="netwify-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:8081,http://localhost:19006",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    supabase_signing_key_jwk: str = Field(..., description="Supabase signing key JWK (JSON string) for JWT token verification")
    supabase_jwt_audience: str | None = Field(
        default="authenticated",
        description="Expected JWT audience claim (unset to skip the audience check)",
    )
    db_read_max_attempts: int = Field(default=3, ge=1, description="Attempts for database reads before giving up")

    # Text generation (any OpenAI-compatible chat completions endpoint)
    openai_api_key: str = Field(..., description="API key for the text generation endpoint")
    openai_base_url: str | None = Field(default=None, description="Override base URL (e.g. Groq's OpenAI-compatible API)")
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model used for summaries and follow-ups")
    openai_max_tokens: int = Field(default=150, description="Max completion tokens per generation")
    openai_temperature: float = Field(default=0.7, description="Sampling temperature")
    mock_openai: bool | None = Field(default=None, description="Return canned text instead of calling the endpoint. Auto-enabled outside production.")

    # Connections
    qr_payload_kind: str = Field(default="netwify_connect", description="Literal identifying this app's QR connect payload")
    mutual_request_policy: MutualRequestPolicy = Field(
        default="independent",
        description="How a request to a user who already has a pending request to the sender is handled",
    )
    recent_contacts_limit: int = Field(default=5, ge=1, description="Contacts returned by the recent contacts endpoint")

    # AI rate limiting
    ai_rate_limit_requests: int = Field(default=20, description="AI generation requests allowed per user per window")
    ai_rate_limit_window_seconds: int = Field(default=3600, description="AI rate limit window in seconds")

    @model_validator(mode="after")
    def set_mock_openai_default(self) -> "Settings":
        """Set mock_openai based on environment if MOCK_OPENAI was not set.

        Production never mocks unless MOCK_OPENAI is explicitly provided.
        """
        if self.mock_openai is None:
            self.mock_openai = self.app_env != "production"

        return self

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
