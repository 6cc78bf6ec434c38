"""Application settings loaded from environment variables.

Environment Configuration:
    HUDDLE_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: SQLAlchemy connection string (required)

Session Token Configuration:
    SESSION_TOKEN_SIGNING_KEY: Base64-encoded HS256 key, at least 32 bytes
        (required in staging/prod; local/test fall back to a deterministic dev key)
    SESSION_TOKEN_ISSUER: `iss` claim minted into and required on session tokens
    SESSION_TOKEN_AUDIENCE: `aud` claim minted into and required on session tokens
    SESSION_TOKEN_TTL_SECONDS: Token lifetime (default one day)

Logging:
    LOG_JSON: Render logs as JSON (true) or with the console renderer (false)
"""

import base64
from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Deterministic signing key for local/test only. Never valid in staging/prod.
DEV_SESSION_TOKEN_SIGNING_KEY = base64.b64encode(b"huddle-dev-session-signing-key!!").decode()

MIN_SIGNING_KEY_BYTES = 32
MIN_TOKEN_TTL_SECONDS = 60
MAX_TOKEN_TTL_SECONDS = 30 * 24 * 3600


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - SESSION_TOKEN_SIGNING_KEY is required in staging and prod only
    - SESSION_TOKEN_SIGNING_KEY, when set, must be base64 of at least 32 bytes
    - SESSION_TOKEN_TTL_SECONDS must be between one minute and thirty days
    """

    huddle_env: Environment = Field(default=Environment.LOCAL, alias="HUDDLE_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Session token settings
    session_token_signing_key: str | None = Field(
        default=None, alias="SESSION_TOKEN_SIGNING_KEY"
    )
    session_token_issuer: str = Field(default="huddle", alias="SESSION_TOKEN_ISSUER")
    session_token_audience: str = Field(default="huddle-api", alias="SESSION_TOKEN_AUDIENCE")
    session_token_ttl_seconds: int = Field(default=86400, alias="SESSION_TOKEN_TTL_SECONDS")

    log_json: bool = Field(default=True, alias="LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure environment-dependent settings are present and sane."""
        if self.huddle_env in (Environment.STAGING, Environment.PROD):
            if not self.session_token_signing_key:
                raise ValueError(
                    f"SESSION_TOKEN_SIGNING_KEY is required for HUDDLE_ENV={self.huddle_env.value}"
                )

        if self.session_token_signing_key:
            try:
                key_bytes = base64.b64decode(self.session_token_signing_key, validate=True)
            except Exception as e:
                raise ValueError(f"SESSION_TOKEN_SIGNING_KEY is not valid base64: {e}") from e
            if len(key_bytes) < MIN_SIGNING_KEY_BYTES:
                raise ValueError(
                    f"SESSION_TOKEN_SIGNING_KEY must be at least {MIN_SIGNING_KEY_BYTES} bytes, "
                    f"got {len(key_bytes)}"
                )

        if not MIN_TOKEN_TTL_SECONDS <= self.session_token_ttl_seconds <= MAX_TOKEN_TTL_SECONDS:
            raise ValueError(
                "SESSION_TOKEN_TTL_SECONDS must be between "
                f"{MIN_TOKEN_TTL_SECONDS} and {MAX_TOKEN_TTL_SECONDS}"
            )

        return self

    @property
    def effective_session_token_signing_key(self) -> str:
        """Return the configured signing key, or the dev key in local/test."""
        return self.session_token_signing_key or DEV_SESSION_TOKEN_SIGNING_KEY


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
