"""Tests for application configuration."""

import base64

import pytest
from pydantic import ValidationError

from huddle.config import DEV_SESSION_TOKEN_SIGNING_KEY, Environment, Settings


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "sqlite+pysqlite://",
        "HUDDLE_ENV": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


STRONG_KEY = base64.b64encode(b"k" * 32).decode()


class TestSessionTokenSettings:
    """Session token configuration defaults and validation."""

    def test_defaults(self):
        s = _make_settings()
        assert s.huddle_env == Environment.TEST
        assert s.session_token_issuer == "huddle"
        assert s.session_token_audience == "huddle-api"
        assert s.session_token_ttl_seconds == 86400
        assert s.log_json is True

    def test_dev_key_used_when_unset_outside_prod(self):
        s = _make_settings(SESSION_TOKEN_SIGNING_KEY=None)
        assert s.effective_session_token_signing_key == DEV_SESSION_TOKEN_SIGNING_KEY

    def test_configured_key_wins(self):
        s = _make_settings(SESSION_TOKEN_SIGNING_KEY=STRONG_KEY)
        assert s.effective_session_token_signing_key == STRONG_KEY

    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_key_required_in_deployed_envs(self, env):
        with pytest.raises(ValidationError, match="SESSION_TOKEN_SIGNING_KEY is required"):
            _make_settings(HUDDLE_ENV=env, SESSION_TOKEN_SIGNING_KEY=None)

    def test_short_key_rejected(self):
        short = base64.b64encode(b"short").decode()
        with pytest.raises(ValidationError, match="at least 32 bytes"):
            _make_settings(SESSION_TOKEN_SIGNING_KEY=short)

    def test_non_base64_key_rejected(self):
        with pytest.raises(ValidationError, match="not valid base64"):
            _make_settings(SESSION_TOKEN_SIGNING_KEY="not base64!!")

    @pytest.mark.parametrize("ttl", [10, 31 * 24 * 3600])
    def test_ttl_out_of_range_rejected(self, ttl):
        with pytest.raises(ValidationError, match="SESSION_TOKEN_TTL_SECONDS"):
            _make_settings(SESSION_TOKEN_TTL_SECONDS=ttl)


class TestDatabaseSettings:
    """DATABASE_URL handling."""

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, HUDDLE_ENV="test")
