# Tests for config.py — environment-driven settings.
# Created: 2026-10-12

import pytest
from pydantic import ValidationError

from cloudarchive.config import Settings, get_settings


@pytest.fixture
def bare_env(monkeypatch):
    """No Cloud Archive variables set at all."""
    for var in (
        "GOOGLE_CLIENT_ID",
        "GOOGLE_CLIENT_SECRET",
        "ALLOWED_USERS",
        "CLOUDARCHIVE_SESSION_SECRET",
    ):
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    def test_defaults(self, bare_env):
        settings = Settings.load()
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000
        assert settings.session_ttl_hours == 24
        assert settings.signed_url_ttl_minutes == 15
        assert settings.cors_allowed_origins == []
        assert len(settings.allow_list()) == 0

    def test_generated_secret_when_unset(self, bare_env):
        assert Settings.load().session_secret != Settings.load().session_secret

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_USERS", "a@x.com;B@y.com")
        monkeypatch.setenv("CLOUDARCHIVE_PORT", "9000")
        monkeypatch.setenv("CLOUDARCHIVE_PUBLIC_URL", "https://archive.example.com/")
        monkeypatch.setenv(
            "CLOUDARCHIVE_CORS_ORIGINS", "https://a.example.com, https://b.example.com"
        )
        monkeypatch.setenv("CLOUDARCHIVE_SIGNED_URL_TTL_MINUTES", "5")

        settings = Settings.load()

        assert settings.port == 9000
        assert settings.signed_url_ttl_minutes == 5
        assert settings.public_url == "https://archive.example.com"
        assert settings.oauth_redirect_uri == "https://archive.example.com/auth/callback"
        assert settings.cookie_secure
        assert settings.cors_allowed_origins == ["https://a.example.com", "https://b.example.com"]
        assert "b@y.com" in settings.allow_list()

    def test_generic_names_are_not_read(self, monkeypatch):
        monkeypatch.setenv("PORT", "1234")
        monkeypatch.setenv("HOST", "0.0.0.0")
        settings = Settings.load()
        assert settings.port == 8000
        assert settings.host == "127.0.0.1"

    def test_plain_http_cookies_not_secure(self):
        assert not Settings.load().cookie_secure

    def test_blank_values_use_defaults(self, monkeypatch):
        monkeypatch.setenv("CLOUDARCHIVE_PORT", "")
        assert Settings.load().port == 8000

    def test_signed_url_ttl_capped_at_one_week(self, monkeypatch):
        monkeypatch.setenv("CLOUDARCHIVE_SIGNED_URL_TTL_MINUTES", str(8 * 24 * 60))
        with pytest.raises(ValidationError):
            Settings.load()

    def test_secrets_not_in_repr(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SERVICE_ACCOUNT", '{"private_key": "xyz"}')
        settings = Settings.load()
        assert "xyz" not in repr(settings)
        assert "test-client-secret" not in repr(settings)

    def test_get_settings_cached_from_environ(self, session_secret):
        settings = get_settings()
        assert settings is get_settings()
        assert settings.session_secret == session_secret
