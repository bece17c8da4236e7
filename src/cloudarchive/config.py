# Settings — environment-driven configuration for Cloud Archive.
# Created: 2026-10-12
#
# Settings are read from the process environment (and an optional .env
# file); get_settings() caches the result. Tests call
# get_settings.cache_clear() after patching env vars.

from __future__ import annotations

import logging
import secrets
from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cloudarchive.auth.allowlist import AllowList

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Cloud Archive configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    # Google
    google_client_id: str = Field(default="", validation_alias="GOOGLE_CLIENT_ID")
    google_client_secret: str = Field(
        default="", validation_alias="GOOGLE_CLIENT_SECRET", repr=False
    )
    google_service_account: str = Field(
        default="", validation_alias="GOOGLE_SERVICE_ACCOUNT", repr=False
    )
    allowed_users: str = Field(default="", validation_alias="ALLOWED_USERS")

    # Sessions and downloads
    session_secret: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        validation_alias="CLOUDARCHIVE_SESSION_SECRET",
        repr=False,
    )
    session_ttl_hours: int = Field(
        default=24, ge=1, validation_alias="CLOUDARCHIVE_SESSION_TTL_HOURS"
    )
    signed_url_ttl_minutes: int = Field(
        default=15,
        ge=1,
        le=7 * 24 * 60,
        validation_alias="CLOUDARCHIVE_SIGNED_URL_TTL_MINUTES",
    )

    # Server
    public_url: str = Field(
        default="http://localhost:8000", validation_alias="CLOUDARCHIVE_PUBLIC_URL"
    )
    host: str = Field(default="127.0.0.1", validation_alias="CLOUDARCHIVE_HOST")
    port: int = Field(default=8000, validation_alias="CLOUDARCHIVE_PORT")
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list, validation_alias="CLOUDARCHIVE_CORS_ORIGINS"
    )
    log_level: str = Field(default="INFO", validation_alias="CLOUDARCHIVE_LOG_LEVEL")

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("public_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def load(cls) -> Settings:
        """Read settings from the environment."""
        settings = cls()
        if "session_secret" not in settings.model_fields_set:
            logger.warning(
                "CLOUDARCHIVE_SESSION_SECRET not set; sessions will not survive a restart"
            )
        return settings

    def allow_list(self) -> AllowList:
        return AllowList.from_string(self.allowed_users)

    @property
    def oauth_redirect_uri(self) -> str:
        return f"{self.public_url}/auth/callback"

    @property
    def cookie_secure(self) -> bool:
        return self.public_url.startswith("https://")


@lru_cache
def get_settings() -> Settings:
    return Settings.load()
