# Shared fixtures: isolated settings, fake storage, signed-in sessions.
# Created: 2026-10-12

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from cloudarchive.auth import Identity, create_session_token
from cloudarchive.config import get_settings
from cloudarchive.hierarchy import StorageObject
from cloudarchive.storage import DownloadReference, GCSClient

SESSION_SECRET = "test-session-secret"
ALLOWED = "alice@example.com; Bob@Example.com"

_ENV = (
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_SERVICE_ACCOUNT",
    "ALLOWED_USERS",
    "CLOUDARCHIVE_SESSION_SECRET",
    "CLOUDARCHIVE_SESSION_TTL_HOURS",
    "CLOUDARCHIVE_SIGNED_URL_TTL_MINUTES",
    "CLOUDARCHIVE_PUBLIC_URL",
    "CLOUDARCHIVE_HOST",
    "CLOUDARCHIVE_PORT",
    "CLOUDARCHIVE_CORS_ORIGINS",
    "CLOUDARCHIVE_LOG_LEVEL",
)

SAMPLE_OBJECTS = [
    StorageObject("a/b.txt", 10),
    StorageObject("a/c/d.txt", 20),
    StorageObject("e.txt", 5),
]


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Fresh settings, browser registry and storage client for every test."""
    for var in _ENV:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("CLOUDARCHIVE_SESSION_SECRET", SESSION_SECRET)
    monkeypatch.setenv("ALLOWED_USERS", ALLOWED)
    monkeypatch.setenv("GOOGLE_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("GOOGLE_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setattr("cloudarchive.hierarchy.browser._registry", None)
    monkeypatch.setattr("cloudarchive.storage._client", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_objects():
    return list(SAMPLE_OBJECTS)


@pytest.fixture
def session_secret():
    return SESSION_SECRET


@pytest.fixture
def storage():
    """A GCSClient double serving SAMPLE_OBJECTS from two buckets."""
    fake = MagicMock(spec=GCSClient)
    fake.list_buckets.return_value = ["archive", "photos"]
    fake.list_bucket_contents.return_value = list(SAMPLE_OBJECTS)
    fake.get_download_reference.return_value = DownloadReference(
        url="https://storage.googleapis.com/archive/a/b.txt?X-Goog-Signature=abc",
        suggested_filename="b.txt",
        expires_at=datetime(2026, 10, 12, 12, 0, tzinfo=UTC),
    )
    return fake


@pytest.fixture
def session_cookie():
    """Factory for signed session cookie values."""

    def make(
        email: str = "alice@example.com", name: str = "Alice", ttl_seconds: int = 3600
    ) -> str:
        subject = Identity(email=email, name=name).to_subject()
        return create_session_token(SESSION_SECRET, subject, ttl_seconds=ttl_seconds)

    return make
