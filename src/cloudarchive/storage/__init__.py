"""Object-storage access for Cloud Archive (Google Cloud Storage)."""

from __future__ import annotations

from cloudarchive.storage.errors import (
    BucketListError,
    ContentsListError,
    DownloadError,
    FetchError,
    NotFoundError,
    StorageConfigError,
)
from cloudarchive.storage.gcs import (
    DownloadReference,
    DownloadStream,
    GCSClient,
    content_disposition,
)

__all__ = [
    "BucketListError",
    "ContentsListError",
    "DownloadError",
    "DownloadReference",
    "DownloadStream",
    "FetchError",
    "GCSClient",
    "NotFoundError",
    "StorageConfigError",
    "content_disposition",
    "get_storage_client",
]

_client: GCSClient | None = None


def get_storage_client() -> GCSClient:
    """Process-wide storage client built from settings."""
    global _client
    if _client is None:
        from cloudarchive.config import get_settings

        settings = get_settings()
        _client = GCSClient(
            settings.google_service_account,
            signed_url_ttl_minutes=settings.signed_url_ttl_minutes,
        )
    return _client
