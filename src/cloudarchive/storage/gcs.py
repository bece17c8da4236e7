# Google Cloud Storage client — bucket listing, object listing, downloads.
# Created: 2026-10-12
#
# Credentials come from the service-account JSON in GOOGLE_SERVICE_ACCOUNT.
# Every public method maps provider failures onto the user-safe errors in
# cloudarchive.storage.errors; the original exception is logged and chained.

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import quote

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud import storage
from google.oauth2 import service_account

from cloudarchive.hierarchy.models import StorageObject
from cloudarchive.storage.errors import (
    BucketListError,
    ContentsListError,
    DownloadError,
    NotFoundError,
    StorageConfigError,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024

_PROVIDER_ERRORS = (google_exceptions.GoogleAPIError, google_auth_exceptions.GoogleAuthError)


@dataclass(frozen=True)
class DownloadReference:
    """Time-limited download link for one object."""

    url: str
    suggested_filename: str
    expires_at: datetime


@dataclass
class DownloadStream:
    """An open object download."""

    chunks: Iterator[bytes]
    filename: str
    size: int | None = None
    content_type: str = "application/octet-stream"


def suggested_filename(key: str) -> str:
    return key.rstrip("/").rsplit("/", 1)[-1] or key


def content_disposition(filename: str) -> str:
    """``attachment`` disposition that survives any filename.

    Headers are latin-1 on the wire: the plain ``filename`` is an ASCII
    fallback and ``filename*`` (RFC 5987) carries the real UTF-8 name.
    """
    fallback = "".join(
        ch if " " <= ch <= "~" and ch not in '"\\' else "_" for ch in filename
    )
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def parse_service_account(raw: str | None) -> dict[str, Any]:
    """Parse the service-account JSON blob from configuration."""
    if not raw:
        raise StorageConfigError("GOOGLE_SERVICE_ACCOUNT environment variable is not set")
    try:
        info = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageConfigError("Invalid GOOGLE_SERVICE_ACCOUNT JSON format") from e
    if not isinstance(info, dict):
        raise StorageConfigError("Invalid GOOGLE_SERVICE_ACCOUNT JSON format")
    return info


class GCSClient:
    """Read-only access to the buckets of one GCP project.

    The underlying ``google.cloud.storage.Client`` is created on first use so
    that the web app can start (and show a useful error) without credentials.
    """

    def __init__(self, service_account_json: str | None, signed_url_ttl_minutes: int = 15):
        self._service_account_json = service_account_json
        self.signed_url_ttl = timedelta(minutes=signed_url_ttl_minutes)
        self._client: storage.Client | None = None

    def _get_client(self) -> storage.Client:
        if self._client is None:
            info = parse_service_account(self._service_account_json)
            try:
                credentials = service_account.Credentials.from_service_account_info(info)
            except (ValueError, KeyError) as e:
                raise StorageConfigError("Invalid GOOGLE_SERVICE_ACCOUNT credentials") from e
            self._client = storage.Client(
                project=info.get("project_id"),
                credentials=credentials,
            )
        return self._client

    def list_buckets(self) -> list[str]:
        """Names of all buckets in the project."""
        client = self._get_client()
        try:
            return [bucket.name for bucket in client.list_buckets()]
        except _PROVIDER_ERRORS as e:
            logger.error("Error listing GCP buckets: %s", e)
            raise BucketListError() from e

    def list_bucket_contents(self, bucket: str) -> list[StorageObject]:
        """Every object in *bucket* as ``StorageObject(key, size)``."""
        client = self._get_client()
        try:
            objects = [
                StorageObject(key=blob.name, size=int(blob.size or 0))
                for blob in client.list_blobs(bucket)
            ]
        except _PROVIDER_ERRORS as e:
            logger.error("Error listing contents of bucket %s: %s", bucket, e)
            raise ContentsListError(bucket) from e
        logger.debug("Listed %d objects in %s", len(objects), bucket)
        return objects

    def get_download_reference(self, bucket: str, key: str) -> DownloadReference:
        """Signed, time-limited GET URL for *key*."""
        client = self._get_client()
        blob = client.bucket(bucket).blob(key)
        filename = suggested_filename(key)
        try:
            if not blob.exists():
                raise NotFoundError(bucket, key)
            url = blob.generate_signed_url(
                version="v4",
                expiration=self.signed_url_ttl,
                method="GET",
                response_disposition=content_disposition(filename),
            )
        except NotFoundError:
            logger.info("Download requested for missing object %s/%s", bucket, key)
            raise
        except google_exceptions.NotFound as e:
            raise NotFoundError(bucket, key) from e
        except (*_PROVIDER_ERRORS, ValueError, AttributeError) as e:
            logger.error("Error signing URL for %s/%s: %s", bucket, key, e)
            raise DownloadError(bucket, key) from e

        return DownloadReference(
            url=url,
            suggested_filename=filename,
            expires_at=datetime.now(UTC) + self.signed_url_ttl,
        )

    def open_download(self, bucket: str, key: str) -> DownloadStream:
        """Stream the bytes of *key* through the server."""
        client = self._get_client()
        try:
            blob = client.bucket(bucket).get_blob(key)
        except google_exceptions.NotFound as e:
            raise NotFoundError(bucket, key) from e
        except _PROVIDER_ERRORS as e:
            logger.error("Error downloading file %s from %s: %s", key, bucket, e)
            raise DownloadError(bucket, key) from e
        if blob is None:
            raise NotFoundError(bucket, key)

        return DownloadStream(
            chunks=_iter_blob(blob, bucket, key),
            filename=suggested_filename(key),
            size=blob.size,
        )


def _iter_blob(blob: storage.Blob, bucket: str, key: str) -> Iterator[bytes]:
    try:
        with blob.open("rb") as fh:
            while True:
                chunk = fh.read(_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
    except _PROVIDER_ERRORS as e:
        # Headers are already sent; the client sees a truncated body
        logger.error("Error streaming file %s from %s: %s", key, bucket, e)
        raise DownloadError(bucket, key) from e
