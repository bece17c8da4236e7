# Storage errors — user-safe failures raised at the storage boundary.
# Created: 2026-10-12
#
# Messages are shown to users as-is. Provider exceptions are chained via
# ``raise ... from`` and logged, never put into the message.

from __future__ import annotations


class FetchError(Exception):
    """A listing or download-reference request failed upstream (retryable)."""

    status_code = 502

    def __init__(self, message: str = "Failed to fetch from storage"):
        self.message = message
        super().__init__(message)


class StorageConfigError(FetchError):
    """Storage credentials are missing or unreadable."""

    status_code = 503


class BucketListError(FetchError):
    def __init__(self):
        super().__init__("Failed to list buckets")


class ContentsListError(FetchError):
    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(f"Failed to list contents of bucket {bucket}")


class DownloadError(FetchError):
    def __init__(self, bucket: str, key: str):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Failed to download file {key} from bucket {bucket}")


class NotFoundError(DownloadError):
    status_code = 404

    def __init__(self, bucket: str, key: str):
        super().__init__(bucket, key)
        self.message = f"File {key} not found in bucket {bucket}"
        self.args = (self.message,)
