# Bucket browsing schemas.
# Created: 2026-10-12

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from cloudarchive.api.v1.schemas.common import APIResponse


class BucketsResponse(APIResponse):
    """Buckets visible to the service account."""

    buckets: list[str] = []


class ObjectEntry(BaseModel):
    """One object of the flat listing."""

    key: str
    size: int = Field(0, ge=0)


class ContentsResponse(APIResponse):
    """Flat bucket listing."""

    bucket: str
    objects: list[ObjectEntry] = []
    total: int = 0


class FileEntry(BaseModel):
    """A file inside the current folder."""

    name: str
    size: int = 0
    size_label: str = ""


class Breadcrumb(BaseModel):
    label: str
    path: str


class FolderResponse(APIResponse):
    """Direct children of one virtual folder."""

    bucket: str
    path: str = ""
    files: list[FileEntry] = []
    subfolders: list[str] = []
    breadcrumbs: list[Breadcrumb] = []


class SearchFileEntry(FileEntry):
    """A file matched by a bucket-wide search."""

    full_path: str


class SearchResponse(APIResponse):
    """Bucket-wide search results."""

    bucket: str
    query: str = ""
    files: list[SearchFileEntry] = []
    folders: list[str] = []
    count: int = 0


class DownloadReferenceResponse(APIResponse):
    """Time-limited download link."""

    url: str
    filename: str
    expires_at: datetime
