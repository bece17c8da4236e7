# Buckets router — bucket list, flat listing, folder view, search, downloads.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse, StreamingResponse

from cloudarchive.api.deps import get_browser, get_storage, require_user
from cloudarchive.api.v1.schemas.buckets import (
    Breadcrumb,
    BucketsResponse,
    ContentsResponse,
    DownloadReferenceResponse,
    FileEntry,
    FolderResponse,
    ObjectEntry,
    SearchFileEntry,
    SearchResponse,
)
from cloudarchive.api.v1.schemas.common import ErrorResponse
from cloudarchive.hierarchy import BucketBrowser, breadcrumbs, format_size
from cloudarchive.storage import GCSClient, content_disposition

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Buckets"],
    dependencies=[Depends(require_user)],
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        502: {"model": ErrorResponse, "description": "Storage request failed"},
        503: {"model": ErrorResponse, "description": "Storage credentials missing or invalid"},
    },
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Object not found"}}


async def load_bucket(
    browser: BucketBrowser,
    storage: GCSClient,
    bucket: str,
    refresh: bool = False,
) -> BucketBrowser:
    """Make sure *browser* holds the tree of *bucket*, fetching if needed.

    Returns the browser to answer from. When another selection superseded
    this fetch while it was in flight, the listing is served from a
    throwaway browser instead of overwriting the newer selection.
    """
    if browser.is_loaded and browser.bucket == bucket and not refresh:
        return browser

    ticket = browser.begin_selection(bucket)
    objects = await run_in_threadpool(storage.list_bucket_contents, bucket)
    if browser.complete_selection(ticket, objects):
        return browser

    detached = BucketBrowser()
    detached.select_bucket(bucket, objects)
    return detached


@router.get("/buckets", response_model=BucketsResponse)
async def list_buckets(storage: GCSClient = Depends(get_storage)):
    """List bucket names."""
    buckets = await run_in_threadpool(storage.list_buckets)
    return BucketsResponse(buckets=buckets)


@router.get("/buckets/{bucket}/contents", response_model=ContentsResponse)
async def list_contents(
    bucket: str,
    refresh: bool = False,
    storage: GCSClient = Depends(get_storage),
    browser: BucketBrowser = Depends(get_browser),
):
    """Flat listing of every object in the bucket."""
    active = await load_bucket(browser, storage, bucket, refresh=refresh)
    objects = [ObjectEntry(key=obj.key, size=obj.size) for obj in active.objects]
    return ContentsResponse(bucket=bucket, objects=objects, total=len(objects))


@router.get("/buckets/{bucket}/folder", response_model=FolderResponse)
async def get_folder(
    bucket: str,
    path: str = "",
    refresh: bool = False,
    storage: GCSClient = Depends(get_storage),
    browser: BucketBrowser = Depends(get_browser),
):
    """Direct files and subfolders of the folder at *path* (empty = root)."""
    active = await load_bucket(browser, storage, bucket, refresh=refresh)
    active.navigate(active.state.select_folder(path))
    view = active.folder_view()
    return FolderResponse(
        bucket=bucket,
        path=path,
        files=[
            FileEntry(name=item.name, size=item.size, size_label=format_size(item.size))
            for item in view.files
        ],
        subfolders=view.subfolders,
        breadcrumbs=[Breadcrumb(label=label, path=crumb) for label, crumb in breadcrumbs(path)],
    )


@router.get("/buckets/{bucket}/search", response_model=SearchResponse)
async def search_bucket(
    bucket: str,
    q: str = "",
    refresh: bool = False,
    storage: GCSClient = Depends(get_storage),
    browser: BucketBrowser = Depends(get_browser),
):
    """Case-insensitive search over every file key and folder in the bucket."""
    active = await load_bucket(browser, storage, bucket, refresh=refresh)
    active.navigate(active.state.search(q))
    results = active.search(q)
    return SearchResponse(
        bucket=bucket,
        query=results.query,
        files=[
            SearchFileEntry(
                name=hit.name,
                size=hit.size,
                size_label=format_size(hit.size),
                full_path=hit.full_path,
            )
            for hit in results.files
        ],
        folders=results.folders,
        count=results.count,
    )


@router.get(
    "/buckets/{bucket}/download-url",
    response_model=DownloadReferenceResponse,
    responses=_NOT_FOUND,
)
async def get_download_url(
    bucket: str,
    key: str = Query(..., min_length=1),
    storage: GCSClient = Depends(get_storage),
):
    """Issue a time-limited signed URL for one object."""
    ref = await run_in_threadpool(storage.get_download_reference, bucket, key)
    return DownloadReferenceResponse(
        url=ref.url,
        filename=ref.suggested_filename,
        expires_at=ref.expires_at,
    )


@router.get("/buckets/{bucket}/download", responses=_NOT_FOUND)
async def download_redirect(
    bucket: str,
    key: str = Query(..., min_length=1),
    storage: GCSClient = Depends(get_storage),
):
    """Redirect the browser to a fresh signed URL."""
    ref = await run_in_threadpool(storage.get_download_reference, bucket, key)
    return RedirectResponse(ref.url, status_code=307)


@router.get("/buckets/{bucket}/stream", responses=_NOT_FOUND)
async def stream_object(
    bucket: str,
    key: str = Query(..., min_length=1),
    storage: GCSClient = Depends(get_storage),
):
    """Stream the object bytes through the server as an attachment."""
    download = await run_in_threadpool(storage.open_download, bucket, key)
    headers = {"Content-Disposition": content_disposition(download.filename)}
    if download.size is not None:
        headers["Content-Length"] = str(download.size)
    logger.info("Streaming %s/%s", bucket, key)
    return StreamingResponse(download.chunks, media_type=download.content_type, headers=headers)
