# Bucket browser — one signed-in session's tree and navigation state.
# Created: 2026-10-12
#
# A browser owns the tree of exactly one bucket. Selecting another bucket
# replaces the tree wholesale. Listing fetches are tracked with a
# generation ticket so a slow, superseded fetch cannot overwrite a newer
# selection.

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from cloudarchive.hierarchy.engine import build_tree, get_folder_view, search
from cloudarchive.hierarchy.models import FolderNode, FolderView, SearchResults, StorageObject
from cloudarchive.hierarchy.navigation import NavigationMode, NavigationState

logger = logging.getLogger(__name__)


class BucketBrowser:
    """Browsing session for a single bucket at a time."""

    def __init__(self) -> None:
        self.bucket: str = ""
        self.objects: list[StorageObject] = []
        self.tree: FolderNode = FolderNode()
        self.state = NavigationState()
        self._pending_bucket: str = ""
        self._generation = 0

    @property
    def is_loaded(self) -> bool:
        return bool(self.bucket) and self.bucket == self._pending_bucket

    def begin_selection(self, bucket: str) -> int:
        """Start selecting *bucket*; returns the ticket for the listing fetch."""
        self._generation += 1
        self._pending_bucket = bucket
        self.state = self.state.bucket_change()
        return self._generation

    def complete_selection(self, ticket: int, objects: Iterable[StorageObject]) -> bool:
        """Install the listing fetched for *ticket*.

        Returns False (and changes nothing) when a later selection has
        superseded this one.
        """
        if ticket != self._generation:
            logger.debug("Discarding stale listing (ticket %d, current %d)", ticket, self._generation)
            return False
        self.objects = list(objects)
        self.tree = build_tree(self.objects)
        self.bucket = self._pending_bucket
        logger.info("Loaded %d objects from bucket %s", len(self.objects), self.bucket)
        return True

    def select_bucket(self, bucket: str, objects: Iterable[StorageObject]) -> None:
        self.complete_selection(self.begin_selection(bucket), objects)

    def navigate(self, state: NavigationState) -> None:
        self.state = state

    def folder_view(self, path: str | None = None) -> FolderView:
        return get_folder_view(self.tree, self.state.current_path if path is None else path)

    def search(self, query: str | None = None) -> SearchResults:
        return search(self.tree, self.objects, self.state.search_query if query is None else query)

    def view(self) -> FolderView | SearchResults:
        """The listing for the current navigation state."""
        if self.state.mode is NavigationMode.SEARCH:
            return self.search()
        return self.folder_view()


class BrowserRegistry:
    """Per-user browsers, keyed by the signed-in e-mail."""

    def __init__(self) -> None:
        self._browsers: dict[str, BucketBrowser] = {}
        self._lock = threading.Lock()

    def get(self, user: str) -> BucketBrowser:
        with self._lock:
            browser = self._browsers.get(user)
            if browser is None:
                browser = BucketBrowser()
                self._browsers[user] = browser
            return browser

    def discard(self, user: str) -> None:
        with self._lock:
            self._browsers.pop(user, None)

    def __len__(self) -> int:
        return len(self._browsers)


_registry: BrowserRegistry | None = None


def get_browser_registry() -> BrowserRegistry:
    """Process-wide registry singleton."""
    global _registry
    if _registry is None:
        _registry = BrowserRegistry()
    return _registry
