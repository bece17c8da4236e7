# Navigation state — Root / Folder(path) / Search(query) transitions.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from cloudarchive.hierarchy.models import folder_path, parent_path, path_segments


class NavigationMode(str, Enum):
    """Which kind of listing the page shows."""

    ROOT = "root"
    FOLDER = "folder"
    SEARCH = "search"


@dataclass(frozen=True)
class NavigationState:
    """Current folder and search text of one browsing session.

    Transitions return a new state; the instance itself never changes.
    """

    current_path: str = ""
    search_query: str = ""

    @property
    def mode(self) -> NavigationMode:
        if self.search_query.strip():
            return NavigationMode.SEARCH
        if self.current_path:
            return NavigationMode.FOLDER
        return NavigationMode.ROOT

    def select_folder(self, path: str) -> NavigationState:
        return NavigationState(current_path=path)

    def breadcrumb_click(self, ancestor_index: int) -> NavigationState:
        """Jump to the ancestor made of the first *ancestor_index* segments."""
        if ancestor_index <= 0 or not self.current_path:
            return NavigationState()
        segments = path_segments(self.current_path)
        return NavigationState(current_path=folder_path(segments[:ancestor_index]))

    def search(self, query: str) -> NavigationState:
        if not query.strip():
            return NavigationState()
        return replace(self, search_query=query)

    def clear_search(self) -> NavigationState:
        return NavigationState()

    def bucket_change(self) -> NavigationState:
        return NavigationState()

    def open_search_result(self, item_path: str) -> NavigationState:
        """Leave search mode and land in the folder holding *item_path*.

        *item_path* is a file's full key or a matched folder's key prefix.
        """
        return NavigationState(current_path=parent_path(item_path))
