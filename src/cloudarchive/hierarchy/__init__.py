"""Virtual folder hierarchy over flat object-storage keys.

Created: 2026-10-12

Usage:
    from cloudarchive.hierarchy import StorageObject, build_tree, get_folder_view, search

    objects = [StorageObject("a/b.txt", 10), StorageObject("e.txt", 5)]
    tree = build_tree(objects)
    get_folder_view(tree, "a")          # files + subfolder paths of "a"
    search(tree, objects, "b.txt")      # bucket-wide matches
"""

from cloudarchive.hierarchy.browser import BrowserRegistry, BucketBrowser, get_browser_registry
from cloudarchive.hierarchy.engine import (
    breadcrumbs,
    build_tree,
    find_folder,
    flatten_files,
    format_size,
    get_folder_view,
    iter_folders,
    search,
)
from cloudarchive.hierarchy.models import (
    FileItem,
    FolderNode,
    FolderView,
    SearchHit,
    SearchResults,
    StorageObject,
    key_prefix,
    object_key,
    parent_path,
)
from cloudarchive.hierarchy.navigation import NavigationMode, NavigationState

__all__ = [
    "BrowserRegistry",
    "BucketBrowser",
    "FileItem",
    "FolderNode",
    "FolderView",
    "NavigationMode",
    "NavigationState",
    "SearchHit",
    "SearchResults",
    "StorageObject",
    "breadcrumbs",
    "build_tree",
    "find_folder",
    "flatten_files",
    "format_size",
    "get_browser_registry",
    "get_folder_view",
    "iter_folders",
    "key_prefix",
    "object_key",
    "parent_path",
    "search",
]
