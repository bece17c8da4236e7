# Hierarchy engine — flat key listing to folder tree, folder views, search.
# Created: 2026-10-12
#
# All functions here are pure and synchronous. They never raise on
# well-typed input: unknown folder paths yield an empty view.

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from cloudarchive.hierarchy.models import (
    PATH_SEPARATOR,
    FileItem,
    FolderNode,
    FolderView,
    SearchHit,
    SearchResults,
    StorageObject,
    join_path,
    key_prefix,
    object_key,
    path_segments,
)

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def build_tree(objects: Iterable[StorageObject]) -> FolderNode:
    """Build the folder tree for one bucket listing.

    Every ``/``-separated prefix of a key becomes a folder node; the final
    segment becomes a file of the deepest folder. Duplicate keys resolve to
    the last occurrence. Directory markers (keys ending in ``/``) create
    their folders but no file entry.
    """
    root = FolderNode()
    count = 0
    for obj in objects:
        *folders, name = obj.key.split(PATH_SEPARATOR)
        node = root
        for segment in folders:
            node = node.child(segment)
        if name:
            node.files[name] = FileItem(name=name, size=obj.size)
        count += 1
    logger.debug("Built folder tree from %d objects", count)
    return root


def find_folder(tree: FolderNode, path: str) -> FolderNode | None:
    """Walk from *tree* to the folder at *path*; None when any step is missing."""
    node = tree
    current = ""
    for segment in path_segments(path):
        current = join_path(current, segment)
        node = node.subfolders.get(current)
        if node is None:
            return None
    # "/x" spells the segments of "x" but is not its path
    return node if current == path else None


def get_folder_view(tree: FolderNode, current_path: str = "") -> FolderView:
    """Direct files and subfolder paths of the folder at *current_path*."""
    node = find_folder(tree, current_path)
    if node is None:
        logger.debug("Folder %r not found in tree, rendering empty", current_path)
        return FolderView()
    return FolderView(files=list(node.files.values()), subfolders=list(node.subfolders))


def iter_folders(tree: FolderNode) -> Iterator[FolderNode]:
    """Yield every folder of the tree in pre-order, root first."""
    stack = [tree]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.subfolders.values()))


def flatten_files(tree: FolderNode) -> list[tuple[str, int]]:
    """Every file in the tree as ``(full_key, size)``."""
    return [
        (object_key(node.path, item.name), item.size)
        for node in iter_folders(tree)
        for item in node.files.values()
    ]


def normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


def search(
    tree: FolderNode,
    objects: Iterable[StorageObject],
    query: str | None,
) -> SearchResults:
    """Case-insensitive substring search across the whole bucket.

    Files match on their full key, folders on their last segment or full
    path. A blank query matches nothing.
    """
    needle = normalize_query(query)
    if not needle:
        return SearchResults()

    latest: dict[str, StorageObject] = {}
    for obj in objects:
        if not obj.is_directory_marker:
            latest[obj.key] = obj

    files = [
        SearchHit(name=obj.name, size=obj.size, full_path=obj.key)
        for obj in latest.values()
        if needle in obj.key.lower()
    ]
    folders = [
        node.path
        for node in iter_folders(tree)
        if not node.is_root
        and (needle in node.name.lower() or needle in key_prefix(node.path).lower())
    ]
    return SearchResults(query=needle, files=files, folders=folders)


def breadcrumbs(path: str) -> list[tuple[str, str]]:
    """``(label, path)`` pairs from the root down to *path*."""
    crumbs = [("Root", "")]
    current = ""
    for part in path_segments(path):
        current = join_path(current, part)
        crumbs.append((part or PATH_SEPARATOR, current))
    return crumbs


def format_size(size: int) -> str:
    """Human readable byte count (``0 B``, ``1.5 KB``, ``2 MB``...)."""
    if size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[exponent]}"
