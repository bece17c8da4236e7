"""Hierarchy data models.

Created: 2026-10-12

The folder tree is derived from a flat object listing and never stored:

- StorageObject: one blob as reported by the storage backend
- FileItem: a file as shown inside a folder (display name + size)
- FolderNode: a virtual folder; owns its children by value
- FolderView / SearchResults: what the presentation layer renders

Design notes:
- Subfolders are keyed by their FULL path ("a/c"), not by the local
  segment ("c"), so folders with the same leaf name never collide.
- FolderNode.files is keyed by display name; re-adding the same key
  replaces the previous entry (last write wins).
- Keys are split literally, so empty segments (leading or doubled
  slashes) are folders too. The root owns the path ""; its child with an
  empty segment is "/", and every deeper path is parent + "/" + segment.
  key_prefix() maps a folder path back to the key prefix it stands for.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

PATH_SEPARATOR = "/"


@dataclass(frozen=True)
class StorageObject:
    """A single object in a bucket."""

    key: str
    size: int = 0

    @property
    def name(self) -> str:
        """Final path segment of the key."""
        return self.key.rsplit(PATH_SEPARATOR, 1)[-1]

    @property
    def is_directory_marker(self) -> bool:
        return self.key.endswith(PATH_SEPARATOR)


@dataclass(frozen=True)
class FileItem:
    """A file as listed inside its folder."""

    name: str
    size: int = 0


@dataclass
class FolderNode:
    """A virtual folder inferred from common key prefixes."""

    path: str = ""
    files: dict[str, FileItem] = field(default_factory=dict)
    subfolders: dict[str, FolderNode] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.path.rsplit(PATH_SEPARATOR, 1)[-1]

    @property
    def is_root(self) -> bool:
        return self.path == ""

    def child(self, segment: str) -> FolderNode:
        """Return the direct child for *segment*, creating it if missing."""
        child_path = join_path(self.path, segment)
        node = self.subfolders.get(child_path)
        if node is None:
            node = FolderNode(path=child_path)
            self.subfolders[child_path] = node
        return node


@dataclass(frozen=True)
class FolderView:
    """Direct children of one folder (browse mode)."""

    files: list[FileItem] = field(default_factory=list)
    subfolders: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.files and not self.subfolders


@dataclass(frozen=True)
class SearchHit:
    """A file matched by a search, with its full key."""

    name: str
    size: int
    full_path: str


@dataclass(frozen=True)
class SearchResults:
    """Bucket-wide search matches (search mode)."""

    query: str = ""
    files: list[SearchHit] = field(default_factory=list)
    folders: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files) + len(self.folders)


def join_path(parent: str, segment: str) -> str:
    """Folder path of the child *segment* of the folder at *parent*."""
    if parent:
        return f"{parent}{PATH_SEPARATOR}{segment}"
    # "" is the root's own path
    return segment or PATH_SEPARATOR


def folder_path(segments: Iterable[str]) -> str:
    path = ""
    for segment in segments:
        path = join_path(path, segment)
    return path


def key_prefix(path: str) -> str:
    """Key prefix (without trailing separator) the folder at *path* stands for."""
    return path[1:] if path.startswith(PATH_SEPARATOR) else path


def path_segments(path: str) -> list[str]:
    """Key segments leading from the root to the folder at *path*."""
    if not path:
        return []
    return key_prefix(path).split(PATH_SEPARATOR)


def object_key(folder: str, name: str) -> str:
    """Full key of the file *name* inside the folder at *folder*."""
    if not folder:
        return name
    return f"{key_prefix(folder)}{PATH_SEPARATOR}{name}"


def parent_path(key: str) -> str:
    """Path of the folder holding *key* ("" for top-level keys).

    *key* is an object key, or the key prefix of a folder.
    """
    return folder_path(key.split(PATH_SEPARATOR)[:-1])
