"""Shared fixtures for filesift tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Iterator

import pytest

from filesift.classification.models import FileMeta
from filesift.ingestion.models import DirectoryEntry

FIXED_MTIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class Unreadable:
    """Tree marker for a file whose bytes cannot be read."""


class MemoryFile:
    def __init__(self, name: str, data: bytes, size: int | None = None) -> None:
        self.name = name
        self.size = len(data) if size is None else size
        self.last_modified = FIXED_MTIME
        self.media_type = None
        self._data = data

    def read_header(self, length: int) -> bytes:
        return self._data[:length]


class MemoryAccess:
    """In-memory directory access collaborator.

    Tree values: ``bytes`` is a file, ``(bytes, size)`` a file with a declared
    size, :class:`Unreadable` a file that fails to open, ``dict`` a directory,
    and an ``OSError`` instance a directory that fails to list.
    """

    def __init__(self, tree: dict[str, Any]) -> None:
        self.tree = tree
        self.listings_opened = 0
        self.listings_closed = 0

    def _node(self, handle: tuple[str, ...]) -> Any:
        node: Any = self.tree
        for segment in handle:
            node = node[segment]
        return node

    def iter_children(self, directory: tuple[str, ...]) -> Iterator[DirectoryEntry]:
        node = self._node(directory)
        self.listings_opened += 1
        try:
            if isinstance(node, OSError):
                raise node
            for name, child in node.items():
                kind = "directory" if isinstance(child, (dict, OSError)) else "file"
                yield DirectoryEntry(name=name, kind=kind, handle=(*directory, name))
        finally:
            self.listings_closed += 1

    def open_file(self, handle: tuple[str, ...]) -> MemoryFile:
        node = self._node(handle)
        if isinstance(node, Unreadable):
            raise PermissionError(13, "Permission denied")
        if isinstance(node, tuple):
            data, size = node
            return MemoryFile(handle[-1], data, size)
        return MemoryFile(handle[-1], node)


@pytest.fixture
def memory_access() -> Callable[[dict[str, Any]], MemoryAccess]:
    """Return a factory building :class:`MemoryAccess` collaborators."""
    return MemoryAccess


@pytest.fixture
def make_meta() -> Callable[..., FileMeta]:
    """Return a factory for :class:`FileMeta` records."""

    def _make(name: str, size: int = 10, rel: str | None = None) -> FileMeta:
        return FileMeta.from_source(
            name=name,
            size=size,
            last_modified=FIXED_MTIME,
            rel=rel or name,
        )

    return _make


@pytest.fixture
def unreadable() -> Unreadable:
    """Return a tree marker for a file that cannot be opened."""
    return Unreadable()
