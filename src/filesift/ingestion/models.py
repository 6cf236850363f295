"""Data models produced by directory discovery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

EntryKind = Literal["file", "directory"]


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """Immediate child of a directory as reported by a directory access collaborator.

    Attributes:
        name: Entry name without any parent segments.
        kind: Whether the entry is a file or a directory.
        handle: Opaque collaborator handle used to list or open the entry.
    """

    name: str
    kind: EntryKind
    handle: Any


@dataclass(frozen=True, slots=True)
class FileRef:
    """Discovered file awaiting classification.

    Attributes:
        handle: Opaque collaborator handle used to open the file.
        rel: Path relative to the scan root, joined with ``/``.
    """

    handle: Any
    rel: str


__all__ = ["DirectoryEntry", "EntryKind", "FileRef"]
