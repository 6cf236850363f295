"""Directory access collaborators.

The classification core only needs to list the children of a directory and
to read a bounded header plus basic metadata from a file. Hosts plug in any
object that satisfies :class:`DirectoryAccess`; :class:`LocalDirectoryAccess`
serves paths on the local filesystem.
"""

from __future__ import annotations

import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional, Protocol, runtime_checkable

from .models import DirectoryEntry


@runtime_checkable
class FileSource(Protocol):
    """Read-only view of a single file's bytes and metadata."""

    name: str
    size: int
    last_modified: datetime
    media_type: Optional[str]

    def read_header(self, length: int) -> bytes:
        """Return at most ``length`` bytes from the start of the file."""
        ...


@runtime_checkable
class DirectoryAccess(Protocol):
    """Capability to enumerate a tree and open the files inside it."""

    def iter_children(self, directory: Any) -> Iterator[DirectoryEntry]:
        """Yield the immediate children of ``directory``."""
        ...

    def open_file(self, handle: Any) -> FileSource:
        """Return a readable file source for a file entry handle."""
        ...


class LocalFileSource:
    """File source backed by a path on the local filesystem."""

    def __init__(self, path: Path) -> None:
        stat = path.stat()
        self.path = path
        self.name = path.name
        self.size = stat.st_size
        self.last_modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        self.media_type, _ = mimetypes.guess_type(path.name, strict=False)

    def read_header(self, length: int) -> bytes:
        with self.path.open("rb") as fh:
            return fh.read(length)


class LocalDirectoryAccess:
    """List and open entries beneath local directories.

    Args:
        include_hidden: Whether dot-prefixed entries are reported.
        follow_symlinks: Whether symbolic links are reported as their targets.
    """

    def __init__(self, *, include_hidden: bool = True, follow_symlinks: bool = False) -> None:
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks

    def iter_children(self, directory: Any) -> Iterator[DirectoryEntry]:
        """Yield file and directory entries directly under ``directory``.

        Raises:
            OSError: If the directory cannot be listed.
        """
        with os.scandir(Path(directory)) as listing:
            for entry in listing:
                if not self.include_hidden and entry.name.startswith("."):
                    continue
                if entry.is_symlink() and not self.follow_symlinks:
                    continue
                try:
                    if entry.is_dir():
                        kind = "directory"
                    elif entry.is_file():
                        kind = "file"
                    else:
                        continue
                except OSError:
                    continue
                yield DirectoryEntry(name=entry.name, kind=kind, handle=Path(entry.path))

    def open_file(self, handle: Any) -> LocalFileSource:
        """Return a :class:`LocalFileSource` for ``handle``.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        return LocalFileSource(Path(handle))


__all__ = ["DirectoryAccess", "FileSource", "LocalDirectoryAccess", "LocalFileSource"]
