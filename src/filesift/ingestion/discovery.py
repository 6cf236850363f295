"""File discovery utilities."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .access import DirectoryAccess
from .errors import DiscoveryError
from .models import FileRef

LOGGER = logging.getLogger(__name__)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


class DirectoryWalker:
    """Enumerate every file in a directory tree, depth-first.

    The walk keeps an explicit stack of open directory listings instead of
    recursing, so a consumer may stop pulling at any point. Closing the
    generator closes every listing still on the stack.
    """

    def __init__(self, access: DirectoryAccess) -> None:
        self.access = access

    def walk(self, root: Any) -> Iterator[FileRef]:
        """Yield a :class:`FileRef` for each file beneath ``root``.

        Subdirectories are expanded as soon as they are encountered, so files
        appear in the order a recursive walk would produce. Sibling order is
        whatever the access collaborator yields.

        Raises:
            DiscoveryError: If any directory in the tree cannot be listed.
        """
        stack: list[tuple[str, Iterator[Any]]] = [("", self._open_listing(root, ""))]
        try:
            while stack:
                prefix, listing = stack[-1]
                try:
                    entry = next(listing, None)
                except OSError as exc:
                    raise DiscoveryError(
                        f"Unable to list {prefix or '.'}: {exc}", path=prefix
                    ) from exc
                if entry is None:
                    stack.pop()
                    _close(listing)
                    continue

                rel = _join(prefix, entry.name)
                if entry.kind == "directory":
                    stack.append((rel, self._open_listing(entry.handle, rel)))
                elif entry.kind == "file":
                    yield FileRef(handle=entry.handle, rel=rel)
        finally:
            for _, listing in stack:
                _close(listing)

    def _open_listing(self, directory: Any, rel: str) -> Iterator[Any]:
        LOGGER.debug("Listing %s", rel or ".")
        try:
            return iter(self.access.iter_children(directory))
        except OSError as exc:
            raise DiscoveryError(f"Unable to list {rel or '.'}: {exc}", path=rel) from exc


def _close(listing: Iterator[Any]) -> None:
    close = getattr(listing, "close", None)
    if close is not None:
        close()


__all__ = ["DirectoryWalker"]
