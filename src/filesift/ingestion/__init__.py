"""Directory discovery and file access."""

from .access import DirectoryAccess, FileSource, LocalDirectoryAccess, LocalFileSource
from .discovery import DirectoryWalker
from .errors import DiscoveryError, FileReadError, IngestionError
from .models import DirectoryEntry, FileRef

__all__ = [
    "DirectoryAccess",
    "DirectoryEntry",
    "DirectoryWalker",
    "DiscoveryError",
    "FileReadError",
    "FileRef",
    "FileSource",
    "IngestionError",
    "LocalDirectoryAccess",
    "LocalFileSource",
]
