"""Ingestion errors."""


class IngestionError(Exception):
    """Base exception for discovery and file access failures."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class DiscoveryError(IngestionError):
    """Raised when a directory cannot be enumerated during a scan."""


class FileReadError(IngestionError):
    """Raised when a file's header or metadata cannot be read."""
