"""Configuration models describing filesift settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from filesift.classification.models import RunOptions


class FilesiftBaseModel(BaseModel):
    """Shared configuration for filesift settings models."""

    model_config = ConfigDict(extra="forbid")


class ClassificationOptions(FilesiftBaseModel):
    """Defaults applied to each classification run.

    Attributes:
        enabled: Whether files are classified after discovery.
        min_confidence: Minimum confidence for a result to count toward a category.
        batch_size: Files classified concurrently per batch.
        show_preview: Whether the CLI renders a per-file result table.
    """

    enabled: bool = True
    min_confidence: float = Field(default=0.6, ge=0.0)
    batch_size: int = Field(default=10, ge=1)
    show_preview: bool = False

    def to_run_options(self) -> RunOptions:
        """Return the run options described by these settings."""
        return RunOptions(**self.model_dump())


class ScanOptions(FilesiftBaseModel):
    """Settings that control how directory trees are enumerated.

    Attributes:
        include_hidden: Whether dot-prefixed files and directories are scanned.
        follow_symlinks: Whether symbolic links are followed.
        output_dir: Destination recorded for the run; nothing is written there.
    """

    include_hidden: bool = True
    follow_symlinks: bool = False
    output_dir: Optional[str] = None


class LoggingSettings(FilesiftBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level for the stdlib logging tree.
        history_limit: Number of recent run log lines retained for display.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    history_limit: int = Field(default=200, ge=1)


class CLIOptions(FilesiftBaseModel):
    """CLI presentation defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class FilesiftConfig(FilesiftBaseModel):
    """Top-level configuration struct for filesift."""

    classification: ClassificationOptions = Field(default_factory=ClassificationOptions)
    scanning: ScanOptions = Field(default_factory=ScanOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CLIOptions",
    "ClassificationOptions",
    "FilesiftBaseModel",
    "FilesiftConfig",
    "LoggingSettings",
    "ScanOptions",
]
