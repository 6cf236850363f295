"""Classification data models."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_CATEGORY = "unknown"


class ClassificationResult(BaseModel):
    """Outcome of a single classification attempt.

    Attributes:
        category: Semantic category, ``"unknown"`` when no rule matched.
        subcategory: Optional refinement of the category.
        confidence: Confidence in the range [0, 1].
        reasons: Human-readable justifications in evaluation order.
    """

    model_config = ConfigDict(frozen=True)

    category: str = Field(min_length=1)
    subcategory: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)
    reasons: List[str] = Field(default_factory=list)

    @property
    def is_unknown(self) -> bool:
        return self.category == UNKNOWN_CATEGORY


NO_MATCH = ClassificationResult(
    category=UNKNOWN_CATEGORY,
    confidence=0.0,
    reasons=["No rules matched"],
)


class FileMeta(BaseModel):
    """Metadata derived once per file, with its classification attached.

    Attributes:
        name: File name as reported by the file source.
        stem: Name without its final extension.
        ext: Extension text after the last dot, original case.
        ext_lower: Lowercased extension used for lookups.
        media_type: Declared media type or ``"unknown"``.
        size: Size in bytes.
        last_modified: Last modification timestamp.
        rel: Path relative to the scan root.
        classification: Winning classification result, once computed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    stem: str
    ext: str
    ext_lower: str
    media_type: str = "unknown"
    size: int = Field(ge=0)
    last_modified: datetime
    rel: str
    classification: Optional[ClassificationResult] = None

    @classmethod
    def from_source(
        cls,
        *,
        name: str,
        size: int,
        last_modified: datetime,
        rel: str,
        media_type: Optional[str] = None,
    ) -> "FileMeta":
        """Build metadata, splitting the name on its last dot."""
        if "." in name:
            stem, _, ext = name.rpartition(".")
        else:
            stem, ext = name, ""
        return cls(
            name=name,
            stem=stem,
            ext=ext,
            ext_lower=ext.lower(),
            media_type=media_type or "unknown",
            size=size,
            last_modified=last_modified,
            rel=rel,
        )


class RunOptions(BaseModel):
    """Options governing a single classification run.

    Attributes:
        enabled: When false, files are discovered and counted but not classified.
        min_confidence: Threshold a result must reach to count toward a category.
        batch_size: Number of files classified concurrently per batch.
        show_preview: Whether callers should render per-file results.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    min_confidence: float = Field(default=0.6, ge=0.0)
    batch_size: int = Field(default=10, ge=1)
    show_preview: bool = False


__all__ = ["ClassificationResult", "FileMeta", "NO_MATCH", "RunOptions", "UNKNOWN_CATEGORY"]
