"""Per-run statistics."""

from __future__ import annotations

from typing import Dict

from pydantic import BaseModel, Field

from .models import FileMeta, NO_MATCH

HIGH_CONFIDENCE = 0.8


class RunStats(BaseModel):
    """Aggregate counters for a single classification run.

    Attributes:
        total: Files discovered during scanning.
        classified: Files whose classification completed without error.
        high_confidence: Counted files with confidence above 0.8.
        categories: Counted files per category.
    """

    total: int = 0
    classified: int = 0
    high_confidence: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)


class StatsAggregator:
    """Fold classification outcomes into a :class:`RunStats`.

    A result is counted toward ``categories`` only when it is not ``unknown``
    and its confidence reaches ``min_confidence``. ``classified`` counts every
    successful classification regardless of the threshold.
    """

    def __init__(self, min_confidence: float, stats: RunStats | None = None) -> None:
        self.min_confidence = min_confidence
        self.stats = stats if stats is not None else RunStats()

    def set_total(self, total: int) -> None:
        self.stats.total = total

    def record(self, meta: FileMeta) -> bool:
        """Fold one classified file and report whether it counted toward a category."""
        self.stats.classified += 1
        result = meta.classification or NO_MATCH
        if result.is_unknown or result.confidence < self.min_confidence:
            return False
        categories = self.stats.categories
        categories[result.category] = categories.get(result.category, 0) + 1
        if result.confidence > HIGH_CONFIDENCE:
            self.stats.high_confidence += 1
        return True

    def snapshot(self) -> RunStats:
        """Return an independent copy of the current counters."""
        return self.stats.model_copy(deep=True)


__all__ = ["HIGH_CONFIDENCE", "RunStats", "StatsAggregator"]
