"""Cascading file classifier.

Every file runs through the same fixed cascade: binary signature, extension
lookup, then name/size heuristics. All three are evaluated, and the candidate
with the strictly greatest confidence wins, so earlier detectors win ties.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from filesift.ingestion.access import DirectoryAccess
from filesift.ingestion.errors import FileReadError
from filesift.ingestion.models import FileRef

from .detectors import ExtensionClassifier, HeuristicClassifier, SignatureDetector
from .models import NO_MATCH, ClassificationResult, FileMeta

LOGGER = logging.getLogger(__name__)


def select_best(candidates: Iterable[Optional[ClassificationResult]]) -> ClassificationResult:
    """Return the highest-confidence candidate, or the ``unknown`` sentinel.

    Args:
        candidates: Results in cascade order; ``None`` entries are skipped.

    Returns:
        ClassificationResult: The first candidate holding the maximum confidence.
    """
    best: Optional[ClassificationResult] = None
    for candidate in candidates:
        if candidate is None:
            continue
        if best is None or candidate.confidence > best.confidence:
            best = candidate
    return best if best is not None else NO_MATCH


class FileClassifier:
    """Produce exactly one classification per discovered file."""

    def __init__(
        self,
        access: DirectoryAccess,
        *,
        signatures: SignatureDetector | None = None,
        extensions: ExtensionClassifier | None = None,
        heuristics: HeuristicClassifier | None = None,
    ) -> None:
        self.access = access
        self.signatures = signatures or SignatureDetector()
        self.extensions = extensions or ExtensionClassifier()
        self.heuristics = heuristics or HeuristicClassifier()

    def classify(self, ref: FileRef) -> FileMeta:
        """Read a file's header and metadata and attach the winning result.

        Args:
            ref: Discovered file to classify.

        Returns:
            FileMeta: Metadata with ``classification`` populated.

        Raises:
            FileReadError: If the file's metadata or header cannot be read.
        """
        try:
            source = self.access.open_file(ref.handle)
            header = source.read_header(self.signatures.header_length)
        except OSError as exc:
            raise FileReadError(f"{exc.strerror or exc}", path=ref.rel) from exc

        meta = FileMeta.from_source(
            name=source.name,
            size=source.size,
            last_modified=source.last_modified,
            media_type=source.media_type,
            rel=ref.rel,
        )
        best = select_best(self.evaluate(header, meta))
        LOGGER.debug("Classified %s as %s (%.2f)", ref.rel, best.category, best.confidence)
        return meta.model_copy(update={"classification": best})

    def evaluate(self, header: bytes, meta: FileMeta) -> list[Optional[ClassificationResult]]:
        """Run every detector in cascade order without short-circuiting."""
        return [
            self.signatures.detect(header),
            self.extensions.classify(meta.ext_lower),
            self.heuristics.classify(meta),
        ]


__all__ = ["FileClassifier", "select_best"]
