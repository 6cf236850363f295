"""Tests for the cascading file classifier."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from filesift.classification.engine import FileClassifier, select_best
from filesift.classification.models import ClassificationResult, FileMeta
from filesift.ingestion.access import LocalDirectoryAccess
from filesift.ingestion.errors import FileReadError
from filesift.ingestion.models import FileRef

MTIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


def _classify(access, name: str) -> FileMeta:
    return FileClassifier(access).classify(FileRef(handle=(name,), rel=name))


def test_signature_beats_unknown_extension(memory_access) -> None:
    meta = _classify(memory_access({"blob.dat": PNG}), "blob.dat")

    result = meta.classification
    assert result is not None
    assert (result.category, result.subcategory) == ("image", "png")
    assert result.confidence == pytest.approx(0.98)
    assert meta.ext == "dat"


def test_extension_lookup_is_case_insensitive(memory_access) -> None:
    access = memory_access({"photo.JPG": b"not really", "photo.jpg": b"not really"})

    upper = _classify(access, "photo.JPG")
    lower = _classify(access, "photo.jpg")

    assert upper.classification == lower.classification
    assert upper.ext == "JPG"
    assert lower.ext == "jpg"
    assert upper.ext_lower == lower.ext_lower == "jpg"


def test_empty_file_without_extension(memory_access) -> None:
    meta = _classify(memory_access({"placeholder": b""}), "placeholder")

    assert meta.classification is not None
    assert meta.classification.category == "empty"
    assert meta.classification.confidence == pytest.approx(0.9)


def test_unmatched_file_yields_unknown_sentinel(memory_access) -> None:
    meta = _classify(memory_access({"data.bin": b"\x00\x01\x02"}), "data.bin")

    assert meta.classification is not None
    assert meta.classification.category == "unknown"
    assert meta.classification.confidence == 0
    assert meta.classification.reasons == ["No rules matched"]


def test_ties_go_to_earlier_detector(memory_access) -> None:
    meta = _classify(memory_access({"README.md": b"# hello"}), "README.md")

    assert meta.classification is not None
    assert meta.classification.subcategory == "markdown"
    assert meta.classification.reasons == ["File extension is .md"]


def test_higher_confidence_later_detector_wins(memory_access) -> None:
    meta = _classify(memory_access({"notes": (b"text", 0)}), "notes")
    assert meta.classification is not None
    assert meta.classification.category == "empty"

    big = _classify(memory_access({"movie.mp4": (b"\x00" * 16, 200 * 1024 * 1024)}), "movie.mp4")
    assert big.classification is not None
    assert big.classification.category == "video"


@pytest.mark.parametrize(
    ("name", "data"),
    [
        ("blob.dat", PNG),
        ("photo.jpg", b"plain"),
        ("LICENSE", b"MIT"),
        ("empty.txt", b""),
        ("archive.zip", b"PK\x03\x04rest"),
        ("mystery", b"\x01\x02"),
    ],
)
def test_result_confidence_is_cascade_maximum(memory_access, name: str, data: bytes) -> None:
    access = memory_access({name: data})
    classifier = FileClassifier(access)

    meta = classifier.classify(FileRef(handle=(name,), rel=name))
    candidates = classifier.evaluate(data[: classifier.signatures.header_length], meta)
    confidences = [candidate.confidence for candidate in candidates if candidate is not None]

    assert meta.classification is not None
    assert meta.classification.confidence == pytest.approx(max(confidences, default=0.0))


def test_unreadable_file_raises_file_read_error(memory_access, unreadable) -> None:
    access = memory_access({"secret.txt": unreadable})

    with pytest.raises(FileReadError) as excinfo:
        _classify(access, "secret.txt")

    assert excinfo.value.path == "secret.txt"


def test_select_best_returns_first_of_equal_candidates() -> None:
    first = ClassificationResult(category="a", confidence=0.8, reasons=["first"])
    second = ClassificationResult(category="b", confidence=0.8, reasons=["second"])

    assert select_best([None, first, second]) is first
    assert select_best([None, None]).category == "unknown"


def test_local_filesystem_metadata(tmp_path: Path) -> None:
    image = tmp_path / "Chart.PNG"
    image.write_bytes(PNG)

    classifier = FileClassifier(LocalDirectoryAccess())
    meta = classifier.classify(FileRef(handle=image, rel="Chart.PNG"))

    assert meta.name == "Chart.PNG"
    assert meta.stem == "Chart"
    assert meta.size == len(PNG)
    assert meta.media_type == "image/png"
    assert meta.last_modified.tzinfo is not None
    assert meta.classification is not None
    assert meta.classification.subcategory == "png"


def test_missing_local_file_raises_file_read_error(tmp_path: Path) -> None:
    classifier = FileClassifier(LocalDirectoryAccess())

    with pytest.raises(FileReadError):
        classifier.classify(FileRef(handle=tmp_path / "gone.txt", rel="gone.txt"))


def test_file_meta_name_split() -> None:
    dotfile = FileMeta.from_source(name=".bashrc", size=1, last_modified=MTIME, rel=".bashrc")
    plain = FileMeta.from_source(name="Makefile", size=1, last_modified=MTIME, rel="Makefile")
    nested = FileMeta.from_source(name="a.tar.GZ", size=1, last_modified=MTIME, rel="a.tar.GZ")

    assert (dotfile.stem, dotfile.ext) == ("", "bashrc")
    assert (plain.stem, plain.ext) == ("Makefile", "")
    assert (nested.stem, nested.ext, nested.ext_lower) == ("a.tar", "GZ", "gz")
    assert plain.media_type == "unknown"
