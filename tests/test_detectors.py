"""Tests for the signature, extension, and heuristic detectors."""

from __future__ import annotations

import pytest

from filesift.classification.detectors import (
    LARGE_FILE_BYTES,
    ExtensionClassifier,
    HeuristicClassifier,
    SignatureDetector,
)


@pytest.mark.parametrize(
    ("header", "category", "subcategory"),
    [
        (b"\x89PNG\r\n\x1a\n" + b"\x00" * 8, "image", "png"),
        (b"\xff\xd8\xff\xe0" + b"\x00" * 12, "image", "jpeg"),
        (b"GIF89a", "image", "gif"),
        (b"%PDF-1.7\n", "document", "pdf"),
        (b"PK\x03\x04\x14\x00", "archive", "zip"),
    ],
)
def test_signature_detector_matches_known_prefixes(
    header: bytes, category: str, subcategory: str
) -> None:
    result = SignatureDetector().detect(header)

    assert result is not None
    assert result.category == category
    assert result.subcategory == subcategory
    assert result.confidence == pytest.approx(0.98)
    assert result.reasons == [f"Magic bytes match for {subcategory}"]


def test_signature_detector_rejects_truncated_and_unknown_headers() -> None:
    detector = SignatureDetector()

    assert detector.detect(b"\x89P") is None
    assert detector.detect(b"") is None
    assert detector.detect(b"hello world") is None


def test_signature_header_length_covers_longest_signature() -> None:
    detector = SignatureDetector()

    assert detector.header_length >= 16
    assert detector.header_length >= max(len(sig.prefix) for sig in detector.signatures)


def test_extension_classifier_lookup() -> None:
    classifier = ExtensionClassifier()

    jpg = classifier.classify("jpg")
    assert jpg is not None
    assert (jpg.category, jpg.subcategory) == ("image", "photo")
    assert jpg.confidence == pytest.approx(0.95)
    assert jpg.reasons == ["File extension is .jpg"]

    html = classifier.classify("html")
    assert html is not None
    assert html.confidence == pytest.approx(0.8)

    assert classifier.classify("") is None
    assert classifier.classify("dat") is None


def test_heuristic_readme_rule_takes_priority(make_meta) -> None:
    result = HeuristicClassifier().classify(make_meta("LICENSE", size=0))

    assert result is not None
    assert (result.category, result.subcategory) == ("document", "readme")
    assert result.confidence == pytest.approx(0.8)


def test_heuristic_size_rules(make_meta) -> None:
    heuristics = HeuristicClassifier()

    large = heuristics.classify(make_meta("dump.bin", size=LARGE_FILE_BYTES + 1))
    assert large is not None
    assert large.category == "large-file"
    assert large.confidence == pytest.approx(0.6)

    empty = heuristics.classify(make_meta("blank", size=0))
    assert empty is not None
    assert empty.category == "empty"
    assert empty.confidence == pytest.approx(0.9)

    assert heuristics.classify(make_meta("dump.bin", size=LARGE_FILE_BYTES)) is None
