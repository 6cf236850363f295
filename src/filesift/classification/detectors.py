"""Rule-based detectors used by the classification cascade.

Each detector is a pure function of its input and returns either a
:class:`ClassificationResult` or ``None`` when none of its rules apply.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from .models import ClassificationResult, FileMeta

MIN_HEADER_BYTES = 16
SIGNATURE_CONFIDENCE = 0.98
LARGE_FILE_BYTES = 100 * 1024 * 1024


class Signature(NamedTuple):
    prefix: bytes
    category: str
    subcategory: str


class ExtensionRule(NamedTuple):
    category: str
    subcategory: Optional[str]
    confidence: float


# Evaluated in order; the first matching prefix wins.
SIGNATURES: tuple[Signature, ...] = (
    Signature(b"\x89PNG", "image", "png"),
    Signature(b"\xff\xd8\xff", "image", "jpeg"),
    Signature(b"GIF8", "image", "gif"),
    Signature(b"%PDF", "document", "pdf"),
    Signature(b"PK\x03\x04", "archive", "zip"),
    Signature(b"Rar!\x1a\x07", "archive", "rar"),
    Signature(b"7z\xbc\xaf\x27\x1c", "archive", "7z"),
    Signature(b"\x1f\x8b\x08", "archive", "gzip"),
    Signature(b"ID3", "audio", "mp3"),
)

EXTENSIONS: dict[str, ExtensionRule] = {
    # Documents
    "pdf": ExtensionRule("document", "pdf", 0.9),
    "doc": ExtensionRule("document", "word", 0.9),
    "docx": ExtensionRule("document", "word", 0.9),
    "ppt": ExtensionRule("document", "powerpoint", 0.9),
    "pptx": ExtensionRule("document", "powerpoint", 0.9),
    "rtf": ExtensionRule("document", "rich-text", 0.9),
    "md": ExtensionRule("document", "markdown", 0.8),
    "txt": ExtensionRule("document", "text", 0.8),
    # Data
    "csv": ExtensionRule("data", "spreadsheet", 0.9),
    "tsv": ExtensionRule("data", "spreadsheet", 0.9),
    "xls": ExtensionRule("data", "spreadsheet", 0.9),
    "xlsx": ExtensionRule("data", "spreadsheet", 0.9),
    "json": ExtensionRule("data", "structured", 0.9),
    "xml": ExtensionRule("data", "structured", 0.9),
    "yaml": ExtensionRule("data", "structured", 0.8),
    "yml": ExtensionRule("data", "structured", 0.8),
    # Code
    "js": ExtensionRule("code", "javascript", 0.9),
    "ts": ExtensionRule("code", "typescript", 0.9),
    "py": ExtensionRule("code", "python", 0.9),
    "java": ExtensionRule("code", "java", 0.9),
    "go": ExtensionRule("code", "go", 0.9),
    "rs": ExtensionRule("code", "rust", 0.9),
    "c": ExtensionRule("code", "c", 0.9),
    "cpp": ExtensionRule("code", "cpp", 0.9),
    "sh": ExtensionRule("code", "shell", 0.9),
    "html": ExtensionRule("code", "web", 0.8),
    "css": ExtensionRule("code", "web", 0.8),
    # Images
    "jpg": ExtensionRule("image", "photo", 0.95),
    "jpeg": ExtensionRule("image", "photo", 0.95),
    "png": ExtensionRule("image", "graphics", 0.95),
    "gif": ExtensionRule("image", "graphics", 0.95),
    "webp": ExtensionRule("image", "graphics", 0.95),
    "bmp": ExtensionRule("image", "graphics", 0.95),
    "svg": ExtensionRule("image", "vector", 0.9),
    # Media
    "mp4": ExtensionRule("video", None, 0.95),
    "mov": ExtensionRule("video", None, 0.95),
    "mkv": ExtensionRule("video", None, 0.95),
    "avi": ExtensionRule("video", None, 0.95),
    "mp3": ExtensionRule("audio", None, 0.95),
    "wav": ExtensionRule("audio", None, 0.95),
    "flac": ExtensionRule("audio", None, 0.95),
    "ogg": ExtensionRule("audio", None, 0.95),
    # Archives
    "zip": ExtensionRule("archive", None, 0.9),
    "rar": ExtensionRule("archive", None, 0.9),
    "7z": ExtensionRule("archive", None, 0.9),
    "gz": ExtensionRule("archive", None, 0.9),
    "tar": ExtensionRule("archive", None, 0.9),
}


class SignatureDetector:
    """Match a file's leading bytes against known binary signatures."""

    def __init__(self, signatures: tuple[Signature, ...] = SIGNATURES) -> None:
        self.signatures = signatures

    @property
    def header_length(self) -> int:
        """Number of leading bytes needed to test every signature."""
        longest = max((len(sig.prefix) for sig in self.signatures), default=0)
        return max(MIN_HEADER_BYTES, longest)

    def detect(self, header: bytes) -> Optional[ClassificationResult]:
        for signature in self.signatures:
            if header.startswith(signature.prefix):
                return ClassificationResult(
                    category=signature.category,
                    subcategory=signature.subcategory,
                    confidence=SIGNATURE_CONFIDENCE,
                    reasons=[f"Magic bytes match for {signature.subcategory}"],
                )
        return None


class ExtensionClassifier:
    """Look up a lowercased extension in the static rule table."""

    def __init__(self, rules: dict[str, ExtensionRule] | None = None) -> None:
        self.rules = EXTENSIONS if rules is None else rules

    def classify(self, ext_lower: str) -> Optional[ClassificationResult]:
        if not ext_lower:
            return None
        rule = self.rules.get(ext_lower)
        if rule is None:
            return None
        return ClassificationResult(
            category=rule.category,
            subcategory=rule.subcategory,
            confidence=rule.confidence,
            reasons=[f"File extension is .{ext_lower}"],
        )


class HeuristicClassifier:
    """Apply name and size rules; the first matching rule wins."""

    def classify(self, meta: FileMeta) -> Optional[ClassificationResult]:
        name = meta.name.lower()
        if "readme" in name or "license" in name:
            return ClassificationResult(
                category="document",
                subcategory="readme",
                confidence=0.8,
                reasons=["Filename suggests documentation"],
            )
        if meta.size > LARGE_FILE_BYTES:
            return ClassificationResult(
                category="large-file",
                confidence=0.6,
                reasons=["File is very large (>100MB)"],
            )
        if meta.size == 0:
            return ClassificationResult(
                category="empty",
                confidence=0.9,
                reasons=["File is empty"],
            )
        return None


__all__ = [
    "EXTENSIONS",
    "ExtensionClassifier",
    "ExtensionRule",
    "HeuristicClassifier",
    "LARGE_FILE_BYTES",
    "SIGNATURES",
    "Signature",
    "SignatureDetector",
]
