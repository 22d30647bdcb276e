"""Suffix-based file type classification.

Matching is case-sensitive: ``report.PDF`` is OPAQUE. Only the extra PDF
thumbnail decision (``is_pdf``) ignores case.
"""

from __future__ import annotations

import enum
from pathlib import PurePosixPath


class FileKind(str, enum.Enum):
    DOCUMENT = "document"
    VIDEO = "video"
    IMAGE = "image"
    PLAINTEXT = "plaintext"
    OPAQUE = "opaque"


# Order matters only for readability; suffix sets are disjoint.
_SUFFIXES: dict[FileKind, tuple[str, ...]] = {
    # .one is a guess at OneNote exports; the extractor decides what it can read.
    FileKind.DOCUMENT: (".doc", ".ppt", ".xls", ".docx", ".pptx", ".xlsx", ".pdf", ".one"),
    FileKind.VIDEO: (".mp4",),
    FileKind.IMAGE: (".jpg", ".jpeg", ".png", ".gif"),
    FileKind.PLAINTEXT: (".txt", ".json", ".html"),
}


def classify(name: str) -> FileKind:
    """Return the FileKind for *name*; unknown suffixes are OPAQUE."""
    for kind, suffixes in _SUFFIXES.items():
        if name.endswith(suffixes):
            return kind
    return FileKind.OPAQUE


def is_pdf(name: str) -> bool:
    return PurePosixPath(name).suffix.lower() == ".pdf"
