"""Derivation service interfaces.

The ingestion controller only ever talks to these abstract classes; which
implementation sits behind them (an HTTP service, a local library, a
subprocess) is decided by configuration in ``docshelf.derive.build_services``.

Every implementation raises ``DerivationServiceError`` on failure, including
when its configured timeout expires.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class ThumbnailVariant(str, enum.Enum):
    IMAGE = "image"
    PDF = "pdf"      # first page
    VIDEO = "video"  # a frame near the start


class TextExtractor(ABC):
    """Turns a document byte stream into plain text."""

    @abstractmethod
    def extract(self, stream: BinaryIO, name: str) -> bytes:
        """Return the UTF-8 plain text of the document in *stream*.

        Args:
            stream: Open binary stream positioned at the start of the document.
            name: Artifact path, used for format detection and error messages.
        """


class Thumbnailer(ABC):
    """Renders a PNG thumbnail for an image, a PDF page or a video frame."""

    @abstractmethod
    def thumbnail(self, path: Path, variant: ThumbnailVariant) -> bytes:
        """Return PNG bytes for the file at *path*."""

    def image(self, path: Path) -> bytes:
        return self.thumbnail(path, ThumbnailVariant.IMAGE)

    def pdf(self, path: Path) -> bytes:
        return self.thumbnail(path, ThumbnailVariant.PDF)

    def video(self, path: Path) -> bytes:
        return self.thumbnail(path, ThumbnailVariant.VIDEO)


class Labeler(ABC):
    """Annotates an image with machine-generated labels."""

    @abstractmethod
    def labels(self, path: Path) -> bytes:
        """Return a JSON document describing the image at *path*."""
