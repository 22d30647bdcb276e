"""Derivation services — text extraction, thumbnails, image labels."""

from __future__ import annotations

from dataclasses import dataclass

from docshelf.config import DocshelfConfig
from docshelf.derive.base import Labeler, TextExtractor, Thumbnailer, ThumbnailVariant


@dataclass
class DerivationServices:
    """The set of services one ingestion controller calls.

    ``labeler`` is None when labeling is disabled; the controller then skips
    the labels step entirely.
    """

    extractor: TextExtractor
    thumbnailer: Thumbnailer
    labeler: Labeler | None = None

    @property
    def labels_enabled(self) -> bool:
        return self.labeler is not None


def build_services(cfg: DocshelfConfig) -> DerivationServices:
    """Instantiate the configured service implementations."""
    from docshelf.derive.thumbnail import ImageMagickThumbnailer

    extractor: TextExtractor
    if cfg.extractor.backend == "pypdf":
        from docshelf.derive.pdf import PdfTextExtractor

        extractor = PdfTextExtractor()
    else:
        from docshelf.derive.tika import TikaExtractor

        extractor = TikaExtractor(url=cfg.extractor.url, timeout=cfg.extractor.timeout)

    thumbnailer = ImageMagickThumbnailer(
        command=cfg.thumbnails.command,
        height=cfg.thumbnails.height,
        video_frame=cfg.thumbnails.video_frame,
        timeout=cfg.thumbnails.timeout,
    )

    labeler: Labeler | None = None
    if cfg.labels.enabled:
        from docshelf.derive.labels import LlmLabeler

        labeler = LlmLabeler(
            model=cfg.labels.model,
            max_labels=cfg.labels.max_labels,
            timeout=cfg.labels.timeout,
        )

    return DerivationServices(extractor=extractor, thumbnailer=thumbnailer, labeler=labeler)


__all__ = [
    "DerivationServices",
    "Labeler",
    "TextExtractor",
    "Thumbnailer",
    "ThumbnailVariant",
    "build_services",
]
