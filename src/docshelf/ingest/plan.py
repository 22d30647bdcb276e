"""Cascade rules as an explicit derivation plan.

``plan_derivations`` maps a freshly written artifact to the ordered list of
derivation steps the controller must run for it. Each step names the service
to call, the derived artifact's name suffix, whether the derived artifact
may cascade further, and whether a failure of the step fails the upload.

    DOCUMENT  → extract (--extract.txt, cascades, fatal)
                [+ pdf thumbnail (--thumbnail.png, no cascade, fatal) for .pdf]
    VIDEO     → video thumbnail (--thumbnail.png, no cascade, fatal)
    IMAGE     → image thumbnail (--thumbnail.png, no cascade, fatal)
                [+ labels (--labels.json, inherits cascade, NOT fatal) when enabled]
    PLAINTEXT → no derivations; indexed instead
    OPAQUE    → nothing
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from docshelf.classify import FileKind, is_pdf
from docshelf.derive.base import ThumbnailVariant

EXTRACT_SUFFIX = "--extract.txt"
THUMBNAIL_SUFFIX = "--thumbnail.png"
LABELS_SUFFIX = "--labels.json"


class Service(str, enum.Enum):
    EXTRACT = "extract"
    THUMBNAIL = "thumbnail"
    LABELS = "labels"


@dataclass(frozen=True)
class DerivationStep:
    service: Service
    suffix: str
    cascade: bool
    fatal: bool
    variant: ThumbnailVariant | None = None

    def derived_name(self, name: str) -> str:
        return f"{name}{self.suffix}"


def _thumbnail(variant: ThumbnailVariant) -> DerivationStep:
    # Thumbnails are PNGs; letting them cascade would thumbnail the thumbnail.
    return DerivationStep(Service.THUMBNAIL, THUMBNAIL_SUFFIX, cascade=False, fatal=True, variant=variant)


def plan_derivations(
    kind: FileKind, name: str, cascade: bool, labels_enabled: bool
) -> list[DerivationStep]:
    """Return the derivation steps for an artifact, in execution order."""
    if not cascade:
        return []

    if kind is FileKind.DOCUMENT:
        steps = [DerivationStep(Service.EXTRACT, EXTRACT_SUFFIX, cascade=True, fatal=True)]
        if is_pdf(name):
            steps.append(_thumbnail(ThumbnailVariant.PDF))
        return steps

    if kind is FileKind.VIDEO:
        return [_thumbnail(ThumbnailVariant.VIDEO)]

    if kind is FileKind.IMAGE:
        steps = [_thumbnail(ThumbnailVariant.IMAGE)]
        if labels_enabled:
            steps.append(DerivationStep(Service.LABELS, LABELS_SUFFIX, cascade=cascade, fatal=False))
        return steps

    return []


def should_index(kind: FileKind, cascade: bool) -> bool:
    return cascade and kind is FileKind.PLAINTEXT
