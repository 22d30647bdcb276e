"""Exception hierarchy for the ingestion pipeline and query engine.

Fatal ingestion failures derive from ``IngestError`` and unwind through every
recursive ``ingest()`` call unchanged. ``IndexWriteError`` is the one error
kind that never escapes the controller: a chunk that fails to index is logged
and skipped.
"""

from __future__ import annotations


class DocshelfError(Exception):
    """Base class for all docshelf errors."""


class IngestError(DocshelfError):
    """A fatal ingestion failure.

    Attributes:
        path: Artifact path (``/files/...``) the failing step was working on.
        stage: Pipeline stage that failed: ``write``, ``extract``,
            ``thumbnail``, ``labels`` or ``archive``.
    """

    stage = "ingest"

    def __init__(self, message: str, *, path: str = "", stage: str | None = None) -> None:
        super().__init__(message)
        self.path = path
        if stage is not None:
            self.stage = stage


class StorageWriteError(IngestError):
    """The artifact store could not create, write or reopen a file."""

    stage = "write"


class DerivationServiceError(IngestError):
    """An extraction, thumbnail or label service call failed or timed out."""

    stage = "derive"


class ArchiveFormatError(IngestError):
    """A tar upload is malformed or contains an unsafe member path."""

    stage = "archive"


class IndexWriteError(DocshelfError):
    """A single chunk could not be inserted into the full-text index."""


class SearchQueryError(DocshelfError):
    """The full-text engine rejected a match expression."""
