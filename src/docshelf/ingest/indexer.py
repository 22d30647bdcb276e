"""Chunked full-text indexing of text artifacts.

A text artifact is read in fixed-size byte chunks (4096 by default) and each
chunk becomes one IndexRecord. Bytes are decoded with an incremental UTF-8
decoder, so a multi-byte character straddling a chunk boundary is carried
into the next chunk instead of being mangled.
"""

from __future__ import annotations

import codecs
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import BinaryIO

from loguru import logger

from docshelf.db.models import IndexRecord
from docshelf.db.repository import IndexRepository
from docshelf.errors import IndexWriteError

DEFAULT_CHUNK_SIZE = 4096

# Reserved as highlight markers by the query engine.
_STRIP_MARKERS = str.maketrans("", "", "\x02\x03")


def iter_chunks(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
    """Yield decoded text chunks of at most *chunk_size* source bytes each."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while True:
        block = stream.read(chunk_size)
        if not block:
            break
        text = decoder.decode(block)
        if not text:
            continue
        if pending:
            yield pending
        pending = text
    # A truncated trailing sequence belongs to the last chunk, not a new part.
    pending += decoder.decode(b"", final=True)
    if pending:
        yield pending


@dataclass
class IndexResult:
    """Outcome of indexing one artifact.

    Attributes:
        first_part: Part number assigned to the first chunk.
        written: Part numbers that were inserted.
        failed: Part numbers whose insert failed (logged, not retried).
    """

    first_part: int
    written: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def next_part(self) -> int:
        return self.first_part + len(self.written) + len(self.failed)


class TextIndexer:
    """Insert chunks of a text stream into the full-text index.

    Indexing is best-effort: a chunk that fails to insert is logged and
    skipped; its part number is still consumed so numbering stays aligned
    with byte offsets.
    """

    def __init__(self, repo: IndexRepository, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self._repo = repo
        self.chunk_size = chunk_size

    def index(
        self,
        stream: BinaryIO,
        *,
        cmd: str,
        path: str,
        name: str,
        original_path: str,
        original_name: str,
        first_part: int = 0,
    ) -> IndexResult:
        """Index *stream* from its current position.

        Args:
            stream: Binary stream, already positioned at the first byte to index.
            cmd: Ingestion verb stored with every record.
            path: Directory of the artifact, with trailing slash.
            name: File name of the artifact.
            original_path: Directory of the root upload, with trailing slash.
            original_name: File name of the root upload.
            first_part: Part number of the first chunk.
        """
        result = IndexResult(first_part=first_part)
        part = first_part
        for content in iter_chunks(stream, self.chunk_size):
            record = IndexRecord(
                cmd=cmd,
                path=path,
                name=name,
                part=part,
                original_path=original_path,
                original_name=original_name,
                content=content.translate(_STRIP_MARKERS),
            )
            try:
                self._repo.add_record(record)
            except IndexWriteError as exc:
                logger.warning("failed indexing: {}", exc)
                result.failed.append(part)
            else:
                result.written.append(part)
            part += 1
        return result
