"""Local PDF text extraction via pypdf.

For deployments without a Tika server. Only PDFs are supported; any other
document type fails extraction (which, like every extraction failure, fails
the upload).
"""

from __future__ import annotations

from typing import BinaryIO

import pypdf
from pypdf.errors import PyPdfError

from docshelf.classify import is_pdf
from docshelf.derive.base import TextExtractor
from docshelf.errors import DerivationServiceError


class PdfTextExtractor(TextExtractor):
    """Extract page text with ``pypdf.PdfReader``.

    Pages that yield no text (scanned images, etc.) are silently skipped;
    the remaining pages are joined with blank lines.
    """

    def extract(self, stream: BinaryIO, name: str) -> bytes:
        if not is_pdf(name):
            raise DerivationServiceError(
                f"pypdf extractor cannot read {name}: only .pdf is supported",
                path=name,
                stage="extract",
            )
        try:
            reader = pypdf.PdfReader(stream)
            parts: list[str] = []
            for page in reader.pages:
                stripped = (page.extract_text() or "").strip()
                if stripped:
                    parts.append(stripped)
        except (PyPdfError, ValueError) as exc:
            raise DerivationServiceError(
                f"Could not extract text from {name}: {exc}", path=name, stage="extract"
            ) from exc
        return "\n\n".join(parts).encode("utf-8")
