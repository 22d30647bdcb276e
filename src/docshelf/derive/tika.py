"""Apache Tika text extraction over HTTP.

The document is PUT to the Tika server with ``accept: text/plain``; any
status other than 200, a connection error, or a timeout fails the step.
"""

from __future__ import annotations

import urllib.error
import urllib.request
from typing import BinaryIO

from docshelf.derive.base import TextExtractor
from docshelf.errors import DerivationServiceError


class TikaExtractor(TextExtractor):
    """Text extraction via a Tika server (``tika-server`` ``/tika`` endpoint)."""

    def __init__(self, url: str = "http://localhost:9998/tika", timeout: float = 60.0) -> None:
        self.url = url
        self.timeout = timeout

    def extract(self, stream: BinaryIO, name: str) -> bytes:
        req = urllib.request.Request(
            self.url,
            data=stream.read(),
            method="PUT",
            headers={"accept": "text/plain"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                if resp.status != 200:
                    raise DerivationServiceError(
                        f"Unable to upload {name}: {resp.status}", path=name, stage="extract"
                    )
                return resp.read()
        except urllib.error.HTTPError as exc:
            raise DerivationServiceError(
                f"Unable to upload {name}: {exc.code}", path=name, stage="extract"
            ) from exc
        except OSError as exc:  # URLError, timeouts, connection resets
            raise DerivationServiceError(
                f"Unable to do request to upload file {name}: {exc}", path=name, stage="extract"
            ) from exc
