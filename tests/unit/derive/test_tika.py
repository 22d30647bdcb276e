"""Tests for the Tika HTTP extractor."""

from __future__ import annotations

import io
import socket
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from docshelf.derive.tika import TikaExtractor
from docshelf.errors import DerivationServiceError


def _response(status=200, body=b"plain text"):
    resp = MagicMock()
    resp.status = status
    resp.read.return_value = body
    resp.__enter__.return_value = resp
    return resp


def test_extract_puts_document():
    with patch("docshelf.derive.tika.urllib.request.urlopen", return_value=_response()) as mock:
        out = TikaExtractor(url="http://tika:9998/tika", timeout=3).extract(io.BytesIO(b"%PDF"), "/files/a.pdf")

    assert out == b"plain text"
    req = mock.call_args.args[0]
    assert req.get_method() == "PUT"
    assert req.full_url == "http://tika:9998/tika"
    assert req.data == b"%PDF"
    assert req.get_header("Accept") == "text/plain"
    assert mock.call_args.kwargs["timeout"] == 3


def test_extract_non_200():
    with patch("docshelf.derive.tika.urllib.request.urlopen", return_value=_response(status=204)):
        with pytest.raises(DerivationServiceError, match="Unable to upload /files/a.pdf: 204"):
            TikaExtractor().extract(io.BytesIO(b"x"), "/files/a.pdf")


def test_extract_http_error():
    err = urllib.error.HTTPError("http://tika", 422, "Unprocessable", {}, None)
    with patch("docshelf.derive.tika.urllib.request.urlopen", side_effect=err):
        with pytest.raises(DerivationServiceError, match="422"):
            TikaExtractor().extract(io.BytesIO(b"x"), "/files/a.pdf")


@pytest.mark.parametrize(
    "exc",
    [urllib.error.URLError("connection refused"), socket.timeout("timed out"), ConnectionResetError()],
)
def test_extract_connection_failures(exc):
    with patch("docshelf.derive.tika.urllib.request.urlopen", side_effect=exc):
        with pytest.raises(DerivationServiceError, match="Unable to do request") as exc_info:
            TikaExtractor().extract(io.BytesIO(b"x"), "/files/a.pdf")
    assert exc_info.value.stage == "extract"
