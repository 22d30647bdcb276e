"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from docshelf.db.connection import Database
from docshelf.db.repository import IndexRepository
from docshelf.db.schema import initialize
from docshelf.derive import DerivationServices
from docshelf.derive.base import Labeler, TextExtractor, Thumbnailer
from docshelf.errors import DerivationServiceError
from docshelf.ingest.controller import IngestionController
from docshelf.store import ArtifactStore

FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-thumbnail"


class FakeExtractor(TextExtractor):
    """Returns canned text; records every call."""

    def __init__(self, text: bytes = b"extracted words from the document") -> None:
        self.text = text
        self.fail = False
        self.calls: list[tuple[str, bytes]] = []

    def extract(self, stream, name):
        self.calls.append((name, stream.read()))
        if self.fail:
            raise DerivationServiceError(f"Unable to upload {name}: 500", stage="extract")
        return self.text


class FakeThumbnailer(Thumbnailer):
    def __init__(self) -> None:
        self.fail = False
        self.calls = []

    def thumbnail(self, path, variant):
        self.calls.append((path, variant))
        if self.fail:
            raise DerivationServiceError("Unable to run thumbnail command: exit 1", stage="thumbnail")
        return FAKE_PNG


class FakeLabeler(Labeler):
    def __init__(self, payload: bytes = b'{"labels": ["cat", "sofa"]}') -> None:
        self.payload = payload
        self.fail = False
        self.calls = []

    def labels(self, path):
        self.calls.append(path)
        if self.fail:
            raise DerivationServiceError("label service unavailable", stage="labels")
        return self.payload


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / "schema.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def repo(tmp_db):
    return IndexRepository(tmp_db)


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path / "root")


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def thumbnailer():
    return FakeThumbnailer()


@pytest.fixture
def labeler():
    return FakeLabeler()


@pytest.fixture
def services(extractor, thumbnailer):
    """Services with labeling disabled."""
    return DerivationServices(extractor=extractor, thumbnailer=thumbnailer)


@pytest.fixture
def labeled_services(extractor, thumbnailer, labeler):
    return DerivationServices(extractor=extractor, thumbnailer=thumbnailer, labeler=labeler)


@pytest.fixture
def controller(store, repo, services):
    return IngestionController(store, repo, services)
