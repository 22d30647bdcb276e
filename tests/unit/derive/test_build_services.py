"""Tests for picking service implementations from configuration."""

from __future__ import annotations

from docshelf.config import DocshelfConfig
from docshelf.derive import build_services
from docshelf.derive.labels import LlmLabeler
from docshelf.derive.pdf import PdfTextExtractor
from docshelf.derive.thumbnail import ImageMagickThumbnailer
from docshelf.derive.tika import TikaExtractor


def test_defaults_tika_no_labels():
    services = build_services(DocshelfConfig())
    assert isinstance(services.extractor, TikaExtractor)
    assert services.extractor.url == "http://localhost:9998/tika"
    assert isinstance(services.thumbnailer, ImageMagickThumbnailer)
    assert services.labeler is None
    assert not services.labels_enabled


def test_pypdf_backend_and_labels():
    cfg = DocshelfConfig()
    cfg.extractor.backend = "pypdf"
    cfg.labels.enabled = True
    cfg.labels.model = "ollama/llava"
    cfg.thumbnails.height = 50

    services = build_services(cfg)
    assert isinstance(services.extractor, PdfTextExtractor)
    assert isinstance(services.labeler, LlmLabeler)
    assert services.labeler.model == "ollama/llava"
    assert services.thumbnailer.height == 50
    assert services.labels_enabled
