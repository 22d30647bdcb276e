"""Tests for suffix-based type classification."""

from __future__ import annotations

import pytest

from docshelf.classify import FileKind, classify, is_pdf


@pytest.mark.parametrize(
    "name, kind",
    [
        ("report.pdf", FileKind.DOCUMENT),
        ("slides.pptx", FileKind.DOCUMENT),
        ("sheet.xls", FileKind.DOCUMENT),
        ("notes.one", FileKind.DOCUMENT),
        ("clip.mp4", FileKind.VIDEO),
        ("photo.jpeg", FileKind.IMAGE),
        ("icon.gif", FileKind.IMAGE),
        ("readme.txt", FileKind.PLAINTEXT),
        ("data.json", FileKind.PLAINTEXT),
        ("page.html", FileKind.PLAINTEXT),
        ("archive.zip", FileKind.OPAQUE),
        ("Makefile", FileKind.OPAQUE),
        ("", FileKind.OPAQUE),
    ],
)
def test_classify(name, kind):
    assert classify(name) is kind


def test_classify_is_case_sensitive():
    assert classify("REPORT.PDF") is FileKind.OPAQUE
    assert classify("photo.JPG") is FileKind.OPAQUE


def test_derived_names_classify_by_final_suffix():
    assert classify("report.pdf--extract.txt") is FileKind.PLAINTEXT
    assert classify("photo.jpg--thumbnail.png") is FileKind.IMAGE
    assert classify("photo.jpg--labels.json") is FileKind.PLAINTEXT


def test_is_pdf_ignores_case():
    assert is_pdf("a.pdf")
    assert is_pdf("A.PDF")
    assert not is_pdf("a.pdf.txt")
    assert not is_pdf("a.docx")
