"""Tests for the query engine: escaping, highlighting and grouping."""

from __future__ import annotations

import io

import pytest

from docshelf.db.models import IndexRecord, SearchHit
from docshelf.errors import SearchQueryError
from docshelf.ingest.indexer import TextIndexer
from docshelf.search import DEFAULT_CLOSE, DEFAULT_OPEN, QueryEngine, hits_to_children, render_snippet


def _add(repo, content, name="a.txt", part=0, original_name=None, path="/files/"):
    repo.add_record(IndexRecord(
        cmd="files",
        path=path,
        name=name,
        part=part,
        original_path=path,
        original_name=original_name or name,
        content=content,
    ))


@pytest.fixture
def engine(repo):
    return QueryEngine(repo)


def test_render_snippet_escapes_text_not_markers():
    raw = "a <script> \x02b\x03 & c"
    assert render_snippet(raw, "<b>", "</b>") == "a &lt;script&gt; <b>b</b> &amp; c"


def test_render_snippet_custom_escape():
    assert render_snippet("[x] \x02y\x03", "{", "}", escape=lambda s: s.replace("[", "\\[")) == "\\[x] {y}"


def test_search_default_highlight(repo, engine):
    _add(repo, "find the needle here")
    hits = engine.search("needle")
    assert hits[0].snippet == f"find the {DEFAULT_OPEN}needle{DEFAULT_CLOSE} here"


def test_search_uploaded_markup_is_escaped(repo, engine):
    _add(repo, '<img src=x onerror="alert(1)"> needle')
    snippet = engine.search("needle")[0].snippet
    assert "<img" not in snippet
    assert "&lt;img" in snippet


def test_search_blank_match_returns_nothing(repo, engine):
    _add(repo, "anything")
    assert engine.search("") == []
    assert engine.search("   ") == []


def test_search_malformed_raises(repo, engine):
    _add(repo, "anything")
    with pytest.raises(SearchQueryError):
        engine.search('"open')


def test_search_returns_every_match_by_default(repo, engine):
    for part in range(150):
        _add(repo, f"needle {part}", name="big.txt", part=part)
    hits = engine.search("needle")
    assert len(hits) == 150
    assert sorted(h.part for h in hits) == list(range(150))


def test_search_default_limit(repo):
    for part in range(5):
        _add(repo, f"needle {part}", part=part)
    assert len(QueryEngine(repo, default_limit=3).search("needle")) == 3
    assert len(QueryEngine(repo, default_limit=3).search("needle", limit=4)) == 4


def test_search_groups_by_original_file(repo, engine):
    # a.pdf's chunks are split around b.txt in rank order.
    _add(repo, "needle needle needle", name="a.pdf--extract.txt", original_name="a.pdf", part=0)
    _add(repo, "needle needle hay", name="b.txt", part=0)
    _add(repo, "needle " + "hay " * 40, name="a.pdf--extract.txt", original_name="a.pdf", part=1)
    hits = engine.search("needle")
    assert [(h.original_name, h.part) for h in hits] == [("a.pdf", 0), ("a.pdf", 1), ("b.txt", 0)]


def test_group_preserves_first_appearance_order():
    hits = [
        SearchHit("/files/", "b", 0, ""),
        SearchHit("/files/", "a", 0, ""),
        SearchHit("/files/", "b", 1, ""),
    ]
    groups = QueryEngine.group(hits)
    assert list(groups) == [("/files/", "b"), ("/files/", "a")]
    assert [h.part for h in groups[("/files/", "b")]] == [0, 1]


def test_hits_to_children_shape():
    hit = SearchHit("/files/docs/", "a.pdf", 2, "ctx")
    assert hits_to_children([hit]) == {
        "children": [
            {"path": "/files/docs/", "name": "a.pdf", "isDir": False, "context": "ctx", "part": 2}
        ]
    }


def test_for_connection(tmp_db):
    engine = QueryEngine.for_connection(tmp_db, open_tag="[", close_tag="]")
    assert engine.search("nothing") == []
    assert engine.open_tag == "["


def test_search_control_chars_in_content_not_highlighted(repo, engine):
    indexer = TextIndexer(repo)
    indexer.index(
        io.BytesIO(b"needle \x02fake\x03 tail"),
        cmd="files",
        path="/files/",
        name="a.txt",
        original_path="/files/",
        original_name="a.txt",
    )
    [hit] = engine.search("needle")
    assert hit.snippet.count(DEFAULT_OPEN) == 1
    assert "fake" in hit.snippet
