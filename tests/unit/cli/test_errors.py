"""Tests for docshelf rich error messages."""

from __future__ import annotations

import pytest

from docshelf.cli.errors import (
    err_bad_query,
    err_bad_target,
    err_config,
    err_file_not_found,
    err_ingest,
    err_no_db,
    warn_no_api_key,
)
from docshelf.errors import DerivationServiceError


def _has_action(msg: str) -> bool:
    """Every error must contain a cause AND an actionable instruction."""
    lower = msg.lower()
    return any(kw in lower for kw in ["run:", "example:", "export ", "check ", "fix ", "quote ", "remove"]) or "\n  " in msg


@pytest.mark.parametrize(
    "msg",
    [
        err_no_db("schema.db"),
        err_config(ValueError("bad")),
        err_file_not_found("a.txt"),
        err_bad_target("/etc"),
        err_ingest(DerivationServiceError("boom", stage="extract")),
        err_bad_query('"x', ValueError("syntax error")),
        warn_no_api_key("openai/gpt-4o-mini", OSError("Set the OPENAI_API_KEY")),
    ],
)
def test_messages_have_cause_and_action(msg):
    assert msg.startswith(("[red]Error:[/]", "[yellow]Warning:[/]"))
    assert _has_action(msg)


def test_err_no_db_names_path_and_init():
    msg = err_no_db("/srv/shelf/schema.db")
    assert "/srv/shelf/schema.db" in msg
    assert "docshelf init" in msg


def test_err_ingest_names_stage():
    msg = err_ingest(DerivationServiceError("Could not make thumbnail", stage="thumbnail"))
    assert "'thumbnail'" in msg
    assert "Could not make thumbnail" in msg


def test_warn_no_api_key_suggests_disabling():
    assert "DOCSHELF_LABELS=false" in warn_no_api_key("openai/gpt-4o-mini", OSError("x"))
