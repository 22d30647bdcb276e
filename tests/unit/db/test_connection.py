"""Tests for the Database connection layer."""

from __future__ import annotations

from pathlib import Path

import pytest

from docshelf.db.connection import Database


def test_connect_creates_file(tmp_path):
    db_path = tmp_path / "schema.db"
    db = Database(db_path)
    conn = db.connect()
    conn.close()
    assert db_path.exists()


def test_wal_journal_mode(tmp_path):
    db = Database(tmp_path / "schema.db")
    conn = db.connect()
    mode = conn.execute("PRAGMA journal_mode").fetchone()[0]
    conn.close()
    assert mode == "wal"


def test_busy_timeout_set(tmp_path):
    db = Database(tmp_path / "schema.db")
    conn = db.connect()
    timeout = conn.execute("PRAGMA busy_timeout").fetchone()[0]
    conn.close()
    assert timeout == 30_000


def test_row_factory_set(tmp_path):
    db = Database(tmp_path / "schema.db")
    conn = db.connect()
    conn.execute("CREATE TABLE t (x INTEGER)")
    conn.execute("INSERT INTO t VALUES (42)")
    row = conn.execute("SELECT x FROM t").fetchone()
    conn.close()
    assert row["x"] == 42


def test_each_connect_is_independent(tmp_path):
    """One Database hands out a fresh connection per request."""
    db = Database(tmp_path / "schema.db")
    a = db.connect()
    b = db.connect()
    assert a is not b
    a.execute("CREATE TABLE t (x INTEGER)")
    a.execute("INSERT INTO t VALUES (1)")
    a.commit()
    assert b.execute("SELECT x FROM t").fetchone()[0] == 1
    a.close()
    b.close()


def test_context_manager_closes_connection(tmp_path):
    db = Database(tmp_path / "schema.db")
    with db as conn:
        conn.execute("CREATE TABLE t (x INTEGER)")
    # Connection should be closed — further use raises ProgrammingError
    with pytest.raises(Exception):
        conn.execute("SELECT 1")


def test_context_manager_accepts_path_str(tmp_path):
    db = Database(str(tmp_path / "schema.db"))
    assert isinstance(db.db_path, Path)
    with db as conn:
        result = conn.execute("SELECT 1").fetchone()[0]
    assert result == 1
