"""Database schema DDL and initialization."""

from __future__ import annotations

import sqlite3

TABLE = "filesearch"

# Only ``content`` is tokenized; the other columns ride along for filtering
# and for linking a hit back to its file.
CREATE_FILESEARCH = f"""
CREATE VIRTUAL TABLE IF NOT EXISTS {TABLE} USING fts5(
    cmd UNINDEXED,
    path UNINDEXED,
    name UNINDEXED,
    part UNINDEXED,
    original_path UNINDEXED,
    original_name UNINDEXED,
    content
)
"""

# Column position of ``content``, as required by highlight().
CONTENT_COLUMN = 6

CURRENT_VERSION = 1


def initialize(conn: sqlite3.Connection) -> None:
    """Initialize the database schema via the migration runner (idempotent)."""
    from docshelf.db.migrations import run_migrations

    run_migrations(conn)
