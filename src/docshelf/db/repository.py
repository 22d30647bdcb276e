"""Repository for the full-text index (``filesearch`` FTS5 table).

Single interface for: record inserts, part numbering, stale-row cleanup,
MATCH queries with highlighting, and index statistics.
"""

from __future__ import annotations

import sqlite3

from docshelf.db.models import IndexedFile, IndexRecord, SearchHit
from docshelf.db.schema import CONTENT_COLUMN, TABLE
from docshelf.errors import IndexWriteError, SearchQueryError


class IndexRepository:
    """Data access layer for IndexRecords.

    Wraps an open sqlite3.Connection. The connection is owned by the caller
    and must be closed after use. Every write commits on its own so that a
    failed chunk never takes earlier chunks down with it.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialise with an open database connection.

        Args:
            conn: An open sqlite3.Connection with the schema initialised
                (see docshelf.db.schema.initialize).
        """
        self._conn = conn

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add_record(self, record: IndexRecord) -> int:
        """Insert one chunk. Returns the new rowid.

        Raises:
            IndexWriteError: If SQLite rejects the insert.
        """
        try:
            cur = self._conn.execute(
                f"""
                INSERT INTO {TABLE} (cmd, path, name, part, original_path, original_name, content)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.cmd,
                    record.path,
                    record.name,
                    record.part,
                    record.original_path,
                    record.original_name,
                    record.content,
                ),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise IndexWriteError(
                f"indexing {record.cmd} {record.path}{record.name} part {record.part}: {exc}"
            ) from exc
        record.rowid = cur.lastrowid
        return cur.lastrowid

    def delete_records(self, path: str, name: str) -> int:
        """Delete every indexed chunk of *path*/*name*. Returns rows removed."""
        cur = self._conn.execute(
            f"DELETE FROM {TABLE} WHERE path = ? AND name = ?", (path, name)
        )
        self._conn.commit()
        return cur.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def next_part(self, path: str, name: str) -> int:
        """Return the part number the next chunk of *path*/*name* should use."""
        row = self._conn.execute(
            f"SELECT MAX(CAST(part AS INTEGER)) FROM {TABLE} WHERE path = ? AND name = ?",
            (path, name),
        ).fetchone()
        return 0 if row[0] is None else row[0] + 1

    def get_records(self, path: str, name: str) -> list[IndexRecord]:
        """Return the chunks of *path*/*name* in part order."""
        rows = self._conn.execute(
            f"""
            SELECT rowid, cmd, path, name, part, original_path, original_name, content
            FROM {TABLE} WHERE path = ? AND name = ?
            ORDER BY CAST(part AS INTEGER)
            """,
            (path, name),
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def count_records(self) -> int:
        return self._conn.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()[0]

    def list_files(self) -> list[IndexedFile]:
        """Return every indexed (path, name) with its chunk count, sorted by path."""
        rows = self._conn.execute(
            f"""
            SELECT path, name, COUNT(*) AS parts FROM {TABLE}
            GROUP BY path, name ORDER BY path, name
            """
        ).fetchall()
        return [IndexedFile(path=r["path"], name=r["name"], parts=r["parts"]) for r in rows]

    # ------------------------------------------------------------------
    # FTS5 MATCH + highlight
    # ------------------------------------------------------------------

    def search(
        self,
        match: str,
        open_tag: str,
        close_tag: str,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Run a MATCH query, best-ranked first; every match unless *limit* is set.

        *match* is passed to FTS5 verbatim, so phrase queries (``"a b"``),
        prefix queries (``abc*``) and boolean operators all work.

        Raises:
            SearchQueryError: If FTS5 rejects the match expression.
        """
        try:
            rows = self._conn.execute(
                f"""
                SELECT path, name, original_path, original_name, part,
                       highlight({TABLE}, {CONTENT_COLUMN}, ?, ?) AS highlighted
                FROM {TABLE}
                WHERE {TABLE} MATCH ?
                ORDER BY rank
                LIMIT ?
                """,
                # LIMIT -1 is unbounded in SQLite.
                (open_tag, close_tag, match, -1 if limit is None else limit),
            ).fetchall()
        except sqlite3.OperationalError as exc:
            raise SearchQueryError(f"query {match}: {exc}") from exc
        return [
            SearchHit(
                original_path=r["original_path"],
                original_name=r["original_name"],
                part=int(r["part"]),
                snippet=r["highlighted"] or "",
                path=r["path"],
                name=r["name"],
            )
            for r in rows
        ]


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_record(row: sqlite3.Row) -> IndexRecord:
    return IndexRecord(
        rowid=row["rowid"],
        cmd=row["cmd"],
        path=row["path"],
        name=row["name"],
        part=int(row["part"]),
        original_path=row["original_path"],
        original_name=row["original_name"],
        content=row["content"],
    )
