"""docshelf database layer: SQLite connection, FTS5 schema, index repository."""

from docshelf.db.connection import Database
from docshelf.db.migrations import MIGRATIONS, run_migrations
from docshelf.db.repository import IndexRepository
from docshelf.db.schema import initialize

__all__ = [
    "Database",
    "IndexRepository",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
]
