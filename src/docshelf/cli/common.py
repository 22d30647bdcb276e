"""Helpers shared by the docshelf CLI commands."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import typer
from rich.console import Console

from docshelf.cli.errors import err_config
from docshelf.config import ConfigError, DocshelfConfig, load_config
from docshelf.db.connection import Database
from docshelf.db.schema import initialize

console = Console()


def load_cli_config(root: Path | None = None, db: Path | None = None) -> DocshelfConfig:
    """Load config for *root*, then apply the ``--root`` / ``--db`` flags.

    Exits with status 1 on a ConfigError.
    """
    try:
        cfg = load_config(root)
    except ConfigError as exc:
        console.print(err_config(exc))
        raise typer.Exit(1)
    if root is not None:
        cfg.server.root = str(root)
    if db is not None:
        cfg.server.db = str(db)
    return cfg


def open_db(db_path: Path) -> sqlite3.Connection:
    conn = Database(db_path).connect()
    initialize(conn)
    return conn
