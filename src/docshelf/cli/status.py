"""docshelf status — root, database and index overview."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from docshelf.cli.common import console, load_cli_config, open_db
from docshelf.cli.errors import err_no_db
from docshelf.db.migrations import current_version
from docshelf.db.repository import IndexRepository

_MAX_FILES_SHOWN = 20


def status_cmd(
    root: Annotated[
        Path | None,
        typer.Option("--root", help="Directory holding files/ (default: config server.root)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="SQLite database path (default: config server.db)."),
    ] = None,
) -> None:
    """Show the served root, the database and what is indexed."""
    cfg = load_cli_config(root, db)
    db_path = cfg.server.db_path()
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    size_mb = db_path.stat().st_size / (1024 * 1024)
    conn = open_db(db_path)
    try:
        repo = IndexRepository(conn)
        version = current_version(conn)
        records = repo.count_records()
        files = repo.list_files()
    finally:
        conn.close()

    labels = f"on ({cfg.labels.model})" if cfg.labels.enabled else "off"
    lines = [
        f"Root:       {Path(cfg.server.root).resolve()}",
        f"Database:   {db_path}",
        f"Size:       {size_mb:.1f} MB  |  schema v{version}",
        f"Extractor:  {cfg.extractor.backend}",
        f"Labels:     {labels}",
        f"Records: [bold]{records:,}[/]  |  Files: [bold]{len(files):,}[/]",
    ]
    console.print(Panel("\n".join(lines), title="[bold]docshelf[/]", expand=False))

    if not files:
        console.print("[dim]Nothing indexed yet.[/]")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("File")
    table.add_column("Parts", justify="right", style="dim")
    for f in files[:_MAX_FILES_SHOWN]:
        table.add_row(f"{f.path}{f.name}", str(f.parts))
    console.print(table)
    if len(files) > _MAX_FILES_SHOWN:
        console.print(f"[dim]… and {len(files) - _MAX_FILES_SHOWN} more[/]")
