"""docshelf search — query the full-text index from the terminal."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from docshelf.cli.common import console, load_cli_config, open_db
from docshelf.cli.errors import err_bad_query, err_no_db
from docshelf.errors import SearchQueryError
from docshelf.search import QueryEngine, hits_to_children


def search_cmd(
    match: Annotated[str, typer.Argument(help="FTS5 match expression.")],
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Maximum hits (default: config index.search_limit, else every match)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the same JSON the HTTP API returns."),
    ] = False,
    root: Annotated[
        Path | None,
        typer.Option("--root", help="Directory holding files/ (default: config server.root)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="SQLite database path (default: config server.db)."),
    ] = None,
) -> None:
    """Search indexed text; hits are grouped by the file they came from."""
    cfg = load_cli_config(root, db)
    db_path = cfg.server.db_path()
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)

    if as_json:
        engine_kwargs = {
            "open_tag": cfg.index.highlight_open,
            "close_tag": cfg.index.highlight_close,
        }
    else:
        engine_kwargs = {"open_tag": "[bold yellow]", "close_tag": "[/]", "escape": escape}

    conn = open_db(db_path)
    try:
        engine = QueryEngine.for_connection(
            conn, default_limit=cfg.index.search_limit, **engine_kwargs
        )
        hits = engine.search(match, limit=limit)
    except SearchQueryError as exc:
        console.print(err_bad_query(match, exc))
        raise typer.Exit(1)
    finally:
        conn.close()

    if as_json:
        typer.echo(json.dumps(hits_to_children(hits), indent=2))
        return

    if not hits:
        console.print(f"[dim]No matches for '{escape(match)}'.[/]")
        return

    table = Table(show_header=True, header_style="bold", show_lines=True)
    table.add_column("File")
    table.add_column("Part", justify="right", style="dim")
    table.add_column("Context")
    for hit in hits:
        table.add_row(escape(hit.href), str(hit.part), hit.snippet)
    console.print(table)
    console.print(f"[dim]{len(hits)} hit(s) in {len(QueryEngine.group(hits))} file(s)[/]")
