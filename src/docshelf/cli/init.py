"""docshelf init — create a served root.

Creates:
  <root>/files/          — artifact tree (uploads and derived files)
  <root>/schema.db       — empty full-text index with schema
  <root>/docshelf.yaml   — project config template (never overwritten)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from docshelf.cli.common import console, load_cli_config, open_db
from docshelf.config import write_project_config


def init_cmd(
    root: Annotated[
        Path,
        typer.Argument(help="Directory to serve. Defaults to current directory."),
    ] = Path("."),
) -> None:
    """Initialize a docshelf root: files/, database and docshelf.yaml."""
    root = root.resolve()
    root.mkdir(parents=True, exist_ok=True)

    cfg = load_cli_config(root)
    db_path = cfg.server.db_path()

    if db_path.exists():
        console.print(f"[yellow]⚠[/]  {db_path} already exists. Existing data is preserved.")

    (root / "files").mkdir(exist_ok=True)
    console.print("  [green]✓[/] files/")

    conn = open_db(db_path)
    conn.close()
    console.print(f"  [green]✓[/] {db_path.name}")

    cfg_path = write_project_config(root)
    console.print(f"  [green]✓[/] {cfg_path.name}")

    console.print(f"\n[bold green]✓ docshelf root initialized at {root}.[/]")
    console.print("\nNext steps:")
    console.print("  1. docshelf serve                              (start the HTTP server)")
    console.print("  2. curl --data-binary @a.pdf :9321/files/docs/a.pdf")
    console.print("  3. docshelf search <words>")
