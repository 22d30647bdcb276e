"""docshelf ingest / install — feed local files through the ingestion pipeline.

Runs the exact controller the HTTP server uses, so a file ingested here is
stored, derived and indexed the same way as an upload:
  docshelf ingest report.pdf --to /files/reports
  docshelf ingest notes.txt --to /files/notes --append
  docshelf install site.tar.gz --to /files/sites/site
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Annotated

import typer

from docshelf.cli.common import console, load_cli_config, open_db
from docshelf.cli.errors import err_bad_target, err_file_not_found, err_ingest
from docshelf.db.repository import IndexRepository
from docshelf.derive import build_services
from docshelf.errors import IngestError
from docshelf.ingest.archive import ArchiveInstaller
from docshelf.ingest.controller import APPEND, OVERWRITE, IngestionController
from docshelf.log import configure_logging
from docshelf.store import ArtifactStore

_FILES_ROOT = "/" + OVERWRITE


def ingest_cmd(
    file: Annotated[Path, typer.Argument(help="Local file to ingest.")],
    to: Annotated[
        str,
        typer.Option("--to", help="Destination directory under /files."),
    ] = _FILES_ROOT,
    append: Annotated[
        bool,
        typer.Option("--append", help="Append to an existing artifact instead of replacing it."),
    ] = False,
    no_cascade: Annotated[
        bool,
        typer.Option("--no-cascade", help="Store only; skip extraction, thumbnails and indexing."),
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
    """Store a local file, derive its artifacts and index its text."""
    parent_dir = _check_target(to)
    if not file.is_file():
        console.print(err_file_not_found(str(file)))
        raise typer.Exit(1)

    cfg = load_cli_config(root, db)
    configure_logging(cfg.server.log_level)
    controller, conn = _build_controller(cfg)
    command = APPEND if append else OVERWRITE

    try:
        with file.open("rb") as fh:
            artifact = controller.ingest(
                fh, command, parent_dir, file.name, cascade=not no_cascade
            )
    except IngestError as exc:
        console.print(err_ingest(exc))
        raise typer.Exit(1)
    finally:
        conn.close()

    console.print(f"[green]✓[/] {artifact.url_path} ({artifact.size:,} bytes)")


def install_cmd(
    tarball: Annotated[Path, typer.Argument(help="Tar archive (plain, gz, bz2 or xz).")],
    to: Annotated[
        str,
        typer.Option("--to", help="Destination under /files; entries land below it."),
    ],
    append: Annotated[
        bool,
        typer.Option("--append", help="Append entries to existing artifacts."),
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
    """Unpack a tar archive, ingesting every regular entry."""
    target = _check_target(to)
    if target == _FILES_ROOT:
        console.print(err_bad_target(to))
        raise typer.Exit(1)
    if not tarball.is_file():
        console.print(err_file_not_found(str(tarball)))
        raise typer.Exit(1)

    parent_dir, name = posixpath.split(target)
    cfg = load_cli_config(root, db)
    configure_logging(cfg.server.log_level)
    controller, conn = _build_controller(cfg)
    command = APPEND if append else OVERWRITE

    try:
        with tarball.open("rb") as fh:
            artifacts = ArchiveInstaller(controller).install(fh, command, parent_dir, name)
    except IngestError as exc:
        console.print(err_ingest(exc))
        raise typer.Exit(1)
    finally:
        conn.close()

    console.print(f"[green]✓[/] {len(artifacts)} entries installed under {target}")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _check_target(to: str) -> str:
    """Normalise --to; exit 1 unless it lies under /files."""
    target = posixpath.normpath("/" + to.strip("/"))
    if target != _FILES_ROOT and not target.startswith(_FILES_ROOT + "/"):
        console.print(err_bad_target(to))
        raise typer.Exit(1)
    return target


def _build_controller(cfg):
    conn = open_db(cfg.server.db_path())
    controller = IngestionController(
        ArtifactStore(cfg.server.root),
        IndexRepository(conn),
        build_services(cfg),
        chunk_size=cfg.index.chunk_size,
    )
    return controller, conn
