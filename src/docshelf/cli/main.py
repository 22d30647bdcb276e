"""docshelf CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from docshelf.cli.ingest import ingest_cmd, install_cmd
from docshelf.cli.init import init_cmd
from docshelf.cli.search import search_cmd
from docshelf.cli.serve import serve_cmd
from docshelf.cli.status import status_cmd


def _installed_version() -> str:
    try:
        return importlib.metadata.version("docshelf")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"docshelf {_installed_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="docshelf",
    help=(
        "docshelf — upload, derive and full-text search documents.\n\n"
        "  docshelf serve    HTTP upload + search server.\n"
        "  docshelf ingest   Feed a local file through the same pipeline."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """docshelf — upload, derive and full-text search documents."""


app.command("init")(init_cmd)
app.command("serve")(serve_cmd)
app.command("ingest")(ingest_cmd)
app.command("install")(install_cmd)
app.command("search")(search_cmd)
app.command("status")(status_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed docshelf version."""
    typer.echo(f"docshelf {_installed_version()}")


if __name__ == "__main__":
    app()
