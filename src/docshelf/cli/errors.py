"""docshelf rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from docshelf.cli.errors import err_no_db
    console.print(err_no_db("schema.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_db(db_path: str = "schema.db") -> str:
    """No database at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  docshelf init"
    )


def err_config(exc: Exception) -> str:
    """Config file rejected by load_config()."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {exc}"
    )


def err_file_not_found(path: str) -> str:
    """Local input file for ingest/install does not exist."""
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Check the path and try again."
    )


def err_bad_target(target: str) -> str:
    """--to is not a directory under /files."""
    return (
        f"[red]Error:[/] Target must live under /files: '{target}'\n"
        "  Example:  --to /files/docs"
    )


def err_ingest(exc: Exception) -> str:
    """A fatal ingestion failure (storage, extraction, thumbnail, archive)."""
    stage = getattr(exc, "stage", "ingest")
    return (
        f"[red]Error:[/] Ingestion failed during '{stage}'.\n"
        f"  {exc}\n"
        "  Artifacts written before the failure were kept; fix the cause and re-run."
    )


def err_bad_query(match: str, exc: Exception) -> str:
    """FTS5 rejected the match expression."""
    return (
        f"[red]Error:[/] Invalid search expression: '{match}'\n"
        f"  {exc}\n"
        '  Quote phrases ("exact words") and use AND / OR / NOT or prefix*.'
    )


def warn_no_api_key(model: str, exc: Exception) -> str:
    """Labels enabled but the vision model's provider key is missing."""
    return (
        f"[yellow]Warning:[/] Image labels are enabled for '{model}' but will fail.\n"
        f"  {exc}\n"
        "  Or disable labels:  export DOCSHELF_LABELS=false"
    )
