"""docshelf serve — run the HTTP API with uvicorn."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
import uvicorn

from docshelf.cli.common import console, load_cli_config
from docshelf.cli.errors import warn_no_api_key
from docshelf.log import configure_logging, log_config
from docshelf.server.app import create_app


def serve_cmd(
    root: Annotated[
        Path | None,
        typer.Option("--root", help="Directory holding files/ (default: config server.root)."),
    ] = None,
    bind: Annotated[
        str | None,
        typer.Option("--bind", help="host:port to listen on (default: config server.bind)."),
    ] = None,
    db: Annotated[
        Path | None,
        typer.Option("--db", help="SQLite database path (default: config server.db)."),
    ] = None,
) -> None:
    """Serve uploads and full-text search over HTTP."""
    cfg = load_cli_config(root, db)
    if bind is not None:
        cfg.server.bind = bind

    configure_logging(cfg.server.log_level)
    log_config(cfg.as_dict())

    if cfg.labels.enabled:
        from docshelf.derive.llm_client import validate_api_key

        try:
            validate_api_key(cfg.labels.model)
        except EnvironmentError as exc:
            console.print(warn_no_api_key(cfg.labels.model, exc))

    Path(cfg.server.root, "files").mkdir(parents=True, exist_ok=True)
    app = create_app(cfg)
    uvicorn.run(
        app,
        host=cfg.server.host,
        port=cfg.server.port,
        log_level=cfg.server.log_level.lower(),
    )
