"""docshelf HTTP API (FastAPI).

Routes:
  POST /{command}/{path...}/{name}?install=true|false
      Upload one file (or, with install=true, a tar stream) and run the
      ingestion pipeline. ``command`` is ``files`` (overwrite) or ``append``.
      Artifacts are always stored under /files/... .
  GET  /search?match=<expr>&json=true|false[&limit=N]
      Full-text search with highlighted snippets.
  GET  /health
"""

from __future__ import annotations

import html
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from loguru import logger
from starlette.concurrency import run_in_threadpool

from docshelf.config import DocshelfConfig
from docshelf.db.connection import Database
from docshelf.db.repository import IndexRepository
from docshelf.db.schema import initialize
from docshelf.derive import DerivationServices, build_services
from docshelf.errors import IngestError, SearchQueryError
from docshelf.ingest.archive import ArchiveInstaller
from docshelf.ingest.controller import COMMANDS, OVERWRITE, IngestionController
from docshelf.search import QueryEngine, hits_to_children
from docshelf.store import ArtifactStore

# Uploads larger than this spill from memory to a temporary file.
_SPOOL_MAX_BYTES = 8 * 1024 * 1024


@dataclass
class AppContext:
    """Process-wide collaborators, injected into every request."""

    cfg: DocshelfConfig
    database: Database
    store: ArtifactStore
    services: DerivationServices

    def controller(self, repo: IndexRepository) -> IngestionController:
        return IngestionController(
            self.store, repo, self.services, chunk_size=self.cfg.index.chunk_size
        )


def create_app(
    cfg: DocshelfConfig,
    *,
    services: DerivationServices | None = None,
    database: Database | None = None,
    store: ArtifactStore | None = None,
) -> FastAPI:
    """Build the FastAPI app. Collaborators default to what *cfg* describes."""
    ctx = AppContext(
        cfg=cfg,
        database=database or Database(cfg.server.db_path()),
        store=store or ArtifactStore(cfg.server.root),
        services=services or build_services(cfg),
    )
    with ctx.database as conn:
        initialize(conn)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("serving {} with database {}", ctx.store.root, ctx.database.db_path)
        yield
        logger.info("shut down")

    app = FastAPI(title="docshelf", lifespan=lifespan)
    app.state.docshelf = ctx

    @app.exception_handler(IngestError)
    async def ingest_error_handler(request: Request, exc: IngestError):
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(SearchQueryError)
    async def search_error_handler(request: Request, exc: SearchQueryError):
        logger.warning("ERR {}", exc)
        return PlainTextResponse(str(exc), status_code=400)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/search")
    def search(
        match: str = "",
        json: bool = False,
        limit: int | None = Query(default=None, ge=1),
    ):
        conn = ctx.database.connect()
        try:
            engine = QueryEngine.for_connection(
                conn,
                open_tag=ctx.cfg.index.highlight_open,
                close_tag=ctx.cfg.index.highlight_close,
                default_limit=ctx.cfg.index.search_limit,
            )
            hits = engine.search(match, limit=limit)
        finally:
            conn.close()

        if json:
            return JSONResponse(hits_to_children(hits))
        lines = ["<ul>"]
        for h in hits:
            href = html.escape(h.href)
            lines.append(
                f'<li><a href="{href}">{href} [part {h.part}]</a><br>{h.snippet}<br></li>'
            )
        lines.append("</ul>")
        return HTMLResponse("\n".join(lines) + "\n")

    @app.post("/{upload_path:path}")
    async def upload(request: Request, upload_path: str, install: bool = False):
        tokens = upload_path.split("/")
        command = tokens[0]
        if command not in COMMANDS:
            return Response(status_code=501)
        if len(tokens) < 2 or not tokens[-1]:
            return PlainTextResponse(
                f"path needs /[command]/[url] for post to {request.url.path}", status_code=400
            )
        parent_dir = "/" + "/".join([OVERWRITE, *tokens[1:-1]])
        name = tokens[-1]

        spool = tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_BYTES)
        try:
            async for block in request.stream():
                # Past _SPOOL_MAX_BYTES the spool is a disk file.
                await run_in_threadpool(spool.write, block)
            spool.seek(0)
            if install:
                logger.info("install tarball to {}", request.url.path)
            await run_in_threadpool(_ingest_upload, ctx, spool, command, parent_dir, name, install)
        finally:
            spool.close()
        return Response(status_code=200)

    return app


def _ingest_upload(
    ctx: AppContext, body, command: str, parent_dir: str, name: str, install: bool
) -> None:
    """Blocking part of an upload; runs in the thread pool with its own connection."""
    conn = ctx.database.connect()
    try:
        controller = ctx.controller(IndexRepository(conn))
        if install:
            ArchiveInstaller(controller).install(body, command, parent_dir, name)
        else:
            controller.ingest(body, command, parent_dir, name, parent_dir, name, cascade=True)
    finally:
        conn.close()
