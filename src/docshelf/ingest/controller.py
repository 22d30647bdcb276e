"""Ingestion controller — the recursive write → derive → index pipeline.

One call to ``ingest()`` stores one artifact, then walks the derivation plan
for its type (``docshelf.ingest.plan``). Every derived artifact is fed back
into ``ingest()`` itself, so an extract gets indexed and a thumbnail gets
stored exactly like an upload. The chain for a single upload is strictly
sequential: a derived artifact is never requested before its source is
fully written.

Failure policy:
  - storage errors, extraction and thumbnail failures are fatal: the error
    is logged once where it is detected and unwinds through every enclosing
    ``ingest()`` call unchanged;
  - label failures (service or storing the labels file) are logged and
    swallowed;
  - per-chunk index failures are logged and skipped.
Artifacts written before a failure are left in place.
"""

from __future__ import annotations

import io
import sqlite3

from loguru import logger

from docshelf.classify import FileKind, classify
from docshelf.db.repository import IndexRepository
from docshelf.derive import DerivationServices
from docshelf.errors import DerivationServiceError, IngestError
from docshelf.ingest.indexer import DEFAULT_CHUNK_SIZE, IndexResult, TextIndexer
from docshelf.ingest.plan import DerivationStep, Service, plan_derivations, should_index
from docshelf.store import ArtifactStore, StoredArtifact

APPEND = "append"
OVERWRITE = "files"
COMMANDS = frozenset({OVERWRITE, APPEND})


class IngestionController:
    """Store uploads, derive secondary artifacts, and index text.

    Args:
        store: Artifact store that receives originals and derived files.
        repo: Full-text index repository (one per connection / request).
        services: Extraction, thumbnail and (optional) label services.
        chunk_size: Bytes per indexed chunk.
    """

    def __init__(
        self,
        store: ArtifactStore,
        repo: IndexRepository,
        services: DerivationServices,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.store = store
        self.repo = repo
        self.services = services
        self.indexer = TextIndexer(repo, chunk_size=chunk_size)

    def ingest(
        self,
        stream,
        command: str,
        parent_dir: str,
        name: str,
        original_parent_dir: str | None = None,
        original_name: str | None = None,
        cascade: bool = True,
    ) -> StoredArtifact:
        """Write *stream* to *parent_dir*/*name* and run its derivation chain.

        Args:
            stream: Binary stream with the artifact's bytes.
            command: ``append`` appends to an existing file; anything else
                truncates it.
            parent_dir: URL-style directory, no trailing slash.
            name: File name.
            original_parent_dir: Directory of the root upload this artifact
                derives from (defaults to *parent_dir*).
            original_name: Name of the root upload (defaults to *name*).
            cascade: Whether this artifact may trigger further derivation.

        Returns:
            The stored artifact.

        Raises:
            IngestError: The first fatal failure anywhere in the chain.
        """
        if original_parent_dir is None:
            original_parent_dir = parent_dir
        if original_name is None:
            original_name = name

        try:
            artifact = self.store.write(stream, parent_dir, name, append=command == APPEND)
        except IngestError as exc:
            logger.error("ERR {}", exc)
            raise
        logger.debug(
            "wrote {} ({} bytes, cmd={}, cascade={})", artifact.url_path, artifact.size, command, cascade
        )

        kind = classify(name)
        if not cascade or kind is FileKind.OPAQUE:
            return artifact

        steps = plan_derivations(kind, name, cascade, self.services.labels_enabled)
        for step in steps:
            self._run_step(step, artifact, command, original_parent_dir, original_name)

        if should_index(kind, cascade):
            self._index(artifact, command, original_parent_dir, original_name)

        return artifact

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def _run_step(
        self,
        step: DerivationStep,
        artifact: StoredArtifact,
        command: str,
        original_parent_dir: str,
        original_name: str,
    ) -> None:
        try:
            output = self._call_service(step, artifact)
        except IngestError as exc:
            if step.fatal:
                logger.error("ERR {}", exc)
                raise
            logger.warning("{} (continuing without {})", exc, step.suffix)
            return

        child = step.derived_name(artifact.name)
        # Thumbnails and labels are rendered from the whole file and replace
        # the previous version; only the extract follows the caller's command.
        child_command = command if step.service is Service.EXTRACT else OVERWRITE
        try:
            self.ingest(
                io.BytesIO(output),
                child_command,
                artifact.parent_dir,
                child,
                original_parent_dir,
                original_name,
                cascade=step.cascade,
            )
        except IngestError as exc:
            if step.fatal:
                raise
            logger.warning("Could not write {} for indexing {}: {}", child, artifact.url_path, exc)

    def _call_service(self, step: DerivationStep, artifact: StoredArtifact) -> bytes:
        """Invoke the service for *step*, normalising failures to DerivationServiceError."""
        url_path = artifact.url_path
        if step.service is Service.EXTRACT:
            with self.store.open(artifact) as fh:
                try:
                    return self.services.extractor.extract(fh, url_path)
                except DerivationServiceError as exc:
                    raise DerivationServiceError(
                        f"Could not extract file for indexing {url_path}: {exc}",
                        path=url_path,
                        stage="extract",
                    ) from exc

        if step.service is Service.THUMBNAIL:
            try:
                return self.services.thumbnailer.thumbnail(artifact.fs_path, step.variant)
            except DerivationServiceError as exc:
                raise DerivationServiceError(
                    f"Could not make thumbnail for {url_path}: {exc}",
                    path=url_path,
                    stage="thumbnail",
                ) from exc

        if self.services.labeler is None:
            raise DerivationServiceError(
                f"Label service disabled for {url_path}", path=url_path, stage="labels"
            )
        try:
            return self.services.labeler.labels(artifact.fs_path)
        except DerivationServiceError as exc:
            raise DerivationServiceError(
                f"Could not extract labels for {url_path}: {exc}",
                path=url_path,
                stage="labels",
            ) from exc

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def _index(
        self,
        artifact: StoredArtifact,
        command: str,
        original_parent_dir: str,
        original_name: str,
    ) -> IndexResult:
        """Index a text artifact; only bytes added by an append are read."""
        path = f"{artifact.parent_dir}/"
        appending = command == APPEND and artifact.existing_size > 0

        try:
            if appending:
                first_part = self.repo.next_part(path, artifact.name)
            else:
                # Overwrite: rows from the previous contents are stale.
                self.repo.delete_records(path, artifact.name)
                first_part = 0
        except sqlite3.Error as exc:
            logger.warning("failed indexing {}: {}", artifact.url_path, exc)
            return IndexResult(first_part=0)

        try:
            fh = self.store.open(artifact)
        except IngestError as exc:
            logger.error("ERR {}", exc)
            raise
        with fh:
            if appending:
                fh.seek(artifact.existing_size)
            result = self.indexer.index(
                fh,
                cmd=command,
                path=path,
                name=artifact.name,
                original_path=f"{original_parent_dir}/",
                original_name=original_name,
                first_part=first_part,
            )
        logger.debug(
            "indexed {} parts {}..{} ({} failed)",
            artifact.url_path,
            result.first_part,
            result.next_part - 1,
            len(result.failed),
        )
        return result
