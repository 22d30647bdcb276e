"""Archive installer — ingest every regular file of a tar upload.

The tar stream is read sequentially (``tarfile`` stream mode), so the upload
never has to be seekable or fully buffered. The first path component of each
entry is treated as the archive's wrapper directory and dropped:

    POST /files/site/docs?install=true   with   release-1.2/a/b.txt
    → /files/site/docs/a/b.txt

Installation is not best-effort: the first failing entry aborts the install
and later entries are never read.
"""

from __future__ import annotations

import posixpath
import tarfile
from typing import BinaryIO

from loguru import logger

from docshelf.errors import ArchiveFormatError
from docshelf.ingest.controller import IngestionController
from docshelf.store import StoredArtifact


def split_member_name(member_name: str) -> tuple[list[str], str]:
    """Return (subdirectories below the wrapper dir, base name) for a tar entry.

    Raises:
        ArchiveFormatError: For absolute paths, ``..`` components or empty names.
    """
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        raise ArchiveFormatError(f"Unsafe absolute path detected in archive: {member_name}")
    parts = normalized.split("/")
    if ".." in parts:
        raise ArchiveFormatError(f"Unsafe path detected in archive: {member_name}")
    base = parts[-1]
    if not base or base == ".":
        raise ArchiveFormatError(f"Empty file name detected in archive: {member_name}")
    subdirs = [p for p in parts[1:-1] if p not in ("", ".")]
    return subdirs, base


class ArchiveInstaller:
    """Feed tar entries, in stream order, through an IngestionController."""

    def __init__(self, controller: IngestionController) -> None:
        self.controller = controller

    def install(
        self, tar_stream: BinaryIO, command: str, parent_dir: str, name: str
    ) -> list[StoredArtifact]:
        """Install the archive under *parent_dir*/*name*.

        Returns:
            The top-level artifacts written, in archive order.

        Raises:
            ArchiveFormatError: If the stream is not a readable tar archive.
            IngestError: The first ingestion failure; remaining entries are
                not attempted.
        """
        root = posixpath.join(parent_dir, name)
        installed: list[StoredArtifact] = []
        try:
            with tarfile.open(fileobj=tar_stream, mode="r|*") as archive:
                for member in archive:
                    if not member.isreg():
                        continue
                    subdirs, base = split_member_name(member.name)
                    dest_dir = posixpath.join(root, *subdirs)
                    logger.info("writing: {} into {}", base, dest_dir)
                    source = archive.extractfile(member)
                    if source is None:
                        raise ArchiveFormatError(f"Failed to extract member: {member.name}")
                    installed.append(
                        self.controller.ingest(
                            source, command, dest_dir, base, dest_dir, base, cascade=True
                        )
                    )
        except tarfile.TarError as exc:
            err = ArchiveFormatError(
                f"Could not read tar archive for {root}: {exc}", path=root
            )
            logger.error("ERR {}", err)
            raise err from exc
        except ArchiveFormatError as exc:
            if not exc.path:
                exc.path = root
            logger.error("ERR {}", exc)
            raise
        logger.info("installed {} files into {}", len(installed), root)
        return installed
