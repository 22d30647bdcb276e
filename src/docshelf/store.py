"""Artifact store — original uploads and derived artifacts on local disk.

Artifacts are addressed by a URL-style parent directory (``/files/docs``)
and a file name; the store maps that onto ``<root>/files/docs/<name>``.
Nothing is ever deleted here.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from docshelf.errors import StorageWriteError

_COPY_BUFFER = 64 * 1024


@dataclass
class StoredArtifact:
    """A written artifact.

    Attributes:
        parent_dir: URL-style directory, no trailing slash (``/files/docs``).
        name: File name.
        size: Size on disk after the write.
        existing_size: Size before the write (0 if the file was new). An
            append-mode write only added bytes past this offset.
        fs_path: Location on disk.
    """

    parent_dir: str
    name: str
    size: int
    existing_size: int
    fs_path: Path

    @property
    def url_path(self) -> str:
        return f"{self.parent_dir}/{self.name}"


class ArtifactStore:
    """Write-once-or-append byte store rooted at a local directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def resolve(self, parent_dir: str, name: str) -> Path:
        """Map *parent_dir*/*name* onto the filesystem.

        Raises:
            StorageWriteError: If the path would escape the store root.
        """
        rel = PurePosixPath(parent_dir.lstrip("/")) / name
        if any(part == ".." for part in rel.parts) or not name or "/" in name:
            raise StorageWriteError(
                f"Refusing unsafe artifact path {parent_dir}/{name}",
                path=f"{parent_dir}/{name}",
            )
        return self.root.joinpath(*rel.parts)

    def write(
        self, stream: BinaryIO, parent_dir: str, name: str, *, append: bool = False
    ) -> StoredArtifact:
        """Copy *stream* to *parent_dir*/*name*, creating directories as needed.

        Truncates an existing file unless *append* is set. Partial bytes
        from a failed copy stay on disk.

        Raises:
            StorageWriteError: On any filesystem failure.
        """
        url_path = f"{parent_dir}/{name}"
        target = self.resolve(parent_dir, name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageWriteError(
                f"Could not create path for {url_path}: {exc}", path=url_path
            ) from exc

        existing_size = target.stat().st_size if target.is_file() else 0

        written = 0
        try:
            with target.open("ab" if append else "wb") as fh:
                while True:
                    block = stream.read(_COPY_BUFFER)
                    if not block:
                        break
                    fh.write(block)
                    written += len(block)
        except OSError as exc:
            raise StorageWriteError(
                f"Could not write to file ({written} bytes written) {url_path}: {exc}",
                path=url_path,
            ) from exc

        return StoredArtifact(
            parent_dir=parent_dir,
            name=name,
            size=target.stat().st_size,
            existing_size=existing_size if append else 0,
            fs_path=target,
        )

    def open(self, artifact: StoredArtifact) -> BinaryIO:
        """Reopen a written artifact for reading.

        Raises:
            StorageWriteError: If the file can no longer be opened.
        """
        try:
            return artifact.fs_path.open("rb")
        except OSError as exc:
            raise StorageWriteError(
                f"Could not open file for indexing {artifact.url_path}: {exc}",
                path=artifact.url_path,
            ) from exc
