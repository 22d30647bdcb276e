"""ImageMagick thumbnails — shells out to ``convert``.

Security / safety:
- shell=False always; the file path is passed as a single argv entry.
- Every call is bounded by a timeout; a hung ``convert`` fails the step.
- Output is always PNG on stdout (``png:-``).
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from docshelf.derive.base import Thumbnailer, ThumbnailVariant
from docshelf.errors import DerivationServiceError


class ImageMagickThumbnailer(Thumbnailer):
    """Render thumbnails *height* pixels high with ImageMagick.

    Images are flattened onto white (transparent PNG/GIF input). PDFs use
    page 0, videos use frame *video_frame*.
    """

    def __init__(
        self,
        command: str = "convert",
        height: int = 100,
        video_frame: int = 100,
        timeout: float = 60.0,
    ) -> None:
        self.command = command
        self.height = height
        self.video_frame = video_frame
        self.timeout = timeout

    def build_command(self, path: Path, variant: ThumbnailVariant) -> list[str]:
        size = f"x{self.height}"
        if variant is ThumbnailVariant.IMAGE:
            return [
                self.command,
                "-thumbnail", size,
                "-background", "white",
                "-alpha", "remove",
                str(path),
                "png:-",
            ]
        if variant is ThumbnailVariant.PDF:
            return [self.command, "-resize", size, f"{path}[0]", "png:-"]
        return [self.command, "-resize", size, f"{path}[{self.video_frame}]", "png:-"]

    def thumbnail(self, path: Path, variant: ThumbnailVariant) -> bytes:
        argv = self.build_command(path, variant)
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise DerivationServiceError(
                f"Thumbnail command timed out after {self.timeout:g}s: {argv}",
                path=str(path),
                stage="thumbnail",
            ) from exc
        except OSError as exc:
            raise DerivationServiceError(
                f"Unable to run thumbnail command: {exc}\n{argv}",
                path=str(path),
                stage="thumbnail",
            ) from exc

        if result.returncode != 0 or not result.stdout:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise DerivationServiceError(
                f"Unable to run thumbnail command: exit {result.returncode}: {stderr}\n{argv}",
                path=str(path),
                stage="thumbnail",
            )
        return result.stdout
