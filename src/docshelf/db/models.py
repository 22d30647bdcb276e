"""Domain models for the docshelf database layer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class IndexRecord:
    cmd: str
    path: str
    name: str
    part: int
    original_path: str
    original_name: str
    content: str
    rowid: int | None = None  # set after insert; None for unsaved records


@dataclass
class SearchHit:
    """One matching chunk, linked back to the root file that produced it."""

    original_path: str
    original_name: str
    part: int
    snippet: str
    path: str = ""
    name: str = ""

    @property
    def href(self) -> str:
        return f"{self.original_path}{self.original_name}"


@dataclass
class IndexedFile:
    path: str
    name: str
    parts: int
