"""docshelf ingest pipeline — controller, derivation plan, indexer, archive installer."""

from docshelf.ingest.archive import ArchiveInstaller
from docshelf.ingest.controller import APPEND, COMMANDS, OVERWRITE, IngestionController
from docshelf.ingest.indexer import TextIndexer, iter_chunks
from docshelf.ingest.plan import DerivationStep, plan_derivations

__all__ = [
    "APPEND",
    "COMMANDS",
    "OVERWRITE",
    "ArchiveInstaller",
    "DerivationStep",
    "IngestionController",
    "TextIndexer",
    "iter_chunks",
    "plan_derivations",
]
