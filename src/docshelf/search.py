"""Full-text query engine: MATCH, highlight, group by original file.

Ranking is FTS5's own (bm25 via ``ORDER BY rank``). Snippets are the whole
matching chunk with every matched term wrapped in the configured open/close
markup. The chunk text itself is escaped for the output medium (HTML by
default); only the markers are emitted raw, so uploaded content cannot
inject markup into the results page.
"""

from __future__ import annotations

import html
import sqlite3
from typing import Any, Callable

from docshelf.db.models import SearchHit
from docshelf.db.repository import IndexRepository

# Control characters that never appear in escaped output.
_OPEN = "\x02"
_CLOSE = "\x03"

DEFAULT_OPEN = '<b style="background-color:yellow">'
DEFAULT_CLOSE = "</b>"


def html_escape(text: str) -> str:
    return html.escape(text, quote=False)


def render_snippet(
    raw: str,
    open_tag: str,
    close_tag: str,
    escape: Callable[[str], str] = html_escape,
) -> str:
    """Escape *raw* and swap the internal markers for *open_tag*/*close_tag*."""
    return escape(raw).replace(_OPEN, open_tag).replace(_CLOSE, close_tag)


def hits_to_children(hits: list[SearchHit]) -> dict[str, Any]:
    """JSON listing shape shared by ``GET /search?json=true`` and the CLI."""
    return {
        "children": [
            {
                "path": h.original_path,
                "name": h.original_name,
                "isDir": False,
                "context": h.snippet,
                "part": h.part,
            }
            for h in hits
        ]
    }


class QueryEngine:
    """Search the full-text index.

    Args:
        repo: Index repository bound to an open connection.
        open_tag: Markup inserted before each matched term.
        close_tag: Markup inserted after each matched term.
        default_limit: Maximum hits when the caller does not pass a limit;
            None returns every match.
        escape: Escapes chunk text for the output medium.
    """

    def __init__(
        self,
        repo: IndexRepository,
        open_tag: str = DEFAULT_OPEN,
        close_tag: str = DEFAULT_CLOSE,
        default_limit: int | None = None,
        escape: Callable[[str], str] = html_escape,
    ) -> None:
        self._repo = repo
        self.open_tag = open_tag
        self.close_tag = close_tag
        self.default_limit = default_limit
        self.escape = escape

    @classmethod
    def for_connection(cls, conn: sqlite3.Connection, **kwargs) -> QueryEngine:
        return cls(IndexRepository(conn), **kwargs)

    def search(self, match: str, limit: int | None = None) -> list[SearchHit]:
        """Return highlighted hits for *match*, grouped by original file.

        Raises:
            SearchQueryError: If the match expression is malformed.
        """
        if not match.strip():
            return []
        if limit is None:
            limit = self.default_limit
        hits = self._repo.search(match, _OPEN, _CLOSE, limit=limit)
        for hit in hits:
            hit.snippet = render_snippet(hit.snippet, self.open_tag, self.close_tag, self.escape)
        return [hit for group in self.group(hits).values() for hit in group]

    @staticmethod
    def group(hits: list[SearchHit]) -> dict[tuple[str, str], list[SearchHit]]:
        """Group *hits* by (original_path, original_name), keeping rank order.

        Files appear in the order of their best-ranked hit; hits within a
        file keep their relative rank order.
        """
        groups: dict[tuple[str, str], list[SearchHit]] = {}
        for hit in hits:
            groups.setdefault((hit.original_path, hit.original_name), []).append(hit)
        return groups
