from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .models import Bookmark


@dataclass(frozen=True)
class ScoredMatch:
    bookmark: Bookmark
    start: int
    length: int


class FuzzyMatcher:
    """Substring search over bookmark names."""

    def __init__(self, limit: int = 20):
        self.limit = limit

    def search(self, query: str, bookmarks: List[Bookmark], limit: int | None = None) -> List[ScoredMatch]:
        if not (query or "").strip():
            return []
        q = query.lower()

        cap = self.limit if limit is None else limit
        scored = []
        for order, bookmark in enumerate(bookmarks):
            offset = bookmark.name.lower().find(q)
            if offset < 0:
                continue
            scored.append((offset, len(bookmark.name), order, bookmark))

        # Earlier match first, then shorter name, then list order
        scored.sort(key=lambda x: (x[0], x[1], x[2]))
        return [ScoredMatch(bookmark=b, start=offset, length=len(q)) for offset, _, _, b in scored[:cap]]


def highlight_segments(name: str, query: str) -> List[Tuple[str, bool]]:
    """Split ``name`` into (text, highlighted) parts around the first match of ``query``."""
    q = query or ""
    if not q.strip():
        return [(name, False)]
    index = name.lower().find(q.lower())
    if index == -1:
        return [(name, False)]

    parts = []
    if index > 0:
        parts.append((name[:index], False))
    parts.append((name[index:index + len(q)], True))
    if index + len(q) < len(name):
        parts.append((name[index + len(q):], False))
    return parts
