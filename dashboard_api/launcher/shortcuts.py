from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .models import Bookmark


class ShortcutIndex:
    """Case-insensitive shortcut lookup over the active bookmark set.

    The index is rebuilt wholesale whenever the bookmark set changes; it never
    patches individual entries.
    """

    def __init__(self, bookmarks: Optional[List[Bookmark]] = None):
        self._entries: List[Tuple[str, Bookmark]] = []
        self._exact: Dict[str, Bookmark] = {}
        if bookmarks:
            self.rebuild(bookmarks)

    def rebuild(self, bookmarks: List[Bookmark]) -> None:
        """
        Clear and repopulate the index.

        Bookmarks whose shortcut is empty or whitespace are skipped. When two
        bookmarks share a shortcut both stay listable, but exact lookup binds
        to the later one.
        """
        self._entries = []
        self._exact = {}
        for bookmark in bookmarks:
            key = (bookmark.shortcut or "").strip().lower()
            if not key:
                continue
            self._entries.append((key, bookmark))
            self._exact[key] = bookmark

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, prefix: str) -> List[Bookmark]:
        """Every bookmark whose shortcut starts with ``prefix``, in index order."""
        p = (prefix or "").lower()
        return [bookmark for key, bookmark in self._entries if key.startswith(p)]

    def sorted_lookup(self, prefix: str) -> List[Bookmark]:
        # sorted() is stable, so equal lengths keep bookmark order
        return sorted(self.lookup(prefix), key=lambda b: len(b.shortcut.strip()))

    def exact(self, shortcut: str) -> Optional[Bookmark]:
        return self._exact.get((shortcut or "").lower())

    def has_longer_match(self, exact: str) -> bool:
        """True if another stored shortcut has ``exact`` as a strict prefix."""
        e = (exact or "").lower()
        return any(key != e and key.startswith(e) for key, _ in self._entries)
