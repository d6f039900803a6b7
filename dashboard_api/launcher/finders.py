from __future__ import annotations

from typing import Callable, Dict, List, Optional
from urllib.parse import quote

from .models import Finder
from .modes import FINDER_MARKER
from .resolution import Candidate, CandidateKind

PLACEHOLDER = "%s"

# Characters encodeURIComponent leaves alone on top of quote()'s defaults
_URI_COMPONENT_SAFE = "!*'()"


def encode_search_text(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def build_url(finder: Finder, search_text: str) -> str:
    """Substitute lower-cased, URL-encoded search text into the finder template.

    A template without a placeholder gets the encoded text appended.
    """
    encoded = encode_search_text(search_text.lower())
    template = finder.search_url
    if PLACEHOLDER in template:
        return template.replace(PLACEHOLDER, encoded, 1)
    return template + encoded


class FinderIndex:
    """Case-insensitive finder shortcut lookup, rebuilt wholesale."""

    def __init__(self, finders: Optional[List[Finder]] = None):
        self._finders: List[Finder] = []
        self._by_shortcut: Dict[str, Finder] = {}
        if finders:
            self.rebuild(finders)

    def rebuild(self, finders: List[Finder]) -> None:
        self._finders = []
        self._by_shortcut = {}
        for finder in finders:
            key = (finder.shortcut or "").strip().lower()
            if not key:
                continue
            self._finders.append(finder)
            self._by_shortcut[key] = finder

    def lookup(self, prefix: str) -> List[Finder]:
        p = (prefix or "").lower()
        return [f for f in self._finders if f.shortcut.strip().lower().startswith(p)]

    def get(self, shortcut: str) -> Optional[Finder]:
        return self._by_shortcut.get((shortcut or "").lower())

    def resolve(self, query: str, navigate: Callable[[str], None]) -> List[Candidate]:
        """
        Resolve the text typed after the finder marker.

        - no space: finders whose shortcut starts with the token, as completions
        - space: the token must name a finder exactly; the rest is the search text
        """
        token, sep, search_text = query.partition(" ")

        if not sep:
            return [self._completion(f) for f in self.lookup(token)]

        finder = self.get(token)
        if finder is None:
            return []

        url = build_url(finder, search_text)
        return [Candidate(
            display_name=finder.name,
            shortcut_label=f"{FINDER_MARKER}{finder.shortcut.upper()}",
            kind=CandidateKind.FINDER,
            action=lambda: navigate(url),
            url=url,
        )]

    def unique_completion(self, token: str) -> Optional[str]:
        """Completion string when ``token`` is a non-exact prefix of exactly one finder."""
        if not token or self.get(token) is not None:
            return None
        matches = self.lookup(token)
        if len(matches) != 1:
            return None
        return self._completion(matches[0]).completion

    def _completion(self, finder: Finder) -> Candidate:
        label = f"{FINDER_MARKER}{finder.shortcut.strip().upper()}"
        return Candidate(
            display_name=finder.name,
            shortcut_label=label,
            kind=CandidateKind.FINDER_COMPLETION,
            completion=label + " ",
        )
