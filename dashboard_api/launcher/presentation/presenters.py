"""
Presenters for the launcher overlay
Turn interpreter views into Markdown for HTML display
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..fuzzy import highlight_segments

MODE_TITLES = {
    "shortcut": "Shortcuts",
    "fuzzy": "Search",
    "command": "Commands",
    "finder": "Finders",
}


class BasePresenter:
    """Common formatting helpers"""

    def escape_markdown(self, text: str) -> str:
        if not text:
            return ""
        for char in ['\\', '*', '_', '`', '[', ']', '|', '#']:
            text = text.replace(char, f'\\{char}')
        return text


class OverlayPresenter(BasePresenter):
    """Convert an interpreter view (``QueryInterpreter.view()``) to Markdown"""

    def to_markdown(self, view: Dict[str, Any]) -> str:
        if not view.get("open"):
            return "## Launcher\n\n_Closed. Start typing a shortcut, or `:` `?` `/`._"

        query = view.get("query", "")
        title = MODE_TITLES.get(view.get("mode") or "", "Launcher")
        markdown = [f"## {title}", "", f"`{query}`" if query else "_(empty)_", ""]

        rows: List[Dict[str, Any]] = view.get("rows", [])
        if not rows:
            placeholder = view.get("placeholder")
            if placeholder:
                markdown.append(f"**{self.escape_markdown(placeholder)}**")
            return "\n".join(markdown)

        markdown.extend([
            "| | Shortcut | Name |",
            "|---|---|---|",
        ])
        for row in rows:
            marker = "▶" if row.get("selected") else ""
            shortcut = self.escape_markdown(row.get("shortcut_label", ""))
            markdown.append(f"| {marker} | {shortcut} | {self.format_name(row, query)} |")

        pending = view.get("pending")
        if pending:
            markdown.extend(["", f"> Remove **{self.escape_markdown(pending['bookmark'])}**?"])

        return "\n".join(markdown)

    def format_name(self, row: Dict[str, Any], query: str) -> str:
        name = row.get("display_name", "")
        if row.get("kind") != "fuzzy":
            return self.escape_markdown(name)

        # Fuzzy rows are matched against the text after the "/" marker
        needle = self._fuzzy_needle(row, query)
        if not needle:
            return self.escape_markdown(name)
        parts = []
        for text, highlighted in highlight_segments(name, needle):
            safe = self.escape_markdown(text)
            parts.append(f"**{safe}**" if highlighted and safe else safe)
        return "".join(parts)

    def _fuzzy_needle(self, row: Dict[str, Any], query: str) -> Optional[str]:
        span = row.get("highlight")
        if span:
            start, length = span
            return row.get("display_name", "")[start:start + length]
        return query.lstrip("/") or None


def create_presenter(content_type: str) -> BasePresenter:
    presenters = {
        'overlay': OverlayPresenter(),
    }
    if content_type not in presenters:
        raise ValueError(f"Unknown content type: {content_type}")
    return presenters[content_type]
