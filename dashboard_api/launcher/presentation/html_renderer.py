"""
HTML Renderer for the launcher overlay
Converts overlay Markdown to a styled page the dashboard can embed
"""

from __future__ import annotations

import html
from typing import Iterable, Optional

import markdown

from ..config import settings

FONT_SIZE_SCALE = {
    "xs": "0.75",
    "s": "0.85",
    "sm": "0.92",
    "m": "1",
    "lg": "1.08",
    "l": "1.15",
    "xl": "1.3",
}


class HtmlRenderer:
    """HTML renderer with light/dark themes and mobile optimization"""

    def __init__(
        self,
        theme: Optional[str] = None,
        mobile_optimized: Optional[bool] = None,
        font_size: Optional[str] = None,
        max_width: Optional[str] = None
    ):
        self.theme = theme or settings.css_theme
        self.mobile_optimized = mobile_optimized if mobile_optimized is not None else settings.mobile_optimized
        self.font_size = font_size or settings.html_font_size
        self.max_width = max_width or settings.html_max_width

        self.md = markdown.Markdown(extensions=['tables', 'nl2br'])

    def render(self, markdown_text: str, title: str = "Launcher",
               body_classes: Iterable[str] = (), metadata: Optional[dict] = None) -> str:
        self.md.reset()
        content = self.md.convert(markdown_text)
        return self._build_html_document(content, self._get_complete_css(), title, list(body_classes), metadata)

    def _build_html_document(self, content: str, css: str, title: str,
                             body_classes: list, metadata: Optional[dict] = None) -> str:
        metadata_elements = ""
        if metadata:
            for key, value in metadata.items():
                metadata_elements += (
                    f'    <meta name="launcher-{html.escape(str(key))}" '
                    f'content="{html.escape(str(value))}">\n'
                )

        classes = html.escape(" ".join(body_classes))
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
{metadata_elements}    <style>
{css}
    </style>
</head>
<body class="{classes}">
    <div class="search-overlay">
        {content}
    </div>
</body>
</html>"""

    def _get_complete_css(self) -> str:
        css_parts = [
            self._get_css_variables(),
            self._get_base_css(),
            self._get_font_size_css(),
            self._get_theme_css(),
        ]
        if self.mobile_optimized:
            css_parts.append(self._get_mobile_css())
        return "\n".join(css_parts)

    def _get_css_variables(self) -> str:
        return f"""
:root {{
    --font-size: {self.font_size};
    --font-scale: 1;
    --max-width: {self.max_width};
    --radius: 8px;
    --spacing: 12px;
}}
"""

    def _get_base_css(self) -> str:
        return """
body {
    margin: 0;
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
    font-size: calc(var(--font-size) * var(--font-scale));
    background-color: var(--bg-color);
    color: var(--text-color);
}

.search-overlay {
    max-width: var(--max-width);
    margin: 10vh auto 0;
    padding: var(--spacing);
    border: 1px solid var(--border-color);
    border-radius: var(--radius);
    background-color: var(--panel-bg);
}

.search-overlay h2 {
    margin: 0 0 var(--spacing);
    font-size: 1em;
    text-transform: uppercase;
    letter-spacing: 0.08em;
    color: var(--muted-color);
}

.search-overlay code {
    font-family: 'SF Mono', Monaco, Consolas, monospace;
    font-size: 1.2em;
}

table {
    border-collapse: collapse;
    width: 100%;
}

th {
    display: none;
}

td {
    padding: 6px 10px;
    border-bottom: 1px solid var(--border-color);
}

td:nth-child(2) {
    font-family: 'SF Mono', Monaco, Consolas, monospace;
    color: var(--accent-color);
    white-space: nowrap;
}

td strong {
    color: var(--accent-color);
}

blockquote {
    margin: var(--spacing) 0 0;
    padding-left: var(--spacing);
    border-left: 3px solid var(--accent-color);
}
"""

    def _get_font_size_css(self) -> str:
        return "\n".join(
            f"body.font-size-{size} {{ --font-scale: {scale}; }}"
            for size, scale in FONT_SIZE_SCALE.items()
        )

    def _get_theme_css(self) -> str:
        themes = {
            "light": self._get_light_theme(),
            "dark": self._get_dark_theme(),
        }
        return themes.get(self.theme, themes["dark"])

    def _get_light_theme(self) -> str:
        return """
:root, body.theme-light {
    --bg-color: #f6f8fa;
    --panel-bg: #ffffff;
    --text-color: #24292f;
    --muted-color: #57606a;
    --accent-color: #0969da;
    --border-color: #d0d7de;
}
"""

    def _get_dark_theme(self) -> str:
        return """
:root, body.theme-dark {
    --bg-color: #0d1117;
    --panel-bg: #161b22;
    --text-color: #e6edf3;
    --muted-color: #8b949e;
    --accent-color: #58a6ff;
    --border-color: #30363d;
}
"""

    def _get_mobile_css(self) -> str:
        return """
@media screen and (max-width: 768px) {
    .search-overlay {
        margin: 0;
        max-width: 100%;
        border-radius: 0;
        border-left: none;
        border-right: none;
    }

    /* Touch-friendly rows */
    td {
        padding: 12px 8px;
    }
}

@supports (-webkit-touch-callout: none) {
    body {
        -webkit-text-size-adjust: 100%;
    }

    /* Prevent zoom on input focus */
    input {
        font-size: 16px;
    }
}
"""
