from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .logging_utils import setup_logger
from .models import DashboardSettings

logger = setup_logger("sink")


@dataclass
class PresentationState:
    """Visual settings the page applies immediately after a command."""
    theme: str = "dark"
    font_size: str = "m"
    columns: int = 3
    show_background_dots: bool = True

    @classmethod
    def from_settings(cls, settings: DashboardSettings) -> "PresentationState":
        return cls(
            theme=settings.theme,
            font_size=settings.font_size,
            columns=settings.columns_per_row,
            show_background_dots=settings.show_background_dots,
        )

    def apply(self, key: str, value: Any) -> None:
        if key == "theme":
            self.theme = str(value)
        elif key == "fontSize":
            self.font_size = str(value)
        elif key == "columnsPerRow":
            self.columns = int(value)
        elif key == "showBackgroundDots":
            self.show_background_dots = bool(value)

    def body_classes(self) -> List[str]:
        classes = [f"font-size-{self.font_size}", f"columns-{self.columns}"]
        if self.theme in ("light", "dark"):
            classes.append(f"theme-{self.theme}")
        else:
            classes.append(f"custom-theme-{self.theme}")
        if not self.show_background_dots:
            classes.append("no-dots")
        return classes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "theme": self.theme,
            "font_size": self.font_size,
            "columns": self.columns,
            "show_background_dots": self.show_background_dots,
            "body_classes": self.body_classes(),
        }


@dataclass
class HostActionSink:
    """
    Records the side effects the interpreter asks for.

    The HTTP host has no browser to drive, so navigation and form requests
    are queued as effect dicts and returned to the client, which performs
    them. Setting changes are persisted right away.
    """
    settings_store: Any
    presentation: PresentationState = field(default_factory=PresentationState)
    effects: List[Dict[str, Any]] = field(default_factory=list)

    def navigate(self, url: str, new_tab: bool) -> None:
        logger.info(f"🔗 Navigate: {url} (new_tab={new_tab})")
        self.effects.append({"type": "navigate", "url": url, "new_tab": new_tab})

    def set_setting(self, key: str, value) -> bool:
        ok = self.settings_store.set_field(key, value)
        if ok:
            self.presentation.apply(key, value)
        self.effects.append({"type": "set_setting", "key": key, "value": value, "saved": ok})
        return ok

    def open_creation_form(self, context: dict) -> None:
        logger.info(f"📝 Creation form requested for page {context.get('page_id')}")
        self.effects.append({"type": "open_creation_form", **context})

    def close_overlay(self) -> None:
        self.effects.append({"type": "close_overlay"})

    def drain(self) -> List[Dict[str, Any]]:
        out, self.effects = self.effects, []
        return out
