from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from .commands import CommandContext, CommandHandler, CommandRegistry
from .models import Bookmark
from .resolution import Action, Candidate

BUILTIN_THEMES = ("light", "dark")
FONT_SIZES = ("xs", "s", "sm", "m", "lg", "l", "xl")
COLUMN_COUNTS = ("1", "2", "3", "4", "5", "6")


class SettingChoiceCommand(CommandHandler):
    """Pick one value of a dashboard setting from a fixed list.

    No arguments lists every value; otherwise values whose display name or
    raw id starts with the joined arguments are listed.
    """

    setting_key: str = ""

    def choices(self, context: CommandContext) -> List[Tuple[str, str]]:
        """(raw id, display name) pairs in display order."""
        raise NotImplementedError

    def convert(self, raw: str):
        return raw

    def handle(self, args: List[str], context: CommandContext) -> List[Candidate]:
        query = " ".join(args).lower()
        rows = []
        for raw, display in self.choices(context):
            if query and not (display.lower().startswith(query) or raw.lower().startswith(query)):
                continue
            rows.append(self.row(display, self._apply(context, raw)))
        return rows

    def _apply(self, context: CommandContext, raw: str) -> Action:
        value = self.convert(raw)

        def action() -> None:
            context.set_setting(self.setting_key, value)

        return action


class ThemeCommand(SettingChoiceCommand):
    name = "theme"
    setting_key = "theme"

    def __init__(self, custom_themes: Optional[Callable[[], Dict[str, str]]] = None):
        # id -> display name, read on every resolution so new themes show up
        self._custom_themes = custom_themes or (lambda: {})

    def choices(self, context: CommandContext) -> List[Tuple[str, str]]:
        labels = context.labels
        out = [("light", labels.light_theme), ("dark", labels.dark_theme)]
        seen = set(BUILTIN_THEMES)
        for theme_id, name in self._custom_themes().items():
            if theme_id in seen:
                continue
            seen.add(theme_id)
            out.append((theme_id, name or theme_id))
        return out


class FontSizeCommand(SettingChoiceCommand):
    name = "fontsize"
    setting_key = "fontSize"

    def choices(self, context: CommandContext) -> List[Tuple[str, str]]:
        names = context.labels.font_sizes
        return [(size, names.get(size, size.upper())) for size in FONT_SIZES]


class ColumnsCommand(SettingChoiceCommand):
    name = "columns"
    setting_key = "columnsPerRow"

    def choices(self, context: CommandContext) -> List[Tuple[str, str]]:
        names = context.labels.columns
        return [(count, names.get(count, f"{count} Columns")) for count in COLUMN_COUNTS]

    def convert(self, raw: str):
        return int(raw)


class RemoveCommand(CommandHandler):
    """Delete a bookmark after a yes/no confirmation.

    Stage 1 lists bookmarks from every page, or only the current page when the
    arguments contain ``#``. Choosing one parks it as the pending confirmation
    and keeps the overlay open; stage 2 then lists only Yes and No.
    """

    name = "remove"
    CURRENT_PAGE_MARKER = "#"

    def handle(self, args: List[str], context: CommandContext) -> List[Candidate]:
        pending = context.pending
        if pending is not None and pending.command == self.name:
            return self._confirmation_rows(pending.bookmark, context)

        query = " ".join(args).lower()
        current_page_only = self.CURRENT_PAGE_MARKER in query
        if current_page_only:
            pool = context.current_bookmarks
            query = query.replace(self.CURRENT_PAGE_MARKER, "").strip()
        else:
            pool = context.all_bookmarks

        if query:
            pool = [b for b in pool if query in b.name.lower()]

        return [self.row(b.name, self._select(context, b)) for b in pool]

    def _select(self, context: CommandContext, bookmark: Bookmark) -> Action:
        def action() -> bool:
            context.request_confirmation(self.name, bookmark)
            return False

        return action

    def _confirmation_rows(self, bookmark: Bookmark, context: CommandContext) -> List[Candidate]:
        def yes() -> None:
            context.clear_confirmation()
            context.delete_bookmark(bookmark)

        def no() -> bool:
            context.clear_confirmation()
            return False

        return [
            self.row(context.labels.yes, yes),
            self.row(context.labels.no, no),
        ]


class NewCommand(CommandHandler):
    """Hand off to the host's bookmark creation form."""

    name = "new"

    def handle(self, args: List[str], context: CommandContext) -> List[Candidate]:
        return [self.row(context.labels.create_new_bookmark, context.open_creation_form)]


def default_registry(custom_themes: Optional[Callable[[], Dict[str, str]]] = None) -> CommandRegistry:
    """Registry with the dashboard's built-in commands in display order."""
    return CommandRegistry([
        ThemeCommand(custom_themes),
        FontSizeCommand(),
        ColumnsCommand(),
        RemoveCommand(),
        NewCommand(),
    ])
