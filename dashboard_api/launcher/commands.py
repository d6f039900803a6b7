from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Protocol

from .labels import Labels
from .models import Bookmark
from .modes import COMMAND_MARKER
from .resolution import Action, Candidate, CandidateKind


@dataclass(frozen=True)
class PendingConfirmation:
    """A destructive command waiting for yes/no on one bookmark."""
    command: str
    bookmark: Bookmark


class CommandContext(Protocol):
    """What command handlers may read from, and ask of, the running interpreter."""

    labels: Labels

    @property
    def current_bookmarks(self) -> List[Bookmark]: ...

    @property
    def all_bookmarks(self) -> List[Bookmark]: ...

    @property
    def pending(self) -> Optional[PendingConfirmation]: ...

    def request_confirmation(self, command: str, bookmark: Bookmark) -> None: ...

    def clear_confirmation(self) -> None: ...

    def delete_bookmark(self, bookmark: Bookmark) -> bool: ...

    def set_setting(self, key: str, value) -> bool: ...

    def open_creation_form(self) -> None: ...


class CommandHandler:
    """Base class for ``:name`` commands.

    Subclasses set ``name`` and implement ``handle``; ``args`` are the
    whitespace-split tokens typed after the command name.
    """

    name: str = ""

    def handle(self, args: List[str], context: CommandContext) -> List[Candidate]:
        raise NotImplementedError

    def row(self, display_name: str, action: Action) -> Candidate:
        return Candidate(
            display_name=display_name,
            shortcut_label=f"{COMMAND_MARKER}{self.name}",
            kind=CandidateKind.COMMAND,
            action=action,
        )


def split_command(query: str) -> tuple[str, Optional[List[str]]]:
    """
    Split the text after ``:`` into a lower-cased name and argument tokens.

    Returns ``args=None`` while no space has been typed yet, so callers can
    tell ``:the`` (still completing) from ``:theme `` (arguments).
    """
    name, sep, rest = query.partition(" ")
    if not sep:
        return name.lower(), None
    return name.lower(), rest.split()


class CommandRegistry:
    """Static table of command handlers keyed by name, in registration order."""

    def __init__(self, handlers: Iterable[CommandHandler] = ()):
        self._handlers: Dict[str, CommandHandler] = {}
        for handler in handlers:
            self.register(handler)

    def register(self, handler: CommandHandler) -> None:
        if not handler.name:
            raise ValueError("Command handler needs a name")
        self._handlers[handler.name.lower()] = handler

    def names(self) -> List[str]:
        return list(self._handlers)

    def get(self, name: str) -> Optional[CommandHandler]:
        return self._handlers.get((name or "").lower())

    def dispatch_name(self, query: str) -> Optional[str]:
        """Name of the handler the query would run, or None while still completing."""
        name, _ = split_command(query)
        return name if name in self._handlers else None

    def completions(self, prefix: str) -> List[Candidate]:
        p = (prefix or "").lower()
        return [self._completion(name) for name in self._handlers if name.startswith(p)]

    def unique_completion(self, token: str) -> Optional[str]:
        """Completion string when ``token`` is a non-exact prefix of exactly one command."""
        t = (token or "").lower()
        if not t or t in self._handlers:
            return None
        matches = self.completions(t)
        if len(matches) != 1:
            return None
        return matches[0].completion

    def resolve(self, query: str, context: CommandContext) -> List[Candidate]:
        """
        Resolve the text typed after ``:``.

        - empty: every command as a completion
        - exact name: the handler's candidates
        - partial name: matching commands as completions
        - anything else: nothing
        """
        if query == "":
            return self.completions("")

        name, args = split_command(query)
        handler = self._handlers.get(name)
        if handler is not None:
            return handler.handle(args or [], context)

        if args is not None:
            return []
        return self.completions(name)

    def _completion(self, name: str) -> Candidate:
        label = f"{COMMAND_MARKER}{name.upper()}"
        return Candidate(
            display_name="",
            shortcut_label=label,
            kind=CandidateKind.COMMAND_COMPLETION,
            completion=label + " ",
        )
