from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .commands import CommandRegistry, PendingConfirmation
from .finders import FinderIndex
from .fuzzy import FuzzyMatcher
from .handlers import default_registry
from .labels import Labels
from .logging_utils import setup_logger, log_dispatch, create_session_id
from .models import Bookmark, Category, DashboardSettings, Finder, Page
from .modes import MARKERS, Mode, ModeClassifier
from .resolution import Candidate, CandidateKind, Candidates, Resolution, Resolved
from .shortcuts import ShortcutIndex

logger = setup_logger("interpreter")

CONFIG_URL = "/config"
COLORS_URL = "/colors"

ENTER = "Enter"
ESCAPE = "Escape"
BACKSPACE = "Backspace"
ARROW_UP = "ArrowUp"
ARROW_DOWN = "ArrowDown"
NAVIGATION_KEYS = (ENTER, ESCAPE, ARROW_UP, ARROW_DOWN)


def fold_case(text: str) -> str:
    """Upper-case ASCII letters only; other characters are kept as typed."""
    return "".join(c.upper() if c.isascii() else c for c in text)


class BookmarkRepository(Protocol):
    def current_page_id(self) -> int: ...
    def list_current_page(self) -> List[Bookmark]: ...
    def list_all(self) -> List[Bookmark]: ...
    def list_pages(self) -> List[Page]: ...
    def list_categories(self, page_id: int) -> List[Category]: ...
    def page_of(self, bookmark: Bookmark) -> Optional[int]: ...
    def create(self, page_id: int, bookmark: Bookmark) -> bool: ...
    def delete(self, page_id: int, bookmark: Bookmark) -> bool: ...


class FinderRepository(Protocol):
    def list(self) -> List[Finder]: ...


class ActionSink(Protocol):
    def navigate(self, url: str, new_tab: bool) -> None: ...
    def set_setting(self, key: str, value) -> bool: ...
    def open_creation_form(self, context: dict) -> None: ...
    def close_overlay(self) -> None: ...


@dataclass
class QueryState:
    """Everything that lives while the overlay is open."""
    buffer: str = ""
    mode: Mode = Mode.SHORTCUT
    candidates: List[Candidate] = field(default_factory=list)
    selected_index: int = -1
    just_completed: bool = False
    pending: Optional[PendingConfirmation] = None
    session_id: Optional[str] = None


class QueryInterpreter:
    """Keystroke-driven launcher overlay.

    Closed when ``state`` is None. Every accepted keystroke mutates the
    buffer, classifies it by leading marker, and replaces the candidate list
    wholesale. The host forwards already-filtered events (see
    ``input_routing.KeyRouter``); this class never listens for input itself.

    Committing closes the overlay first, then runs the action synchronously.
    An action returning ``False`` reopens it with the same buffer and
    re-resolves; anything else leaves it closed.
    """

    def __init__(
        self,
        bookmarks: BookmarkRepository,
        finders: FinderRepository,
        sink: ActionSink,
        settings: Optional[DashboardSettings] = None,
        labels: Optional[Labels] = None,
        registry: Optional[CommandRegistry] = None,
        fuzzy_limit: int = 20,
    ):
        self.repository = bookmarks
        self.finder_repository = finders
        self.sink = sink
        self.settings = settings or DashboardSettings()
        self.labels = labels or Labels()
        self.registry = registry or default_registry()

        self.shortcuts = ShortcutIndex()
        self.finder_index = FinderIndex()
        self.matcher = FuzzyMatcher(limit=fuzzy_limit)

        self._current: List[Bookmark] = []
        self._all: List[Bookmark] = []
        self._searchable: List[Bookmark] = []
        self.state: Optional[QueryState] = None
        # State of a just-closed overlay while its committed action runs
        self._committing: Optional[QueryState] = None

        self.refresh()

    # ------------------------------------------------------------------
    # Data refresh

    def refresh(self, settings: Optional[DashboardSettings] = None) -> None:
        """Re-read both repositories and rebuild every index."""
        self.update_data(
            current=self.repository.list_current_page(),
            all_bookmarks=self.repository.list_all(),
            finders=self.finder_repository.list(),
            settings=settings,
        )

    def update_data(
        self,
        current: List[Bookmark],
        all_bookmarks: List[Bookmark],
        finders: List[Finder],
        settings: Optional[DashboardSettings] = None,
    ) -> None:
        """
        Swap in a new bookmark/finder set.

        Indexes are rebuilt wholesale. An open overlay is closed, which drops
        its candidates and any pending confirmation: both may refer to
        bookmarks that no longer exist.
        """
        if settings is not None:
            self.settings = settings
        self._current = list(current)
        self._all = list(all_bookmarks)
        self._searchable = self._all if self.settings.global_shortcuts else self._current
        self.shortcuts.rebuild(self._searchable)
        self.finder_index.rebuild(finders)
        logger.debug(
            f"🔄 Indexes rebuilt: {len(self.shortcuts)} shortcuts, "
            f"{len(self._searchable)} searchable bookmarks, {len(finders)} finders"
        )
        self._committing = None
        self.close()

    # ------------------------------------------------------------------
    # Command context

    @property
    def current_bookmarks(self) -> List[Bookmark]:
        return self._current

    @property
    def all_bookmarks(self) -> List[Bookmark]:
        return self._all

    @property
    def pending(self) -> Optional[PendingConfirmation]:
        return self.state.pending if self.state else None

    def request_confirmation(self, command: str, bookmark: Bookmark) -> None:
        st = self.state or self._committing
        if st is not None:
            st.pending = PendingConfirmation(command=command, bookmark=bookmark)

    def clear_confirmation(self) -> None:
        st = self.state or self._committing
        if st is not None:
            st.pending = None

    def delete_bookmark(self, bookmark: Bookmark) -> bool:
        page_id = self.repository.page_of(bookmark)
        if page_id is None:
            page_id = self.repository.current_page_id()
        ok = self.repository.delete(page_id, bookmark)
        if ok:
            self.refresh()
        return ok

    def set_setting(self, key: str, value) -> bool:
        return self.sink.set_setting(key, value)

    def open_creation_form(self) -> None:
        page_id = self.repository.current_page_id()
        self.sink.open_creation_form({
            "page_id": page_id,
            "pages": [p.model_dump() for p in self.repository.list_pages()],
            "categories": [c.model_dump() for c in self.repository.list_categories(page_id)],
        })

    # ------------------------------------------------------------------
    # Events

    @property
    def is_open(self) -> bool:
        return self.state is not None

    def open(self) -> None:
        """Open with an empty buffer (search button)."""
        if self.state is None:
            self.state = QueryState(
                mode=self._classifier().opening_mode(),
                session_id=create_session_id(),
            )

    def close(self) -> None:
        if self.state is None:
            return
        self.state = None
        self.sink.close_overlay()

    def handle_key(self, key: str) -> bool:
        """Apply one key; returns False when the key was not for us."""
        if key == ESCAPE:
            was_open = self.is_open
            self.close()
            return was_open
        if key == ENTER:
            return self.enter()
        if key == BACKSPACE:
            return self.backspace()
        if key == ARROW_DOWN:
            return self.move_selection(1)
        if key == ARROW_UP:
            return self.move_selection(-1)
        if len(key) == 1:
            return self.type_char(key)
        return False

    def accepts(self, ch: str) -> bool:
        if len(ch) != 1:
            return False
        if ch in MARKERS:
            return True

        if self.state is None:
            if self.settings.interleave_mode:
                return ch.isascii() and ch.isalnum()
            return ch.isascii() and ch.isalpha()

        if ch.isascii() and ch.isalnum():
            return True

        c = self._classifier().classify(self.state.buffer)
        if c.mode == Mode.FINDER and " " in c.query:
            return ch.isprintable()
        if ch == " ":
            return c.mode in (Mode.COMMAND, Mode.FINDER, Mode.FUZZY)
        if ch == "#":
            return c.mode == Mode.COMMAND
        return False

    def type_char(self, ch: str) -> bool:
        if not self.accepts(ch):
            return False
        ch = fold_case(ch)

        self.open()
        st = self.state
        st.just_completed = False

        if ch == " " and self._complete_on_space():
            return True

        st.buffer += ch
        resolution = self._resolve(st.buffer, fast_path=True)
        if isinstance(resolution, Resolved):
            self._commit(resolution.candidate, fast_path=True)
            return True

        self._show(resolution.items)
        return True

    def backspace(self) -> bool:
        st = self.state
        if st is None:
            return False
        st.just_completed = False
        if not st.buffer:
            return True

        st.buffer = st.buffer[:-1]
        if not st.buffer:
            if not self.settings.keep_search_open_when_empty:
                self.close()
                return True
            st.mode = self._classifier().opening_mode()
            self._show([])
            return True

        self._show(self._resolve(st.buffer).items)
        return True

    def move_selection(self, delta: int) -> bool:
        st = self.state
        if st is None:
            return False
        st.just_completed = False
        if not st.candidates:
            return True
        st.selected_index = (st.selected_index + delta) % len(st.candidates)
        return True

    def enter(self) -> bool:
        st = self.state
        if st is None:
            return False

        if st.just_completed:
            # Swallow the Enter belonging to the keypress that just completed
            st.just_completed = False
            return True

        if not st.candidates or st.selected_index < 0:
            return True

        candidate = st.candidates[st.selected_index]
        if candidate.kind.is_completion:
            self._complete(candidate.completion or st.buffer)
            return True

        self._commit(candidate)
        return True

    # ------------------------------------------------------------------
    # Resolution

    def preview(self, buffer: str) -> List[Candidate]:
        """Candidates for ``buffer`` without touching the live overlay."""
        return self._resolve(buffer, live=False).items

    def _classifier(self) -> ModeClassifier:
        return ModeClassifier(interleave=self.settings.interleave_mode)

    def _resolve(self, buffer: str, fast_path: bool = False, live: bool = True) -> Resolution:
        c = self._classifier().classify(buffer)
        if live and self.state is not None:
            self.state.mode = c.mode

        if c.mode == Mode.COMMAND:
            if live:
                self._drop_stale_confirmation(c.query)
            return Candidates(self.registry.resolve(c.query, self))

        if c.mode == Mode.FINDER:
            return Candidates(self.finder_index.resolve(c.query, self._navigate_finder))

        if c.mode == Mode.FUZZY:
            return Candidates(self._fuzzy_rows(c.query))

        return self._resolve_shortcut(c.query, fast_path)

    def _resolve_shortcut(self, query: str, fast_path: bool) -> Resolution:
        if not query:
            return Candidates([])

        if fast_path:
            exact = self.shortcuts.exact(query)
            if exact is not None and not self.shortcuts.has_longer_match(query):
                return Resolved(self._bookmark_row(exact))

        rows = [self._bookmark_row(b) for b in self.shortcuts.sorted_lookup(query)]
        q = query.lower()
        if "config".startswith(q):
            rows.append(self._link_row("config", self.labels.configuration, CONFIG_URL, CandidateKind.CONFIG_LINK))
        if "colors".startswith(q):
            rows.append(self._link_row("colors", self.labels.color_customization, COLORS_URL, CandidateKind.COLORS_LINK))
        rows.sort(key=lambda r: len(r.shortcut_label))

        if self.settings.enable_fuzzy_suggestions:
            listed = {r.url for r in rows}
            for row in self._fuzzy_rows(query):
                if row.url in listed:
                    continue
                if self.settings.fuzzy_suggestions_start_with and not row.display_name.lower().startswith(q):
                    continue
                rows.append(row)

        return Candidates(rows)

    def _fuzzy_rows(self, query: str) -> List[Candidate]:
        rows = []
        for match in self.matcher.search(query, self._searchable):
            b = match.bookmark
            rows.append(Candidate(
                display_name=b.name,
                shortcut_label="",
                kind=CandidateKind.FUZZY,
                action=self._opener(b),
                url=b.url,
                bookmark=b,
                highlight=(match.start, match.length),
            ))
        return rows

    def _bookmark_row(self, bookmark: Bookmark) -> Candidate:
        return Candidate(
            display_name=bookmark.name,
            shortcut_label=bookmark.shortcut.strip().upper(),
            kind=CandidateKind.BOOKMARK,
            action=self._opener(bookmark),
            url=bookmark.url,
            bookmark=bookmark,
        )

    def _link_row(self, shortcut: str, name: str, url: str, kind: CandidateKind) -> Candidate:
        return Candidate(
            display_name=name,
            shortcut_label=shortcut.upper(),
            kind=kind,
            action=lambda: self.sink.navigate(url, False),
            url=url,
        )

    def _opener(self, bookmark: Bookmark):
        return lambda: self.sink.navigate(bookmark.url, self.settings.open_in_new_tab)

    def _navigate_finder(self, url: str) -> None:
        self.sink.navigate(url, self.settings.open_in_new_tab)

    def _drop_stale_confirmation(self, query: str) -> None:
        st = self.state
        if st is None or st.pending is None:
            return
        if self.registry.dispatch_name(query) != st.pending.command:
            logger.debug(f"🧹 Dropping pending confirmation for '{st.pending.bookmark.name}'")
            st.pending = None

    # ------------------------------------------------------------------
    # Selection / dispatch

    def _show(self, candidates: List[Candidate]) -> None:
        st = self.state
        st.candidates = list(candidates)
        st.selected_index = 0 if st.candidates else -1

    def _complete(self, completion: str) -> None:
        st = self.state
        st.buffer = completion
        self._show(self._resolve(st.buffer).items)
        st.just_completed = True

    def _complete_on_space(self) -> bool:
        st = self.state
        c = self._classifier().classify(st.buffer)
        if " " in c.query:
            return False

        completion = None
        if c.mode == Mode.COMMAND:
            completion = self.registry.unique_completion(c.query)
        elif c.mode == Mode.FINDER:
            completion = self.finder_index.unique_completion(c.query)

        if completion is None:
            return False
        logger.debug(f"⌨️ Space completed '{st.buffer}' to '{completion}'")
        self._complete(completion)
        return True

    def _commit(self, candidate: Candidate, fast_path: bool = False) -> None:
        """
        Close the overlay, then run the candidate's action.

        The closed state is parked in ``_committing`` while the action runs so
        confirmation requests land in it. An action returning ``False`` reopens
        the overlay with that state unless a data refresh discarded it.
        """
        snapshot = self.state
        buffer, mode, session_id = snapshot.buffer, snapshot.mode.value, snapshot.session_id
        self.close()
        self._committing = snapshot
        start_time = time.time()

        try:
            result = candidate.action() if candidate.action else None
        except Exception as e:
            log_dispatch(
                logger, session_id, buffer, mode, candidate.kind.value,
                candidate.url or candidate.display_name, False,
                (time.time() - start_time) * 1000, fast_path=fast_path, error=str(e)
            )
            raise
        finally:
            parked, self._committing = self._committing, None

        kept_open = result is False and parked is not None
        if kept_open:
            self.state = parked
            self._show(self._resolve(parked.buffer).items)

        log_dispatch(
            logger, session_id, buffer, mode, candidate.kind.value,
            candidate.url or candidate.display_name, True,
            (time.time() - start_time) * 1000, fast_path=fast_path, kept_open=kept_open
        )

    # ------------------------------------------------------------------
    # View

    def view(self) -> dict:
        st = self.state
        if st is None:
            return {"open": False, "query": "", "mode": None, "rows": [], "selected_index": -1}

        rows = []
        for index, candidate in enumerate(st.candidates):
            row = candidate.to_dict()
            row["selected"] = index == st.selected_index
            rows.append(row)

        out = {
            "open": True,
            "query": st.buffer,
            "mode": st.mode.value,
            "rows": rows,
            "selected_index": st.selected_index,
            "session_id": st.session_id,
        }
        if not rows and st.buffer:
            out["placeholder"] = self.labels.no_matches
        if st.pending is not None:
            out["pending"] = {"command": st.pending.command, "bookmark": st.pending.bookmark.name}
        return out
