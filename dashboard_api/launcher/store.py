from __future__ import annotations

import json
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from .logging_utils import setup_logger
from .models import (
    Bookmark, Category, ColorTheme, DashboardSettings, Finder, Page, PageWithBookmarks,
)

logger = setup_logger("store")

PAGE_FILE_RE = re.compile(r"^bookmarks-(\d+)\.json$")
DEFAULT_PAGE = Page(id=1, name="main")


def validate_bookmark_url(url: str) -> None:
    """Raise ValueError unless ``url`` is http(s) with a host or a site-relative path."""
    u = (url or "").strip()
    if not u:
        raise ValueError("URL is empty")
    if u.startswith("/") and not u.startswith("//"):
        return
    parsed = urlparse(u)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"unsupported scheme: {parsed.scheme or '(none)'}")
    if not parsed.netloc:
        raise ValueError("URL has no host")


class JsonDataStore:
    """
    JSON files under one data directory, one lock for all of them.

    Layout (same as the dashboard's data/ folder):
        bookmarks-<page>.json   {"page": {...}, "categories": [...], "bookmarks": [...]}
        pages.json              {"order": [1, 2, ...]}
        finders.json            [{"name", "searchUrl", "shortcut"}, ...]
        settings.json           dashboard settings (camelCase)
        colors.json             {"custom": {"<id>": {"name": ...}}, ...}

    Reads never raise: missing or unreadable files yield ``default``.
    Writes return False on failure.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.lock = threading.RLock()

    def path(self, name: str) -> Path:
        return self.data_dir / name

    def read_json(self, name: str, default: Any = None) -> Any:
        p = self.path(name)
        if not p.exists():
            return default
        try:
            return json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not read {p}: {e}")
            return default

    def write_json(self, name: str, data: Any) -> bool:
        p = self.path(name)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            tmp = p.with_suffix(p.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp.replace(p)
            return True
        except OSError as e:
            logger.error(f"❌ Could not write {p}: {e}")
            return False


class JsonSettingsStore:
    def __init__(self, data: JsonDataStore):
        self.data = data

    def load(self) -> DashboardSettings:
        raw = self.data.read_json("settings.json", default={})
        if not isinstance(raw, dict):
            raw = {}
        try:
            return DashboardSettings.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid settings.json, using defaults: {e}")
            return DashboardSettings()

    def save(self, settings: DashboardSettings) -> bool:
        with self.data.lock:
            return self.data.write_json("settings.json", settings.model_dump(by_alias=True))

    def set_field(self, key: str, value: Any) -> bool:
        """Persist one settings field by its JSON (camelCase) name."""
        with self.data.lock:
            raw = self.data.read_json("settings.json", default={})
            if not isinstance(raw, dict):
                raw = {}
            merged = {**self.load().model_dump(by_alias=True), **raw, key: value}
            try:
                updated = DashboardSettings.model_validate(merged)
            except ValidationError as e:
                logger.warning(f"⚠️ Rejected setting {key}={value!r}: {e}")
                return False
            ok = self.data.write_json("settings.json", updated.model_dump(by_alias=True))
        if ok:
            logger.info(f"💾 Setting saved: {key}={value!r}")
        return ok

    def custom_themes(self) -> Dict[str, str]:
        """Custom theme id -> display name (falls back to the id)."""
        raw = self.data.read_json("colors.json", default={})
        if not isinstance(raw, dict):
            return {}
        try:
            colors = ColorTheme.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid colors.json: {e}")
            return {}
        return {theme_id: (theme.name or theme_id) for theme_id, theme in colors.custom.items()}


class JsonFinderRepository:
    def __init__(self, data: JsonDataStore):
        self.data = data

    def list(self) -> List[Finder]:
        raw = self.data.read_json("finders.json", default=[])
        if not isinstance(raw, list):
            return []
        finders = []
        for item in raw:
            try:
                finders.append(Finder.model_validate(item))
            except ValidationError:
                continue  # skip malformed entries
        return finders


class JsonBookmarkRepository:
    """Bookmark pages stored as bookmarks-<page>.json files."""

    def __init__(self, data: JsonDataStore, settings_store: JsonSettingsStore):
        self.data = data
        self.settings_store = settings_store

    def current_page_id(self) -> int:
        return self.settings_store.load().current_page

    def set_current_page(self, page_id: int) -> bool:
        if page_id not in {p.id for p in self.list_pages()}:
            return False
        return self.settings_store.set_field("currentPage", page_id)

    def _page_ids(self) -> List[int]:
        ids = []
        if self.data.data_dir.exists():
            for p in self.data.data_dir.iterdir():
                m = PAGE_FILE_RE.match(p.name)
                if m:
                    ids.append(int(m.group(1)))
        return ids

    def _ordered_page_ids(self) -> List[int]:
        existing = set(self._page_ids())
        raw = self.data.read_json("pages.json", default={})
        order = raw.get("order", []) if isinstance(raw, dict) else []
        ordered = [pid for pid in order if isinstance(pid, int) and pid in existing]
        ordered += sorted(existing - set(ordered))
        return ordered

    def load_page(self, page_id: int) -> Optional[PageWithBookmarks]:
        raw = self.data.read_json(f"bookmarks-{page_id}.json")
        if raw is None:
            return None
        try:
            return PageWithBookmarks.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid bookmarks-{page_id}.json: {e}")
            return None

    def _save_page(self, page: PageWithBookmarks) -> bool:
        return self.data.write_json(f"bookmarks-{page.page.id}.json", page.model_dump(by_alias=True))

    def list_pages(self) -> List[Page]:
        pages = []
        for pid in self._ordered_page_ids():
            loaded = self.load_page(pid)
            if loaded is not None:
                pages.append(loaded.page)
        return pages or [DEFAULT_PAGE]

    def list_bookmarks(self, page_id: int) -> List[Bookmark]:
        loaded = self.load_page(page_id)
        return list(loaded.bookmarks) if loaded else []

    def list_current_page(self) -> List[Bookmark]:
        return self.list_bookmarks(self.current_page_id())

    def list_all(self) -> List[Bookmark]:
        out = []
        for pid in self._ordered_page_ids():
            out.extend(self.list_bookmarks(pid))
        return out

    def list_categories(self, page_id: int) -> List[Category]:
        loaded = self.load_page(page_id)
        return list(loaded.categories) if loaded else []

    def page_of(self, bookmark: Bookmark) -> Optional[int]:
        """First page (in display order) holding a bookmark with the same name and url."""
        for pid in self._ordered_page_ids():
            if any(b.same_entry(bookmark) for b in self.list_bookmarks(pid)):
                return pid
        return None

    def create(self, page_id: int, bookmark: Bookmark) -> bool:
        with self.data.lock:
            page = self.load_page(page_id)
            if page is None:
                if page_id != DEFAULT_PAGE.id:
                    logger.warning(f"⚠️ Cannot add bookmark to unknown page {page_id}")
                    return False
                page = PageWithBookmarks(page=DEFAULT_PAGE)
            page.bookmarks.append(bookmark)
            ok = self._save_page(page)
        if ok:
            logger.info(f"➕ Bookmark created on page {page_id}: {bookmark.name}")
        return ok

    def delete(self, page_id: int, bookmark: Bookmark) -> bool:
        """Remove the first bookmark on the page with the same name and url."""
        with self.data.lock:
            page = self.load_page(page_id)
            if page is None:
                logger.warning(f"⚠️ Cannot delete from unknown page {page_id}")
                return False

            kept, removed = [], False
            for b in page.bookmarks:
                if not removed and b.same_entry(bookmark):
                    removed = True
                    continue
                kept.append(b)

            if not removed:
                logger.warning(f"⚠️ Bookmark not found on page {page_id}: {bookmark.name}")
                return False

            page.bookmarks = kept
            ok = self._save_page(page)
        if ok:
            logger.info(f"🗑️ Bookmark deleted from page {page_id}: {bookmark.name}")
        return ok
