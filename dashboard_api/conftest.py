import json
from pathlib import Path

import pytest

from launcher.interpreter import QueryInterpreter
from launcher.models import Bookmark, Category, DashboardSettings, Finder, Page


class FakeBookmarkRepository:
    def __init__(self, pages=None, current_page=1):
        # page id -> list of bookmarks
        self.pages = pages if pages is not None else {1: []}
        self.current = current_page
        self.deleted = []
        self.created = []

    def current_page_id(self):
        return self.current

    def list_current_page(self):
        return list(self.pages.get(self.current, []))

    def list_all(self):
        out = []
        for page_id in sorted(self.pages):
            out.extend(self.pages[page_id])
        return out

    def list_pages(self):
        return [Page(id=pid, name=f"page {pid}") for pid in sorted(self.pages)]

    def list_categories(self, page_id):
        return [Category(id="default", name="Default")]

    def page_of(self, bookmark):
        for page_id in sorted(self.pages):
            if any(b.same_entry(bookmark) for b in self.pages[page_id]):
                return page_id
        return None

    def create(self, page_id, bookmark):
        self.created.append((page_id, bookmark))
        self.pages.setdefault(page_id, []).append(bookmark)
        return True

    def delete(self, page_id, bookmark):
        self.deleted.append((page_id, bookmark))
        for i, b in enumerate(self.pages.get(page_id, [])):
            if b.same_entry(bookmark):
                del self.pages[page_id][i]
                return True
        return False


class FakeFinderRepository:
    def __init__(self, finders=None):
        self.finders = finders or []

    def list(self):
        return list(self.finders)


class RecordingSink:
    def __init__(self):
        self.navigations = []
        self.settings = []
        self.forms = []
        self.closes = 0

    def navigate(self, url, new_tab):
        self.navigations.append((url, new_tab))

    def set_setting(self, key, value):
        self.settings.append((key, value))
        return True

    def open_creation_form(self, context):
        self.forms.append(context)

    def close_overlay(self):
        self.closes += 1


def bm(name, url, shortcut="", category="default"):
    return Bookmark(name=name, url=url, shortcut=shortcut, category=category)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_interpreter(sink):
    """Build an interpreter over in-memory repositories."""

    def _make(bookmarks=None, finders=None, other_pages=None, labels=None, registry=None, **settings):
        pages = {1: list(bookmarks or [])}
        pages.update(other_pages or {})
        repo = FakeBookmarkRepository(pages)
        interp = QueryInterpreter(
            repo,
            FakeFinderRepository(finders),
            sink,
            settings=DashboardSettings(**settings),
            labels=labels,
            registry=registry,
        )
        return interp

    return _make


def type_text(interp, text):
    for ch in text:
        interp.handle_key(ch)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A dashboard data directory with two pages, finders and a custom theme."""
    d = tmp_path / "data"
    d.mkdir()

    def write(name, data):
        (d / name).write_text(json.dumps(data), encoding="utf-8")

    write("bookmarks-1.json", {
        "page": {"id": 1, "name": "main"},
        "categories": [{"id": "dev", "name": "Development"}],
        "bookmarks": [
            {"name": "GitHub", "url": "https://github.com", "shortcut": "GH", "category": "dev"},
            {"name": "Gmail", "url": "https://mail.google.com", "shortcut": "GM", "category": "dev"},
        ],
    })
    write("bookmarks-2.json", {
        "page": {"id": 2, "name": "news"},
        "categories": [{"id": "news", "name": "News"}],
        "bookmarks": [
            {"name": "Hacker News", "url": "https://news.ycombinator.com", "shortcut": "HN", "category": "news"},
        ],
    })
    write("pages.json", {"order": [1, 2]})
    write("finders.json", [
        {"name": "Web", "searchUrl": "https://example.com/?q=%s", "shortcut": "W"},
        {"name": "Wikipedia", "searchUrl": "https://en.wikipedia.org/wiki/Special:Search?search=", "shortcut": "WK"},
    ])
    write("settings.json", {"currentPage": 1, "theme": "dark", "language": "en"})
    write("colors.json", {"custom": {"ocean": {"name": "Ocean", "bg": "#012"}}})
    return d
