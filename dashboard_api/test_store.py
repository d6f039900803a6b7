import json

import pytest

from launcher.labels import load_labels
from launcher.models import Bookmark
from launcher.store import (
    JsonBookmarkRepository, JsonDataStore, JsonFinderRepository, JsonSettingsStore,
    validate_bookmark_url,
)


@pytest.fixture
def store(data_dir):
    data = JsonDataStore(data_dir)
    settings_store = JsonSettingsStore(data)
    return {
        "data": data,
        "settings": settings_store,
        "bookmarks": JsonBookmarkRepository(data, settings_store),
        "finders": JsonFinderRepository(data),
    }


class TestBookmarkRepository:
    def test_pages_follow_pages_json_order(self, store, data_dir):
        (data_dir / "pages.json").write_text(json.dumps({"order": [2, 1]}), encoding="utf-8")
        assert [p.id for p in store["bookmarks"].list_pages()] == [2, 1]
        assert [b.name for b in store["bookmarks"].list_all()] == ["Hacker News", "GitHub", "Gmail"]

    def test_current_page_from_settings(self, store):
        repo = store["bookmarks"]
        assert repo.current_page_id() == 1
        assert [b.shortcut for b in repo.list_current_page()] == ["GH", "GM"]

    def test_set_current_page(self, store):
        repo = store["bookmarks"]
        assert repo.set_current_page(2)
        assert [b.name for b in repo.list_current_page()] == ["Hacker News"]
        assert not repo.set_current_page(9)

    def test_empty_directory_has_default_page(self, tmp_path):
        data = JsonDataStore(tmp_path / "missing")
        repo = JsonBookmarkRepository(data, JsonSettingsStore(data))
        pages = repo.list_pages()
        assert [(p.id, p.name) for p in pages] == [(1, "main")]
        assert repo.list_all() == []

    def test_create_on_default_page_in_empty_directory(self, tmp_path):
        data = JsonDataStore(tmp_path / "fresh")
        repo = JsonBookmarkRepository(data, JsonSettingsStore(data))
        assert repo.create(1, Bookmark(name="Docs", url="https://docs", shortcut="D"))
        saved = json.loads((tmp_path / "fresh" / "bookmarks-1.json").read_text(encoding="utf-8"))
        assert saved["page"] == {"id": 1, "name": "main"}
        assert saved["bookmarks"][0]["checkStatus"] is False

    def test_create_on_unknown_page_fails(self, store):
        assert not store["bookmarks"].create(7, Bookmark(name="X", url="https://x"))

    def test_delete_removes_first_match_only(self, store, data_dir):
        repo = store["bookmarks"]
        dup = Bookmark(name="GitHub", url="https://github.com", shortcut="OTHER")
        repo.create(1, dup)

        assert repo.delete(1, Bookmark(name="GitHub", url="https://github.com"))
        shortcuts = [b.shortcut for b in repo.list_bookmarks(1)]
        assert shortcuts == ["GM", "OTHER"]

    def test_delete_missing_returns_false(self, store):
        assert not store["bookmarks"].delete(1, Bookmark(name="Nope", url="https://nope"))
        assert not store["bookmarks"].delete(5, Bookmark(name="Nope", url="https://nope"))

    def test_page_of(self, store):
        repo = store["bookmarks"]
        assert repo.page_of(Bookmark(name="Hacker News", url="https://news.ycombinator.com")) == 2
        assert repo.page_of(Bookmark(name="Hacker News", url="https://elsewhere")) is None

    def test_corrupt_page_file_is_skipped(self, store, data_dir):
        (data_dir / "bookmarks-2.json").write_text("{not json", encoding="utf-8")
        assert [p.id for p in store["bookmarks"].list_pages()] == [1]


class TestSettingsStore:
    def test_defaults_and_unknown_fields_survive(self, store, data_dir):
        settings_store = store["settings"]
        assert settings_store.load().open_in_new_tab is True

        assert settings_store.set_field("fontSize", "xl")
        saved = json.loads((data_dir / "settings.json").read_text(encoding="utf-8"))
        assert saved["fontSize"] == "xl"
        assert saved["language"] == "en"
        assert settings_store.load().font_size == "xl"

    def test_invalid_value_is_rejected(self, store):
        assert not store["settings"].set_field("columnsPerRow", "many")
        assert store["settings"].load().columns_per_row == 3

    def test_custom_themes(self, store, data_dir):
        assert store["settings"].custom_themes() == {"ocean": "Ocean"}
        (data_dir / "colors.json").write_text(json.dumps({"custom": {"plain": {}}}), encoding="utf-8")
        assert store["settings"].custom_themes() == {"plain": "plain"}


class TestFinderRepository:
    def test_list(self, store):
        finders = store["finders"].list()
        assert [f.shortcut for f in finders] == ["W", "WK"]
        assert finders[0].search_url == "https://example.com/?q=%s"

    def test_malformed_entries_skipped(self, store, data_dir):
        (data_dir / "finders.json").write_text(json.dumps([{"name": "broken"}, {"name": "Ok", "searchUrl": "https://ok?q=", "shortcut": "o"}]), encoding="utf-8")
        assert [f.name for f in store["finders"].list()] == ["Ok"]


class TestUrlValidation:
    @pytest.mark.parametrize("url", ["https://example.com", "http://localhost:8080/x", "/config"])
    def test_valid(self, url):
        validate_bookmark_url(url)

    @pytest.mark.parametrize("url", ["", "javascript:alert(1)", "ftp://files", "https://", "//evil.com", "example.com"])
    def test_invalid(self, url):
        with pytest.raises(ValueError):
            validate_bookmark_url(url)


class TestLabels:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_labels(tmp_path / "nope.yml").yes == "Yes"
        assert load_labels(None).no == "No"

    def test_partial_override_merges_nested(self, tmp_path):
        path = tmp_path / "labels.yml"
        path.write_text("\"yes\": Ja\nfont_sizes:\n  xl: Riesig\nunknown: ignored\n", encoding="utf-8")
        labels = load_labels(path)
        assert labels.yes == "Ja"
        assert labels.no == "No"
        assert labels.font_sizes["xl"] == "Riesig"
        assert labels.font_sizes["m"] == "Medium"

    def test_broken_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "labels.yml"
        path.write_text("yes: [unclosed", encoding="utf-8")
        assert load_labels(path).yes == "Yes"
