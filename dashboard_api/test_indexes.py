import pytest

from launcher.finders import FinderIndex, build_url, encode_search_text
from launcher.fuzzy import FuzzyMatcher, highlight_segments
from launcher.models import Finder
from launcher.modes import Mode, ModeClassifier
from launcher.resolution import CandidateKind
from launcher.shortcuts import ShortcutIndex

from conftest import bm


class TestShortcutIndex:
    def test_lookup_is_case_insensitive_prefix(self):
        index = ShortcutIndex([bm("GitHub", "https://github.com", "GH"), bm("Gmail", "https://mail.google.com", "gm")])
        assert [b.name for b in index.lookup("g")] == ["GitHub", "Gmail"]
        assert [b.name for b in index.lookup("GM")] == ["Gmail"]

    def test_blank_shortcuts_are_skipped(self):
        index = ShortcutIndex([bm("A", "https://a", ""), bm("B", "https://b", "   "), bm("C", "https://c", "c")])
        assert len(index) == 1
        assert index.exact("") is None

    def test_duplicate_shortcut_binds_exact_to_later_entry(self):
        first, second = bm("First", "https://1", "x"), bm("Second", "https://2", "x")
        index = ShortcutIndex([first, second])
        assert index.exact("X") is second
        assert index.lookup("x") == [first, second]

    def test_has_longer_match(self):
        index = ShortcutIndex([bm("G", "https://g", "g"), bm("GI", "https://gi", "gi")])
        assert index.has_longer_match("g")
        assert not index.has_longer_match("gi")

    def test_sorted_lookup_orders_by_length_stably(self):
        index = ShortcutIndex([
            bm("Long", "https://l", "abc"),
            bm("One", "https://1", "ab"),
            bm("Two", "https://2", "ab"),
        ])
        assert [b.name for b in index.sorted_lookup("a")] == ["One", "Two", "Long"]

    def test_rebuild_replaces_entries(self):
        index = ShortcutIndex([bm("Old", "https://old", "o")])
        index.rebuild([bm("New", "https://new", "n")])
        assert index.exact("o") is None
        assert index.exact("n").name == "New"


class TestFuzzyMatcher:
    def test_blank_query_returns_nothing(self):
        assert FuzzyMatcher().search("   ", [bm("Anything", "https://a")]) == []

    def test_ranks_by_offset_then_length_then_order(self):
        books = [
            bm("My Git Notes", "https://3"),
            bm("GitLab", "https://2"),
            bm("GitHub", "https://1"),
            bm("Git", "https://0"),
        ]
        names = [m.bookmark.name for m in FuzzyMatcher().search("git", books)]
        assert names == ["Git", "GitLab", "GitHub", "My Git Notes"]

    def test_limit(self):
        books = [bm(f"Doc {i}", f"https://{i}") for i in range(30)]
        assert len(FuzzyMatcher(limit=20).search("doc", books)) == 20
        assert len(FuzzyMatcher().search("doc", books, limit=5)) == 5

    def test_match_span(self):
        match = FuzzyMatcher().search("hub", [bm("GitHub", "https://github.com")])[0]
        assert (match.start, match.length) == (3, 3)

    def test_highlight_segments(self):
        assert highlight_segments("GitHub", "hub") == [("Git", False), ("Hub", True)]
        assert highlight_segments("GitHub", "xyz") == [("GitHub", False)]


class TestFinders:
    def test_encode_matches_uri_component(self):
        assert encode_search_text("hello world") == "hello%20world"
        assert encode_search_text("a&b=c/d") == "a%26b%3Dc%2Fd"
        assert encode_search_text("it's(ok)!*") == "it's(ok)!*"

    def test_build_url_replaces_first_placeholder(self):
        finder = Finder(name="Web", searchUrl="https://example.com/?q=%s&again=%s", shortcut="w")
        assert build_url(finder, "Hello World") == "https://example.com/?q=hello%20world&again=%s"

    def test_build_url_appends_without_placeholder(self):
        finder = Finder(name="Wiki", searchUrl="https://wiki/search?q=", shortcut="wk")
        assert build_url(finder, "Python") == "https://wiki/search?q=python"

    def test_resolve_without_space_lists_completions(self):
        index = FinderIndex([
            Finder(name="Web", searchUrl="https://example.com/?q=%s", shortcut="w"),
            Finder(name="Wiki", searchUrl="https://wiki/?q=", shortcut="wk"),
        ])
        rows = index.resolve("W", navigate=lambda url: None)
        assert [r.shortcut_label for r in rows] == ["?W", "?WK"]
        assert all(r.kind == CandidateKind.FINDER_COMPLETION for r in rows)
        assert rows[1].completion == "?WK "

    def test_resolve_with_space_needs_exact_shortcut(self):
        navigated = []
        index = FinderIndex([Finder(name="Web", searchUrl="https://example.com/?q=%s", shortcut="w")])
        assert index.resolve("WE HELLO", navigate=navigated.append) == []

        rows = index.resolve("W HELLO WORLD", navigate=navigated.append)
        assert len(rows) == 1
        rows[0].action()
        assert navigated == ["https://example.com/?q=hello%20world"]

    def test_unique_completion(self):
        index = FinderIndex([
            Finder(name="Web", searchUrl="https://e/?q=%s", shortcut="w"),
            Finder(name="Wiki", searchUrl="https://wiki/?q=", shortcut="wk"),
            Finder(name="Youtube", searchUrl="https://yt/?q=", shortcut="yt"),
        ])
        assert index.unique_completion("y") == "?YT "
        assert index.unique_completion("w") is None  # exact
        assert index.unique_completion("q") is None


class TestModeClassifier:
    @pytest.mark.parametrize("buffer,mode,query", [
        (":THEME", Mode.COMMAND, "THEME"),
        ("?W HI", Mode.FINDER, "W HI"),
        ("/GIT", Mode.FUZZY, "GIT"),
        ("GH", Mode.SHORTCUT, "GH"),
    ])
    def test_classify(self, buffer, mode, query):
        c = ModeClassifier().classify(buffer)
        assert (c.mode, c.query) == (mode, query)

    def test_interleave_swaps_shortcut_and_fuzzy(self):
        classifier = ModeClassifier(interleave=True)
        assert classifier.classify("GIT").mode == Mode.FUZZY
        assert classifier.classify("/GH").mode == Mode.SHORTCUT
        assert classifier.opening_mode() == Mode.FUZZY
