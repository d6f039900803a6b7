from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Bookmark(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    url: str = ""
    shortcut: str = ""
    category: str = ""
    check_status: bool = Field(default=False, alias="checkStatus")

    def same_entry(self, other: "Bookmark") -> bool:
        # The file store identifies a bookmark by name and url only
        return self.name == other.name and self.url == other.url


class Finder(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    search_url: str = Field(alias="searchUrl")
    shortcut: str = ""


class Category(BaseModel):
    id: str
    name: str = ""


class Page(BaseModel):
    id: int
    name: str = ""


class PageWithBookmarks(BaseModel):
    page: Page
    categories: List[Category] = []
    bookmarks: List[Bookmark] = []


class CustomTheme(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None


class ColorTheme(BaseModel):
    model_config = ConfigDict(extra="allow")

    custom: Dict[str, CustomTheme] = {}


class DashboardSettings(BaseModel):
    """Subset of the dashboard's settings.json that the launcher reads or writes.

    Fields are stored camelCase on disk; anything else in the file is kept
    as-is when the settings are written back.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    current_page: int = Field(default=1, alias="currentPage")
    theme: str = "dark"
    open_in_new_tab: bool = Field(default=True, alias="openInNewTab")
    columns_per_row: int = Field(default=3, alias="columnsPerRow")
    font_size: str = Field(default="m", alias="fontSize")
    show_background_dots: bool = Field(default=True, alias="showBackgroundDots")
    global_shortcuts: bool = Field(default=True, alias="globalShortcuts")
    interleave_mode: bool = Field(default=False, alias="interleaveMode")
    enable_fuzzy_suggestions: bool = Field(default=False, alias="enableFuzzySuggestions")
    fuzzy_suggestions_start_with: bool = Field(default=False, alias="fuzzySuggestionsStartWith")
    keep_search_open_when_empty: bool = Field(default=False, alias="keepSearchOpenWhenEmpty")


class NewBookmarkRequest(BaseModel):
    page: int
    bookmark: Bookmark


class PageSwitchRequest(BaseModel):
    page: int
