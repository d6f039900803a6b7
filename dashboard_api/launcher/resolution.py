from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from .models import Bookmark


# An action returns False to keep the overlay open; anything else closes it.
Action = Callable[[], Optional[bool]]


class CandidateKind(str, Enum):
    """Kinds of rows the overlay can list."""
    BOOKMARK = "bookmark"
    CONFIG_LINK = "config-link"
    COLORS_LINK = "colors-link"
    COMMAND = "command"
    COMMAND_COMPLETION = "command-completion"
    FINDER = "finder"
    FINDER_COMPLETION = "finder-completion"
    FUZZY = "fuzzy"

    @property
    def is_completion(self) -> bool:
        return self in (CandidateKind.COMMAND_COMPLETION, CandidateKind.FINDER_COMPLETION)


@dataclass
class Candidate:
    display_name: str
    shortcut_label: str
    kind: CandidateKind
    action: Optional[Action] = None
    completion: Optional[str] = None
    url: Optional[str] = None
    bookmark: Optional[Bookmark] = None
    highlight: Optional[Tuple[int, int]] = None  # (start, length) inside display_name

    def to_dict(self) -> dict:
        data = {
            "display_name": self.display_name,
            "shortcut_label": self.shortcut_label,
            "kind": self.kind.value,
        }
        if self.completion is not None:
            data["completion"] = self.completion
        if self.url is not None:
            data["url"] = self.url
        if self.highlight is not None:
            data["highlight"] = list(self.highlight)
        return data


@dataclass(frozen=True)
class Resolved:
    """The buffer identifies exactly one target; fire it without listing."""
    candidate: Candidate


@dataclass(frozen=True)
class Candidates:
    """The buffer needs a list for the user to choose from."""
    items: List[Candidate] = field(default_factory=list)


Resolution = Union[Resolved, Candidates]
