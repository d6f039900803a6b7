from __future__ import annotations

from enum import Enum
from dataclasses import dataclass


COMMAND_MARKER = ":"
FINDER_MARKER = "?"
FUZZY_MARKER = "/"

MARKERS = (COMMAND_MARKER, FINDER_MARKER, FUZZY_MARKER)


class Mode(str, Enum):
    SHORTCUT = "shortcut"
    FUZZY = "fuzzy"
    COMMAND = "command"
    FINDER = "finder"


@dataclass(frozen=True)
class BufferClassification:
    mode: Mode
    query: str
    marker: str = ""


@dataclass(frozen=True)
class ModeClassifier:
    """Classify the typed buffer by its leading marker.

    Without interleave, unmarked input is a shortcut prefix and ``/`` switches
    to fuzzy name search. Interleave swaps the two: unmarked input is fuzzy
    and ``/`` asks for shortcuts.
    """

    interleave: bool = False

    def classify(self, buffer: str) -> BufferClassification:
        marker = buffer[:1]

        if marker == COMMAND_MARKER:
            return BufferClassification(Mode.COMMAND, buffer[1:], marker)

        if marker == FINDER_MARKER:
            return BufferClassification(Mode.FINDER, buffer[1:], marker)

        if marker == FUZZY_MARKER:
            mode = Mode.SHORTCUT if self.interleave else Mode.FUZZY
            return BufferClassification(mode, buffer[1:], marker)

        mode = Mode.FUZZY if self.interleave else Mode.SHORTCUT
        return BufferClassification(mode, buffer)

    def opening_mode(self) -> Mode:
        """Mode entered when an unmarked key opens the overlay."""
        return Mode.FUZZY if self.interleave else Mode.SHORTCUT
