from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from .interpreter import BACKSPACE, NAVIGATION_KEYS, QueryInterpreter, fold_case


class KeyEvent(BaseModel):
    key: str
    ctrl: bool = False
    alt: bool = False
    meta: bool = False
    target: Literal["body", "input", "textarea"] = "body"


class KeyRouter:
    """Decides which page-level key events reach the interpreter.

    - modifier chords (ctrl/alt/meta) are left to the browser
    - keys typed into other form fields are ignored, except navigation keys
      while the overlay is open (its own input has focus then)
    """

    def __init__(self, interpreter: QueryInterpreter):
        self.interpreter = interpreter

    def route(self, event: KeyEvent) -> bool:
        if event.ctrl or event.alt or event.meta:
            return False
        if event.target != "body":
            if not (self.interpreter.is_open and event.key in NAVIGATION_KEYS):
                return False
        return self.interpreter.handle_key(event.key)

    def route_outside_activation(self) -> None:
        """Click or tap outside the overlay."""
        self.interpreter.close()

    def sync_text(self, value: str) -> bool:
        """
        Mirror a mobile text field into the buffer.

        Soft keyboards report the whole field value; a one-character growth is
        typed, a one-character shrink is a backspace. Anything else is ignored.
        """
        st = self.interpreter.state
        current = st.buffer if st else ""
        target = fold_case(value)
        if len(target) == len(current) + 1 and target.startswith(current):
            return self.interpreter.type_char(value[-1])
        if len(target) == len(current) - 1 and current.startswith(target):
            return self.interpreter.handle_key(BACKSPACE)
        return False
