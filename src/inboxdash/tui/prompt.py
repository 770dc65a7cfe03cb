"""Command (:) and filter (/) prompt: line editing state plus its bar widget.

Enter commits the typed text; Escape commits "" which callers treat as
cancel. Either way the prompt closes and the dispatcher returns to NORMAL.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.text import Text
from textual.widgets import Static


class PromptKind(Enum):
    COMMAND = ":"
    FILTER = "/"


@dataclass
class PromptState:
    kind: PromptKind = PromptKind.COMMAND
    text: str = ""
    cursor_pos: int = 0

    def reset(self, kind: PromptKind) -> None:
        self.kind = kind
        self.text = ""
        self.cursor_pos = 0


def _word_start(text: str, pos: int) -> int:
    i = pos
    while i > 0 and text[i - 1] == " ":
        i -= 1
    while i > 0 and text[i - 1] != " ":
        i -= 1
    return i


def handle_prompt_key(state: PromptState, event) -> str | None:
    """Apply one key to the prompt. Returns the committed text, or None to keep editing."""
    key = event.key

    if key == "enter":
        return state.text.strip()
    if key == "escape":
        return ""

    if key == "backspace":
        if state.cursor_pos > 0:
            state.text = state.text[: state.cursor_pos - 1] + state.text[state.cursor_pos :]
            state.cursor_pos -= 1
        return None

    if key == "delete":
        if state.cursor_pos < len(state.text):
            state.text = state.text[: state.cursor_pos] + state.text[state.cursor_pos + 1 :]
        return None

    if key == "left":
        state.cursor_pos = max(0, state.cursor_pos - 1)
        return None
    if key == "right":
        state.cursor_pos = min(len(state.text), state.cursor_pos + 1)
        return None
    if key in ("home", "ctrl+a"):
        state.cursor_pos = 0
        return None
    if key in ("end", "ctrl+e"):
        state.cursor_pos = len(state.text)
        return None

    if key == "ctrl+u":
        state.text = state.text[state.cursor_pos :]
        state.cursor_pos = 0
        return None

    if key == "ctrl+w":
        start = _word_start(state.text, state.cursor_pos)
        state.text = state.text[:start] + state.text[state.cursor_pos :]
        state.cursor_pos = start
        return None

    if event.character and len(event.character) == 1 and event.character.isprintable():
        state.text = state.text[: state.cursor_pos] + event.character + state.text[state.cursor_pos :]
        state.cursor_pos += 1
    return None


class PromptBar(Static):
    """One-line prompt shown above the hint menu while a prompt is active."""

    DEFAULT_CSS = """
    PromptBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $boost;
        display: none;
    }
    """

    def show_state(self, state: PromptState) -> None:
        text = Text()
        text.append(state.kind.value, style="bold")
        before = state.text[: state.cursor_pos]
        at = state.text[state.cursor_pos : state.cursor_pos + 1] or " "
        after = state.text[state.cursor_pos + 1 :]
        text.append(before)
        text.append(at, style="reverse")
        text.append(after)
        self.update(text)
        self.display = True

    def hide(self) -> None:
        self.display = False
