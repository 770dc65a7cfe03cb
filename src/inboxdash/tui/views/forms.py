"""Free-text form overlay (compose, create/edit event, contact, webhook).

Every key except ctrl+c and escape reaches handle_key, so letters that
are global bindings elsewhere (g, d, r, :) are typed into the field.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from rich.text import Text
from textual.widgets import Static


@dataclass
class FormField:
    name: str
    label: str
    value: str = ""
    multiline: bool = False


class FormOverlay(Static, can_focus=False):
    """Tab/shift+tab move between fields; ctrl+s submits."""

    DEFAULT_CSS = """
    FormOverlay {
        height: 1fr;
        border: round $accent;
        padding: 0 1;
    }
    """

    def __init__(self, title: str, fields: list[FormField],
                 on_submit: Callable[[dict[str, str]], None]):
        super().__init__("")
        self.title = title
        self.fields = fields
        self.on_submit = on_submit
        self.active = 0

    def on_mount(self) -> None:
        self.border_title = self.title
        self.refresh_display()

    def values(self) -> dict[str, str]:
        return {f.name: f.value for f in self.fields}

    def hints(self) -> list[tuple[str, str]]:
        return [("tab", "next field"), ("^S", "submit"), ("esc", "cancel")]

    def handle_key(self, event) -> bool:
        key = event.key
        field = self.fields[self.active]
        if key == "ctrl+s":
            self.on_submit(self.values())
            return True
        if key == "tab" or (key == "enter" and not field.multiline):
            self.active = (self.active + 1) % len(self.fields)
        elif key == "shift+tab":
            self.active = (self.active - 1) % len(self.fields)
        elif key == "enter":
            field.value += "\n"
        elif key == "backspace":
            field.value = field.value[:-1]
        elif key == "ctrl+u":
            field.value = ""
        elif event.character and len(event.character) == 1 and event.character.isprintable():
            field.value += event.character
        else:
            return False
        self.refresh_display()
        return True

    def refresh_display(self) -> None:
        if not self.is_mounted:
            return
        text = Text()
        width = max(len(f.label) for f in self.fields)
        for i, f in enumerate(self.fields):
            style = "bold reverse" if i == self.active else "bold"
            text.append(f"{f.label:>{width}}", style=style)
            text.append(": ")
            text.append(f.value)
            if i == self.active:
                text.append("▏", style="blink")
            text.append("\n")
        self.update(text)
