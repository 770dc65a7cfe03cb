"""Read-only detail overlay pushed above a resource view."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static


class DetailOverlay(VerticalScroll, can_focus=False):
    """Key/value header plus an optional body.

    extra_keys maps a key to a callback, so a message detail can offer
    reply or star without knowing about the dispatcher.
    """

    DEFAULT_CSS = """
    DetailOverlay {
        height: 1fr;
        border: round $accent;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        title: str,
        fields: list[tuple[str, str]],
        body: str = "",
        extra_keys: dict[str, tuple[str, Callable[[], None]]] | None = None,
    ):
        super().__init__()
        self.title = title
        self.fields = fields
        self.body = body
        self.extra_keys = extra_keys or {}

    def compose(self):
        yield Static(self.render_text())

    def on_mount(self) -> None:
        self.border_title = self.title

    def render_text(self) -> Text:
        text = Text()
        width = max((len(label) for label, _ in self.fields), default=0)
        for label, value in self.fields:
            text.append(f"{label:>{width}}: ", style="bold")
            text.append(f"{value}\n")
        if self.body:
            text.append("\n")
            text.append(self.body)
        return text

    def hints(self) -> list[tuple[str, str]]:
        return [(key, label) for key, (label, _) in self.extra_keys.items()] + [("esc", "back")]

    def handle_key(self, event) -> bool:
        key = event.key
        if key in ("j", "down"):
            self.scroll_down(animate=False)
            return True
        if key in ("k", "up"):
            self.scroll_up(animate=False)
            return True
        entry = self.extra_keys.get(key)
        if entry is None:
            return False
        entry[1]()
        return True
