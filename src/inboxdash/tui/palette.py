"""Autocomplete command palette over the command registry.

While open the palette owns every key. Enter commits to the same
on_command handler the plain prompt uses; Escape (or Backspace on empty
input) closes without committing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rich.text import Text
from textual.widgets import Static

from inboxdash.tui.commands import Command, CommandRegistry

MAX_SUGGESTIONS = 10


class PaletteOutcome(Enum):
    KEEP_OPEN = "keep_open"
    COMMIT = "commit"
    CANCEL = "cancel"


@dataclass
class PaletteState:
    text: str = ""
    suggestions: list[Command] = field(default_factory=list)
    selected: int = 0
    parent_cmd: str = ""


class CommandPalette:
    """Palette model: query text, ranked suggestions, highlighted row."""

    def __init__(self, registry: CommandRegistry, state: PaletteState | None = None):
        self.registry = registry
        self.state = state if state is not None else PaletteState()
        self.committed: str = ""
        self.context = ""

    def open(self, context: str = "") -> None:
        """Reset the query; commands scoped to context rank first."""
        self.context = context
        self.state.text = ""
        self.state.parent_cmd = ""
        self.committed = ""
        self._update_suggestions()

    def _update_suggestions(self) -> None:
        state = self.state
        text = state.text
        head, sep, rest = text.strip().partition(" ")
        if sep and self.registry.has_subcommands(head):
            state.parent_cmd = head
            suggestions = self.registry.search_subcommands(head, rest)
        elif text.endswith(" ") and self.registry.has_subcommands(text.strip()):
            state.parent_cmd = text.strip()
            suggestions = self.registry.subcommands(state.parent_cmd)
        else:
            state.parent_cmd = ""
            suggestions = self.registry.search(text, self.context)
        state.suggestions = suggestions[:MAX_SUGGESTIONS]
        state.selected = 0

    def set_text(self, text: str) -> None:
        self.state.text = text
        self._update_suggestions()

    def highlighted(self) -> Command | None:
        state = self.state
        if 0 <= state.selected < len(state.suggestions):
            return state.suggestions[state.selected]
        return None

    def move_selection(self, delta: int) -> None:
        state = self.state
        if not state.suggestions:
            return
        state.selected = (state.selected + delta) % len(state.suggestions)

    def autocomplete(self) -> None:
        cmd = self.highlighted()
        if cmd is None:
            return
        # Sub-command suggestions already carry the "parent child" full name.
        full = cmd.name
        if self.registry.has_subcommands(full):
            self.set_text(full + " ")
        else:
            self.set_text(full)

    def handle_key(self, event) -> PaletteOutcome:
        key = event.key
        state = self.state

        if key == "escape":
            return PaletteOutcome.CANCEL

        if key == "enter":
            typed = state.text.strip()
            if typed:
                self.committed = typed
            else:
                cmd = self.highlighted()
                if cmd is None:
                    return PaletteOutcome.CANCEL
                self.committed = cmd.name
            return PaletteOutcome.COMMIT

        if key == "tab":
            self.autocomplete()
        elif key in ("down", "ctrl+n"):
            self.move_selection(1)
        elif key in ("up", "ctrl+p"):
            self.move_selection(-1)
        elif key == "ctrl+u":
            self.set_text("")
        elif key == "backspace":
            if not state.text:
                return PaletteOutcome.CANCEL
            self.set_text(state.text[:-1])
        elif event.character and len(event.character) == 1 and event.character.isprintable():
            self.set_text(state.text + event.character)
        return PaletteOutcome.KEEP_OPEN


class CommandPaletteOverlay(Static):
    """Renders the palette: input line plus a highlighted suggestion list."""

    DEFAULT_CSS = """
    CommandPaletteOverlay {
        height: auto;
        max-height: 14;
        border: round $accent;
        padding: 0 1;
    }
    """

    def __init__(self, palette: CommandPalette):
        super().__init__("")
        self.palette = palette

    def on_mount(self) -> None:
        self.refresh_display()

    def hints(self) -> list[tuple[str, str]]:
        return [("enter", "run"), ("tab", "complete"), ("↑/↓", "select"), ("esc", "close")]

    def refresh_display(self) -> None:
        state = self.palette.state
        text = Text()
        text.append(":", style="bold")
        text.append(state.text or "Type command...", style="" if state.text else "dim")
        for i, cmd in enumerate(state.suggestions):
            text.append("\n")
            line = Text(f" {cmd.name:<20} {cmd.description}")
            if cmd.aliases:
                line.append(f"  (:{', :'.join(cmd.aliases)})", style="dim")
            if i == state.selected:
                line.stylize("reverse")
            text.append_text(line)
        self.update(text)
