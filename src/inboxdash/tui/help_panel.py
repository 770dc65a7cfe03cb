"""Help overlay: every command grouped by category plus the global keys.

j/k move the highlight, "/" starts filtering, Enter runs the highlighted
command through the same on_command path the prompt uses.
"""

from __future__ import annotations

from rich.text import Text
from textual.containers import VerticalScroll
from textual.widgets import Static

from inboxdash.tui.commands import Command, CommandRegistry, match_score
from inboxdash.tui.input_modes import KEY_GROUPS


def _matches(cmd: Command, query: str) -> bool:
    query = query.lower()
    return (
        any(match_score(n, query) >= 0 for n in cmd.all_names())
        or query in cmd.description.lower()
    )


class HelpOverlay(VerticalScroll, can_focus=False):
    DEFAULT_CSS = """
    HelpOverlay {
        height: 1fr;
        border: round $accent;
        padding: 0 1;
    }
    """

    title = "Help"

    def __init__(self, registry: CommandRegistry, run_command):
        super().__init__()
        self.registry = registry
        self.run_command = run_command
        self.query_text = ""
        self.filtering = False
        self.selected = 0
        self._listing = Static("")

    def compose(self):
        yield self._listing

    def on_mount(self) -> None:
        self.border_title = self.title
        self.refresh_display()

    def commands(self) -> list[Command]:
        """Visible commands, in display order."""
        result = []
        for _cat, cmds in self.registry.by_category():
            result.extend(c for c in cmds if not self.query_text or _matches(c, self.query_text))
        return result

    def hints(self) -> list[tuple[str, str]]:
        if self.filtering:
            return [("enter", "done"), ("esc", "close")]
        return [("j/k", "move"), ("enter", "run"), ("/", "filter"), ("esc", "close")]

    def handle_key(self, event) -> bool:
        key = event.key
        if self.filtering:
            if key == "enter":
                self.filtering = False
            elif key == "backspace":
                self.query_text = self.query_text[:-1]
            elif event.character and len(event.character) == 1 and event.character.isprintable():
                self.query_text += event.character
            else:
                return False
            self.selected = 0
            self.refresh_display()
            return True

        visible = self.commands()
        if event.character == "/":
            self.filtering = True
        elif key in ("j", "down"):
            self.selected = min(self.selected + 1, max(len(visible) - 1, 0))
        elif key in ("k", "up"):
            self.selected = max(self.selected - 1, 0)
        elif key == "enter":
            if visible:
                self.run_command(visible[self.selected].name)
            return True
        else:
            return False
        self.refresh_display()
        return True

    def render_text(self) -> Text:
        text = Text()
        if self.filtering or self.query_text:
            text.append("/", style="bold")
            text.append(self.query_text)
            text.append("\n\n")

        index = 0
        for cat, cmds in self.registry.by_category():
            shown = [c for c in cmds if not self.query_text or _matches(c, self.query_text)]
            if not shown:
                continue
            text.append(f"{cat.value}\n", style="bold underline")
            for cmd in shown:
                line = Text(f"  :{cmd.name:<12} {cmd.description}")
                if cmd.aliases:
                    line.append(f"  ({cmd.display_aliases()})", style="dim")
                if cmd.shortcut:
                    line.append(f"  [{cmd.shortcut}]", style="cyan")
                if index == self.selected:
                    line.stylize("reverse")
                text.append_text(line)
                text.append("\n")
                index += 1
            text.append("\n")

        if not self.query_text:
            for group, keys in KEY_GROUPS:
                text.append(f"{group}\n", style="bold underline")
                for key, desc in keys:
                    text.append(f"  {key:<10}", style="bold cyan")
                    text.append(f" {desc}\n")
                text.append("\n")
        return text

    def refresh_display(self) -> None:
        if not self.is_mounted:
            return
        self._listing.update(self.render_text())


def create_help_overlay(dispatcher) -> HelpOverlay:
    """Help bound to a dispatcher: running a command first closes the help."""

    def _run(name: str) -> None:
        dispatcher.pop_detail()
        dispatcher.on_command(name)

    return HelpOverlay(dispatcher.resolver.registry, _run)
