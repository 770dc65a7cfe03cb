"""Header crumbs and the bottom hint menu.

// [LAW:single-enforcer] update_display() is the sole render entry for both widgets.
"""

from rich.text import Text
from textual.widgets import Static


def render_hints(hints: list[tuple[str, str]]) -> Text:
    text = Text()
    for i, (key, desc) in enumerate(hints):
        if i:
            text.append("  ")
        text.append(f"<{key}>", style="bold cyan")
        text.append(f" {desc}", style="dim")
    return text


def render_crumbs(crumbs: list[str]) -> Text:
    text = Text()
    for i, crumb in enumerate(crumbs):
        if i:
            text.append(" › ", style="dim")
        style = "bold reverse" if i == len(crumbs) - 1 else "bold"
        text.append(f" {crumb} ", style=style)
    return text


class HintsFooter(Static):
    ALLOW_SELECT = False

    DEFAULT_CSS = """
    HintsFooter {
        dock: bottom;
        height: 1;
        padding: 0 1;
    }
    """

    def update_display(self, hints: list[tuple[str, str]]) -> None:
        self.update(render_hints(hints))


class CrumbsBar(Static):
    ALLOW_SELECT = False

    DEFAULT_CSS = """
    CrumbsBar {
        width: auto;
        height: 1;
    }
    """

    def update_display(self, crumbs: list[str]) -> None:
        self.update(render_crumbs(crumbs))
