"""Home view: per-resource counts with a cursor; Enter jumps to that resource."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.widgets import Static

from inboxdash.tui.actions import Action
from inboxdash.tui.resolver import clamp_row
from inboxdash.tui.status import FlashLevel


@dataclass(frozen=True)
class Tile:
    target: str
    label: str


TILES = [
    Tile("messages", "Unread messages"),
    Tile("events", "Upcoming events"),
    Tile("contacts", "Contacts"),
    Tile("webhooks", "Webhooks"),
    Tile("grants", "Accounts"),
]


class DashboardPanel(Static, can_focus=False):
    DEFAULT_CSS = """
    DashboardPanel {
        height: 1fr;
        padding: 1 2;
    }
    """

    def __init__(self, view: "DashboardView"):
        super().__init__("")
        self._owner = view

    def on_mount(self) -> None:
        self._owner.render_surface()


def _summarize(client, grant_id: str) -> dict[str, int]:
    return {
        "messages": sum(1 for m in client.list_messages(grant_id) if m.unread),
        "events": len(client.list_events(grant_id)),
        "contacts": len(client.list_contacts(grant_id)),
        "webhooks": len(client.list_webhooks()),
        "grants": len(client.list_grants()),
    }


class DashboardView:
    name = "dashboard"
    title = "Dashboard"

    def __init__(self, ctx):
        self.ctx = ctx
        self.counts: dict[str, int] = {}
        self.cursor = 0
        self.loading = False
        self._panel: DashboardPanel | None = None

    @property
    def surface(self) -> DashboardPanel:
        if self._panel is None:
            self._panel = DashboardPanel(self)
        return self._panel

    def hints(self):
        return [("j/k", "move"), ("enter", "open")]

    def load(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        cfg = self.ctx.config
        self.loading = True
        self.render_surface()
        self.ctx.scheduler.submit(
            self.name, lambda: _summarize(cfg.client, cfg.grant_id), self._apply, self._on_error
        )

    def _apply(self, counts) -> None:
        self.loading = False
        self.counts = dict(counts)
        self.render_surface()

    def _on_error(self, error: Exception) -> None:
        self.loading = False
        self.ctx.flash(FlashLevel.ERROR, f"Dashboard: {error}")
        self.render_surface()

    def filter(self, text: str) -> None:
        """The dashboard has nothing to filter."""

    def handle_key(self, event) -> bool:
        if event.key in ("j", "down"):
            return self.perform(Action.SELECT_ROW, self.cursor + 2)
        if event.key in ("k", "up"):
            return self.perform(Action.SELECT_ROW, self.cursor)
        if event.key == "enter":
            return self.perform(Action.OPEN)
        return False

    def perform(self, action: Action, arg: object = None) -> bool:
        if action is Action.GO_TOP:
            self.cursor = 0
        elif action is Action.GO_BOTTOM:
            self.cursor = len(TILES) - 1
        elif action is Action.SELECT_ROW:
            self.cursor = clamp_row(int(arg), len(TILES)) - 1
        elif action is Action.OPEN:
            self.ctx.navigator.navigate_to(TILES[self.cursor].target)
            return True
        else:
            return False
        self.render_surface()
        return True

    def render_surface(self) -> None:
        panel = self._panel
        if panel is None or not panel.is_mounted:
            return
        cfg = self.ctx.config
        text = Text()
        text.append(f"{cfg.email or 'no account'}", style="bold cyan")
        if cfg.provider:
            text.append(f"  ({cfg.provider})", style="dim")
        text.append("\n\n")
        for i, tile in enumerate(TILES):
            count = self.counts.get(tile.target)
            value = "…" if count is None else str(count)
            line = Text(f"  {tile.label:<18} {value:>5}")
            if i == self.cursor:
                line.stylize("reverse")
            text.append_text(line)
            text.append("\n")
        if self.loading:
            text.append("\nloading…", style="dim")
        panel.update(text)


def create_dashboard_view(ctx):
    return DashboardView(ctx)
