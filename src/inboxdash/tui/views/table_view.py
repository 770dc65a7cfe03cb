"""ResourceTableView: the shared body of every list-shaped resource view.

Holds the fetched items, the filter and the cursor as plain Python
state; the DataTable surface is a projection of that state and is only
touched once it is mounted, so views work headless in tests.

// [LAW:single-enforcer] _apply() is the only writer of self.items, and it
//   only ever runs from RedrawQueue.drain() on the UI thread.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable

from textual.widgets import DataTable

from inboxdash.tui.actions import Action
from inboxdash.tui.resolver import clamp_row
from inboxdash.tui.status import FlashLevel

logger = logging.getLogger(__name__)

DEFAULT_PAGE_ROWS = 10


class ResourceTable(DataTable, can_focus=False):
    """Keys reach the table only through the dispatcher, never through focus.

    Columns and rows are filled on mount from the owning view.
    """

    DEFAULT_CSS = """
    ResourceTable {
        height: 1fr;
    }
    """

    def __init__(self, view: "ResourceTableView"):
        super().__init__(cursor_type="row", zebra_stripes=True)
        self._owner = view

    def on_mount(self) -> None:
        self.add_columns(*(col.label for col in self._owner.columns))
        self._owner._sync_table()


@dataclass(frozen=True)
class Column:
    label: str
    render: Callable[[Any], str]


def _matches(item, text: str, columns: list[Column]) -> bool:
    needle = text.lower()
    return any(needle in col.render(item).lower() for col in columns)


class ResourceTableView:
    """A named view over one list of remote resources.

    Subclasses supply ``columns``, ``fetch()`` (runs on a worker thread)
    and ``item_actions``: a map from Action to a handler called with the
    selected item and the action argument.
    """

    name = ""
    title = ""
    noun = "item"
    columns: list[Column] = []
    # key -> Action handled by this view (on top of j/k/enter)
    key_actions: dict[str, Action] = {}
    view_hints: list[tuple[str, str]] = []

    def __init__(self, ctx):
        self.ctx = ctx
        self.items: list = []
        self.visible: list = []
        self.cursor = 0
        self.filter_text = ""
        self.loading = False
        self._table: ResourceTable | None = None
        self._mutations = itertools.count(1)

    # ─── View protocol ─────────────────────────────────────────────────

    @property
    def surface(self) -> ResourceTable:
        if self._table is None:
            self._table = ResourceTable(self)
        return self._table

    def hints(self) -> list[tuple[str, str]]:
        return [("j/k", "move"), ("enter", "open")] + list(self.view_hints)

    def load(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        self.loading = True
        self.ctx.scheduler.submit(self.name, self.fetch, self._apply, self._on_fetch_error)

    def filter(self, text: str) -> None:
        self.filter_text = text
        self._rebuild()

    def handle_key(self, event) -> bool:
        key = event.key
        if key in ("j", "down"):
            self._move_to(self.cursor + 1)
            return True
        if key in ("k", "up"):
            self._move_to(self.cursor - 1)
            return True
        if key == "enter":
            return self.perform(Action.OPEN)
        if key == "escape" and self.filter_text:
            self.filter("")
            return True
        action = self.key_actions.get(key)
        if action is not None:
            self.perform(action)
            return True
        return False

    def perform(self, action: Action, arg: object = None) -> bool:
        if self._move(action, arg):
            return True
        handler = self.item_actions().get(action)
        if handler is None:
            return False
        item = self.selected()
        if item is None and action not in self.itemless_actions():
            self.ctx.flash(FlashLevel.WARN, f"No {self.noun} selected")
            return True
        handler(item, arg)
        return True

    # ─── Hooks for subclasses ──────────────────────────────────────────

    def fetch(self) -> list:
        raise NotImplementedError

    def item_actions(self) -> dict[Action, Callable[[Any, object], None]]:
        return {}

    def itemless_actions(self) -> frozenset[Action]:
        """Actions that run without a selected row (compose, create, ...)."""
        return frozenset()

    # ─── Selection ─────────────────────────────────────────────────────

    def selected(self):
        if 0 <= self.cursor < len(self.visible):
            return self.visible[self.cursor]
        return None

    def _page_rows(self) -> int:
        table = self._table
        if table is not None and table.is_mounted and table.size.height > 2:
            return table.size.height - 1
        return DEFAULT_PAGE_ROWS

    def _move(self, action: Action, arg: object) -> bool:
        page = self._page_rows()
        if action is Action.GO_TOP:
            self._move_to(0)
        elif action is Action.GO_BOTTOM:
            self._move_to(len(self.visible) - 1)
        elif action is Action.SELECT_ROW:
            self._move_to(clamp_row(int(arg), len(self.visible)) - 1)
        elif action is Action.HALF_PAGE_DOWN:
            self._move_to(self.cursor + page // 2)
        elif action is Action.HALF_PAGE_UP:
            self._move_to(self.cursor - page // 2)
        elif action is Action.PAGE_DOWN:
            self._move_to(self.cursor + page)
        elif action is Action.PAGE_UP:
            self._move_to(self.cursor - page)
        else:
            return False
        return True

    def _move_to(self, row: int) -> None:
        self.cursor = max(0, min(row, len(self.visible) - 1))
        table = self._table
        if table is not None and table.is_mounted and self.visible:
            table.move_cursor(row=self.cursor)

    # ─── Data ──────────────────────────────────────────────────────────

    def _apply(self, items) -> None:
        selected = self.selected()
        self.items = list(items)
        self.loading = False
        self._rebuild(keep_id=getattr(selected, "id", None))

    def _on_fetch_error(self, error: Exception) -> None:
        self.loading = False
        self.ctx.flash(FlashLevel.ERROR, f"{self.title}: {error}")

    def _rebuild(self, keep_id: str | None = None) -> None:
        if self.filter_text:
            self.visible = [i for i in self.items if _matches(i, self.filter_text, self.columns)]
        else:
            self.visible = list(self.items)
        if keep_id is not None:
            for row, item in enumerate(self.visible):
                if getattr(item, "id", None) == keep_id:
                    self.cursor = row
                    break
        self.cursor = max(0, min(self.cursor, len(self.visible) - 1))
        self._sync_table()

    def _sync_table(self) -> None:
        table = self._table
        if table is None or not table.is_mounted:
            return
        table.clear()
        for item in self.visible:
            table.add_row(*(col.render(item) for col in self.columns))
        if self.visible:
            table.move_cursor(row=self.cursor)

    # ─── Mutations ─────────────────────────────────────────────────────

    def mutate(self, label: str, call: Callable[[], object], done: str) -> None:
        """Run a mutation off-thread; flash the outcome and reload on success."""

        def _ok(_result):
            self.ctx.flash(FlashLevel.INFO, done)
            self.refresh()

        def _err(error: Exception):
            self.ctx.flash(FlashLevel.ERROR, f"{label} failed: {error}")

        # one key per call: overlapping mutations each report their own outcome
        key = f"{self.name}:{label}:{next(self._mutations)}"
        self.ctx.scheduler.submit(key, call, _ok, _err)
