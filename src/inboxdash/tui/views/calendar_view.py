"""Week grid over the active grant's events.

The selected day moves with h/l (day), j/k (week) and H/L (month); the
grid always shows the Monday-to-Sunday week that contains it.
"""

from __future__ import annotations

import calendar
import itertools
from datetime import date, datetime, time, timedelta, timezone

from rich.table import Table
from rich.text import Text
from textual.widgets import Static

from inboxdash.tui.actions import Action
from inboxdash.tui.resolver import clamp_row
from inboxdash.tui.status import FlashLevel
from inboxdash.tui.views.detail import DetailOverlay
from inboxdash.tui.views.forms import FormField, FormOverlay

# key -> days to move the selection
_DAY_KEYS = {"h": -1, "left": -1, "l": 1, "right": 1, "k": -7, "up": -7, "j": 7, "down": 7}
_MONTH_KEYS = {"H": -1, "L": 1}


def shift_month(day: date, months: int) -> date:
    """Same day-of-month n months away, clamped to that month's length."""
    years, month0 = divmod(day.month - 1 + months, 12)
    year = day.year + years
    last = calendar.monthrange(year, month0 + 1)[1]
    return day.replace(year=year, month=month0 + 1, day=min(day.day, last))


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


class CalendarPanel(Static, can_focus=False):
    DEFAULT_CSS = """
    CalendarPanel {
        height: 1fr;
        padding: 0 1;
    }
    """

    def __init__(self, view: "CalendarView"):
        super().__init__("")
        self._owner = view

    def on_mount(self) -> None:
        self._owner.render_surface()


class CalendarView:
    name = "calendar"

    def __init__(self, ctx, today: date | None = None):
        self.ctx = ctx
        self.today = today or datetime.now(timezone.utc).date()
        self.selected = self.today
        self.events: list = []
        self.filter_text = ""
        self.loading = False
        self._panel: CalendarPanel | None = None
        self._creates = itertools.count(1)

    @property
    def title(self) -> str:
        return f"Calendar (week of {week_start(self.selected):%Y-%m-%d})"

    @property
    def surface(self) -> CalendarPanel:
        if self._panel is None:
            self._panel = CalendarPanel(self)
        return self._panel

    def hints(self):
        return [("h/l", "day"), ("j/k", "week"), ("H/L", "month"), ("t", "today"),
                ("enter", "day"), ("n", "new event")]

    def load(self) -> None:
        self.refresh()

    def refresh(self) -> None:
        cfg = self.ctx.config
        self.loading = True
        self.render_surface()
        self.ctx.scheduler.submit(
            self.name, lambda: cfg.client.list_events(cfg.grant_id), self._apply, self._on_error
        )

    def _apply(self, events) -> None:
        self.loading = False
        self.events = list(events)
        self.render_surface()

    def _on_error(self, error: Exception) -> None:
        self.loading = False
        self.ctx.flash(FlashLevel.ERROR, f"Calendar: {error}")
        self.render_surface()

    def filter(self, text: str) -> None:
        self.filter_text = text
        self.render_surface()

    # ─── Selection ─────────────────────────────────────────────────────

    def week(self) -> list[date]:
        first = week_start(self.selected)
        return [first + timedelta(days=i) for i in range(7)]

    def events_on(self, day: date) -> list:
        needle = self.filter_text.lower()
        return sorted(
            (e for e in self.events
             if e.start.date() == day and (not needle or needle in e.title.lower())),
            key=lambda e: e.start,
        )

    def select(self, day: date) -> None:
        self.selected = day
        self.render_surface()

    def handle_key(self, event) -> bool:
        key = event.key
        if key in _DAY_KEYS:
            self.select(self.selected + timedelta(days=_DAY_KEYS[key]))
            return True
        if key in _MONTH_KEYS:
            self.select(shift_month(self.selected, _MONTH_KEYS[key]))
            return True
        if key == "t":
            self.select(self.today)
            return True
        if key == "n":
            return self.perform(Action.CREATE)
        if key == "enter":
            return self.perform(Action.OPEN)
        if key == "escape" and self.filter_text:
            self.filter("")
            return True
        return False

    def perform(self, action: Action, arg: object = None) -> bool:
        first = week_start(self.selected)
        if action is Action.GO_TOP:
            self.select(first)
        elif action is Action.GO_BOTTOM:
            self.select(first + timedelta(days=6))
        elif action is Action.SELECT_ROW:
            self.select(first + timedelta(days=clamp_row(int(arg), 7) - 1))
        elif action in (Action.PAGE_DOWN, Action.HALF_PAGE_DOWN):
            self.select(self.selected + timedelta(days=7))
        elif action in (Action.PAGE_UP, Action.HALF_PAGE_UP):
            self.select(self.selected - timedelta(days=7))
        elif action is Action.OPEN:
            self._open_day(self.selected)
        elif action is Action.CREATE:
            self._new_event(self.selected)
        else:
            return False
        return True

    # ─── Overlays ──────────────────────────────────────────────────────

    def _open_day(self, day: date) -> None:
        events = self.events_on(day)
        fields = [
            (f"{e.start:%H:%M}-{e.end:%H:%M}", e.title + (f" @ {e.location}" if e.location else ""))
            for e in events
        ]
        overlay = DetailOverlay(f"{day:%A %Y-%m-%d}", fields, "" if events else "No events")
        self.ctx.navigator.push_detail("calendar-day", overlay)

    def _new_event(self, day: date) -> None:
        cfg = self.ctx.config
        navigator = self.ctx.navigator
        start = datetime.combine(day, time(9), tzinfo=timezone.utc)

        def _submit(values):
            if not values["title"].strip():
                self.ctx.flash(FlashLevel.WARN, "Title is required")
                return
            navigator.pop_detail()

            def _save():
                return cfg.client.save_resource(cfg.grant_id, "event", values)

            self.ctx.scheduler.submit(
                f"{self.name}:create:{next(self._creates)}", _save,
                lambda _event: self._created(values["title"]),
                lambda error: self.ctx.flash(FlashLevel.ERROR, f"create failed: {error}"),
            )

        form = FormOverlay("New event", [
            FormField("title", "Title"),
            FormField("location", "Location"),
            FormField("start", "Start", start.isoformat()),
            FormField("end", "End", (start + timedelta(hours=1)).isoformat()),
        ], _submit)
        navigator.push_detail("event-form", form)

    def _created(self, title: str) -> None:
        self.ctx.flash(FlashLevel.INFO, f"Saved event {title}")
        self.refresh()

    # ─── Rendering ─────────────────────────────────────────────────────

    def render_surface(self) -> None:
        panel = self._panel
        if panel is None or not panel.is_mounted:
            return
        table = Table(expand=True, show_lines=False)
        days = self.week()
        for day in days:
            style = "reverse" if day == self.selected else ("bold cyan" if day == self.today else "bold")
            table.add_column(Text(f"{day:%a %m/%d}", style=style), ratio=1)
        cells = []
        for day in days:
            cell = Text()
            for e in self.events_on(day):
                cell.append(f"{e.start:%H:%M} ", style="dim")
                cell.append(f"{e.title}\n")
            cells.append(cell)
        table.add_row(*cells)
        if self.loading:
            table.caption = "loading…"
        panel.update(table)


def create_calendar_view(ctx):
    return CalendarView(ctx)
