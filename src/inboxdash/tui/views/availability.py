"""Free-time finder: open working-hour gaps between the grant's events.

Slots are computed locally from list_events(); Enter on a slot books a
meeting at its start.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from inboxdash.tui.actions import Action
from inboxdash.tui.status import FlashLevel
from inboxdash.tui.views.forms import FormField, FormOverlay
from inboxdash.tui.views.table_view import Column, ResourceTableView

DEFAULT_DURATION = 30  # minutes
DEFAULT_DAYS = 7
WORKDAY_START = 9
WORKDAY_END = 17
SLOT_GRANULARITY = 15  # minutes; searches start on a quarter hour


@dataclass(frozen=True)
class FreeSlot:
    start: datetime
    end: datetime

    @property
    def id(self) -> str:
        return self.start.isoformat()

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _round_up(dt: datetime, minutes: int) -> datetime:
    floor = dt.replace(minute=dt.minute - dt.minute % minutes, second=0, microsecond=0)
    return floor if floor == dt else floor + timedelta(minutes=minutes)


def free_slots(
    events,
    start_day: date,
    days: int,
    duration_minutes: int,
    not_before: datetime | None = None,
    day_start: int = WORKDAY_START,
    day_end: int = WORKDAY_END,
) -> list[FreeSlot]:
    """Working-hour gaps of at least duration_minutes over days weekdays.

    Weekends are skipped. Overlapping events merge into one busy block.
    """
    needed = timedelta(minutes=duration_minutes)
    busy = sorted((_aware(e.start), _aware(e.end)) for e in events)
    earliest = _round_up(_aware(not_before), SLOT_GRANULARITY) if not_before else None
    slots = []
    for offset in range(days):
        day = start_day + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        lo = datetime.combine(day, time(day_start), tzinfo=timezone.utc)
        hi = datetime.combine(day, time(day_end), tzinfo=timezone.utc)
        if earliest is not None:
            lo = max(lo, earliest)
        cursor = lo
        for start, end in busy:
            if end <= cursor or start >= hi:
                continue
            if start - cursor >= needed:
                slots.append(FreeSlot(cursor, start))
            cursor = max(cursor, end)
        if hi - cursor >= needed:
            slots.append(FreeSlot(cursor, hi))
    return slots


class AvailabilityView(ResourceTableView):
    name = "availability"
    noun = "slot"
    columns = [
        Column("Day", lambda s: s.start.strftime("%a %Y-%m-%d")),
        Column("From", lambda s: s.start.strftime("%H:%M")),
        Column("To", lambda s: s.end.strftime("%H:%M")),
        Column("Free", lambda s: f"{s.minutes} min"),
    ]
    view_hints = [("enter", "book"), ("D", "duration")]

    def __init__(self, ctx):
        super().__init__(ctx)
        self.duration = DEFAULT_DURATION
        self.days = DEFAULT_DAYS

    @property
    def title(self) -> str:
        return f"Availability ({self.duration} min, next {self.days} days)"

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def fetch(self):
        cfg = self.ctx.config
        now = self.now()
        events = cfg.client.list_events(cfg.grant_id)
        return free_slots(events, now.date(), self.days, self.duration, not_before=now)

    def handle_key(self, event) -> bool:
        if event.key == "D":
            self._open_settings()
            return True
        return super().handle_key(event)

    def item_actions(self):
        return {
            Action.OPEN: lambda slot, _: self._book(slot),
            Action.CREATE: lambda slot, _: self._book(slot),
        }

    def _open_settings(self) -> None:
        navigator = self.ctx.navigator

        def _submit(values):
            try:
                duration = int(values["duration"])
                days = int(values["days"])
            except ValueError:
                duration = days = 0
            if duration <= 0 or days <= 0 or duration > (WORKDAY_END - WORKDAY_START) * 60:
                self.ctx.flash(FlashLevel.WARN,
                               f"Invalid duration or days: {values['duration']!r}, {values['days']!r}")
                return
            navigator.pop_detail()
            self.duration, self.days = duration, days
            self.cursor = 0
            self.refresh()

        form = FormOverlay("Find time", [
            FormField("duration", "Duration (min)", str(self.duration)),
            FormField("days", "Days ahead", str(self.days)),
        ], _submit)
        navigator.push_detail("availability-settings", form)

    def _book(self, slot: FreeSlot) -> None:
        cfg = self.ctx.config
        navigator = self.ctx.navigator
        start = slot.start
        end = start + timedelta(minutes=self.duration)

        def _submit(values):
            title = values["title"].strip()
            if not title:
                self.ctx.flash(FlashLevel.WARN, "Title is required")
                return
            navigator.pop_detail()
            fields = {"title": title, "location": values["location"],
                      "start": start.isoformat(), "end": end.isoformat()}
            self.mutate(
                "book",
                lambda: cfg.client.save_resource(cfg.grant_id, "event", fields),
                f"Booked {title} at {start:%a %H:%M}",
            )

        form = FormOverlay(f"Book {start:%a %Y-%m-%d %H:%M}-{end:%H:%M}", [
            FormField("title", "Title"),
            FormField("location", "Location"),
        ], _submit)
        navigator.push_detail("availability-book", form)


def create_availability_view(ctx):
    return AvailabilityView(ctx)
