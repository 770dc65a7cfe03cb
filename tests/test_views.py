"""Headless tests for the concrete views driven through the dispatcher.

Fetches run inline (SyncThreads) and results land only when the redraw
queue is drained, the same as on the UI thread.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from inboxdash.app.api import DemoClient
from inboxdash.app.grants import GrantSession, JsonGrantStore
from inboxdash.tui.actions import Action
from inboxdash.tui.command_definitions import build_default_registry
from inboxdash.tui.dispatcher import ModeDispatcher
from inboxdash.tui.refresh import AsyncRefreshScheduler, RedrawQueue
from inboxdash.tui.resolver import CommandResolver
from inboxdash.tui.status import FlashLevel
from inboxdash.tui.view_registry import ViewRegistry
from inboxdash.tui.views.base import ViewContext
from inboxdash.tui.views.calendar_view import CalendarView
from inboxdash.tui.views.detail import DetailOverlay
from inboxdash.tui.views.forms import FormOverlay
from tests.fakes import FakeHost, event, type_text
from tests.harness import SyncThreads, make_config


def _kernel(client=None, grant_store=None, threads=None):
    client = client or DemoClient()
    queue = RedrawQueue()
    flashes = []
    session = GrantSession(make_config(client, grant_store))
    ctx = ViewContext(
        session=session,
        scheduler=AsyncRefreshScheduler(queue, start_thread=threads or SyncThreads()),
        flash=lambda level, text: flashes.append((level, text)),
    )
    host = FakeHost()
    dispatcher = ModeDispatcher(
        ViewRegistry(ctx), CommandResolver(build_default_registry()), host, ctx.flash
    )
    ctx.navigator = dispatcher
    dispatcher.start("dashboard")
    queue.drain()
    return SimpleNamespace(client=client, queue=queue, flashes=flashes, session=session,
                           dispatcher=dispatcher, host=host)


@pytest.fixture
def kernel():
    return _kernel()


def _open(kernel, name):
    kernel.dispatcher.on_command(name)
    kernel.queue.drain()
    return kernel.dispatcher.active_view()


def test_dashboard_counts_loaded(kernel):
    view = kernel.dispatcher.active_view()
    assert view.name == "dashboard"
    assert view.counts == {"messages": 2, "events": 3, "contacts": 3, "webhooks": 2, "grants": 2}


def test_dashboard_enter_navigates(kernel):
    kernel.dispatcher.dispatch(event("j"))
    kernel.dispatcher.dispatch(event("enter"))
    assert kernel.dispatcher.stack.names() == ["events"]


def test_messages_load_only_after_drain(kernel):
    kernel.dispatcher.on_command("m")
    view = kernel.dispatcher.active_view()
    assert view.items == []
    assert view.loading
    kernel.queue.drain()
    assert len(view.items) == 6
    assert not view.loading


def test_enter_pushes_detail_and_escape_returns_to_same_row(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("j"))
    kernel.dispatcher.dispatch(event("j"))
    assert view.cursor == 2

    kernel.dispatcher.dispatch(event("enter"))
    assert len(kernel.dispatcher.stack) == 2
    top = kernel.dispatcher.stack.top_entry()
    assert isinstance(top.surface, DetailOverlay)
    assert top.surface.title == view.visible[2].subject

    kernel.dispatcher.dispatch(event("escape"))
    assert len(kernel.dispatcher.stack) == 1
    assert kernel.dispatcher.active_view() is view
    assert view.cursor == 2
    assert kernel.host.pages[-1].surface is view.surface


def test_dd_deletes_selected_message_once(kernel):
    view = _open(kernel, "messages")
    target = view.selected().id
    kernel.dispatcher.dispatch(event("d"))
    kernel.dispatcher.dispatch(event("d"))
    kernel.queue.drain()
    ids = [m.id for m in view.items]
    assert target not in ids
    assert len(ids) == 5
    assert (FlashLevel.INFO, "Deleted: Quarterly planning") in kernel.flashes


def test_select_row_is_clamped(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.on_command("42")
    assert view.cursor == 5
    kernel.dispatcher.on_command("2")
    assert view.cursor == 1


def test_gg_and_G_move_cursor(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("G"))
    assert view.cursor == 5
    kernel.dispatcher.dispatch(event("g"))
    kernel.dispatcher.dispatch(event("g"))
    assert view.cursor == 0


def test_action_without_selection_warns(kernel):
    kernel.dispatcher.on_command("m")
    view = kernel.dispatcher.active_view()
    assert view.selected() is None
    kernel.dispatcher.on_command("star")
    assert kernel.flashes == [(FlashLevel.WARN, "No message selected")]


def test_fetch_failure_flashes_and_keeps_last_good_data(kernel):
    view = _open(kernel, "messages")
    kernel.client.fail_next = "connection reset"
    kernel.dispatcher.dispatch(event("r"))
    kernel.queue.drain()
    assert len(view.items) == 6
    level, text = kernel.flashes[-1]
    assert level is FlashLevel.ERROR
    assert "connection reset" in text


def test_filter_narrows_rows_and_escape_clears(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("/"))
    type_text(kernel.dispatcher, "ana@")
    kernel.dispatcher.dispatch(event("enter"))
    kernel.queue.drain()
    assert [m.sender for m in view.visible] == ["ana@example.com"]

    kernel.dispatcher.dispatch(event("escape"))
    assert view.filter_text == ""
    assert len(view.visible) == 6


def test_compose_form_takes_free_text_and_sends(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("n"))
    form = kernel.dispatcher.stack.top_entry().surface
    assert isinstance(form, FormOverlay)

    type_text(kernel.dispatcher, "li@example.com")
    kernel.dispatcher.dispatch(event("tab"))
    type_text(kernel.dispatcher, "gg dd :q")
    assert form.values()["subject"] == "gg dd :q"
    assert not kernel.host.exited

    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    assert kernel.dispatcher.stack.names() == ["messages"]
    assert (FlashLevel.INFO, "Sent: gg dd :q") in kernel.flashes
    # Sent mail lives in the sent folder.
    kernel.dispatcher.on_command("sent")
    kernel.queue.drain()
    assert [m.subject for m in view.items] == ["gg dd :q"]


def test_compose_requires_recipient(kernel):
    _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("n"))
    kernel.dispatcher.dispatch(event("ctrl+s"))
    assert kernel.flashes[-1] == (FlashLevel.WARN, "Recipient is required")
    assert len(kernel.dispatcher.stack) == 2


def test_archive_moves_message_out_of_inbox(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("x"))
    kernel.queue.drain()
    assert len(view.items) == 5
    kernel.dispatcher.on_command("folder archive")
    kernel.queue.drain()
    assert [m.id for m in view.items] == ["msg-0"]
    assert view.title == "Messages (archive)"


def test_rsvp_on_events(kernel):
    _open(kernel, "events")
    kernel.dispatcher.on_command("rsvp no")
    kernel.queue.drain()
    assert kernel.flashes[-1] == (FlashLevel.INFO, "RSVP no: Standup")


def test_rsvp_is_not_available_on_contacts(kernel):
    _open(kernel, "contacts")
    kernel.dispatcher.on_command("rsvp yes")
    assert kernel.flashes[-1][0] is FlashLevel.WARN


def test_contact_edit_form_saves(kernel):
    view = _open(kernel, "contacts")
    kernel.dispatcher.on_command("contact edit")
    form = kernel.dispatcher.stack.top_entry().surface
    assert form.values()["name"] == "Ana Ruiz"
    kernel.dispatcher.dispatch(event("ctrl+u"))
    type_text(kernel.dispatcher, "Ana R")
    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    assert view.items[0].name == "Ana R"


def test_webhook_test_key(kernel):
    _open(kernel, "webhooks")
    kernel.dispatcher.dispatch(event("t"))
    kernel.queue.drain()
    assert kernel.flashes[-1] == (FlashLevel.INFO, "Test sent to https://hooks.example.com/mail")


def test_grant_switch_without_store_warns_and_keeps_config(kernel):
    config_before = kernel.session.config
    _open(kernel, "grants")
    kernel.dispatcher.dispatch(event("j"))
    kernel.dispatcher.dispatch(event("enter"))
    level, text = kernel.flashes[-1]
    assert level is FlashLevel.WARN
    assert "no grant store" in text
    assert kernel.session.config is config_before


def test_grant_switch_with_store(isolated_settings):
    kernel = _kernel(grant_store=JsonGrantStore())
    _open(kernel, "grants")
    kernel.dispatcher.dispatch(event("j"))
    kernel.dispatcher.dispatch(event("enter"))
    assert kernel.session.config.grant_id == "grant-work"
    assert kernel.flashes[-1] == (FlashLevel.INFO, "Switched to work@example.com")
    # Other views reload for the new grant on next display.
    kernel.dispatcher.on_command("dashboard")
    assert kernel.dispatcher.active_view().loading


def test_views_share_action_path_for_keys_and_commands(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("s"))
    kernel.queue.drain()
    assert view.items[0].starred is True
    kernel.dispatcher.on_command("unstar")
    kernel.queue.drain()
    assert view.items[0].starred is False
    assert view.perform(Action.TEST) is False


def test_overlapping_deletes_each_report_their_outcome():
    threads = SyncThreads()
    kernel = _kernel(threads=threads)
    view = _open(kernel, "messages")
    threads.hold = True
    kernel.dispatcher.dispatch(event("d"))
    kernel.dispatcher.dispatch(event("d"))
    kernel.dispatcher.dispatch(event("j"))
    kernel.dispatcher.dispatch(event("d"))
    kernel.dispatcher.dispatch(event("d"))
    assert len(threads.pending) == 2

    kernel.client.fail_next = "server exploded"
    threads.run(0)
    threads.run(0)
    threads.hold = False
    kernel.queue.drain()

    errors = [text for level, text in kernel.flashes if level is FlashLevel.ERROR]
    assert len(errors) == 1
    assert "server exploded" in errors[0]
    assert (FlashLevel.INFO, "Deleted: Re: Invoice #2291") in kernel.flashes
    assert [m.id for m in view.items][:1] == ["msg-0"]


def test_detail_star_toggles_from_current_state(kernel):
    _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("enter"))
    assert isinstance(kernel.dispatcher.stack.top_entry().surface, DetailOverlay)
    kernel.queue.drain()

    kernel.dispatcher.dispatch(event("s"))
    kernel.queue.drain()
    assert _message(kernel, "msg-0").starred is True

    kernel.dispatcher.dispatch(event("s"))
    kernel.queue.drain()
    assert _message(kernel, "msg-0").starred is False
    assert (FlashLevel.INFO, "unstar: Quarterly planning") in kernel.flashes


def _message(kernel, message_id):
    return next(m for m in kernel.client.list_messages("grant-demo") if m.id == message_id)


def test_reply_all_addresses_every_other_recipient(kernel):
    _open(kernel, "messages")
    kernel.dispatcher.dispatch(event("A"))
    form = kernel.dispatcher.stack.top_entry().surface
    assert form.values()["to"] == "ana@example.com, li@example.com, sam@example.com"
    assert form.values()["subject"] == "Re: Quarterly planning"
    kernel.dispatcher.dispatch(event("escape"))

    kernel.dispatcher.dispatch(event("R"))
    assert kernel.dispatcher.stack.top_entry().surface.values()["to"] == "ana@example.com"


def test_opening_a_draft_resumes_compose_and_sending_removes_it(kernel):
    view = _open(kernel, "messages")
    kernel.dispatcher.on_command("drafts")
    kernel.queue.drain()
    assert view.title == "Messages (drafts)"
    assert [m.id for m in view.items] == ["msg-draft-1"]

    kernel.dispatcher.dispatch(event("enter"))
    form = kernel.dispatcher.stack.top_entry().surface
    assert isinstance(form, FormOverlay)
    assert form.values()["to"] == "ana@example.com"
    assert form.values()["subject"] == "Offsite venue options"

    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    assert view.items == []
    assert (FlashLevel.INFO, "Sent: Offsite venue options") in kernel.flashes


def test_calendar_moves_by_day_week_and_row(kernel):
    view = _open(kernel, "calendar")
    assert isinstance(view, CalendarView)
    assert len(view.events) == 3
    today = view.today
    assert [e.title for e in view.events_on(today)] == ["Standup"]
    week = view.week()
    assert week[0].weekday() == 0 and today in week

    kernel.dispatcher.dispatch(event("l"))
    kernel.dispatcher.dispatch(event("j"))
    assert view.selected == today + timedelta(days=8)
    kernel.dispatcher.dispatch(event("t"))
    assert view.selected == today

    kernel.dispatcher.dispatch(event("G"))
    assert view.selected == week[6]
    kernel.dispatcher.dispatch(event("g"))
    kernel.dispatcher.dispatch(event("g"))
    assert view.selected == week[0]
    kernel.dispatcher.on_command("3")
    assert view.selected == week[2]
    kernel.dispatcher.on_command("99")
    assert view.selected == week[6]


def test_calendar_enter_shows_the_days_events(kernel):
    view = _open(kernel, "cal")
    kernel.dispatcher.dispatch(event("enter"))
    overlay = kernel.dispatcher.stack.top_entry().surface
    assert isinstance(overlay, DetailOverlay)
    assert overlay.title == f"{view.today:%A %Y-%m-%d}"
    assert overlay.fields[0][1] == "Standup @ Zoom"
    kernel.dispatcher.dispatch(event("escape"))
    assert kernel.dispatcher.active_view() is view


def test_calendar_filter_hides_other_events(kernel):
    view = _open(kernel, "calendar")
    view.filter("planning")
    assert view.events_on(view.today) == []
    view.filter("")
    assert len(view.events_on(view.today)) == 1


def test_calendar_new_event_lands_on_selected_day(kernel):
    view = _open(kernel, "calendar")
    kernel.dispatcher.dispatch(event("l"))
    kernel.dispatcher.dispatch(event("n"))
    form = kernel.dispatcher.stack.top_entry().surface
    assert isinstance(form, FormOverlay)
    type_text(kernel.dispatcher, "Retro")
    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    assert (FlashLevel.INFO, "Saved event Retro") in kernel.flashes
    created = [e for e in view.events if e.title == "Retro"]
    assert len(created) == 1
    assert created[0].start.date() == view.today + timedelta(days=1)
    assert created[0].start.hour == 9


def test_availability_lists_free_slots_and_changes_duration(kernel):
    view = _open(kernel, "avail")
    assert view.name == "availability"
    assert view.items
    assert all(slot.minutes >= 30 for slot in view.items)

    kernel.dispatcher.dispatch(event("D"))
    assert len(kernel.dispatcher.stack) == 2
    kernel.dispatcher.dispatch(event("ctrl+u"))
    type_text(kernel.dispatcher, "abc")
    kernel.dispatcher.dispatch(event("ctrl+s"))
    assert kernel.flashes[-1][0] is FlashLevel.WARN
    assert len(kernel.dispatcher.stack) == 2

    kernel.dispatcher.dispatch(event("ctrl+u"))
    type_text(kernel.dispatcher, "60")
    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    assert len(kernel.dispatcher.stack) == 1
    assert view.duration == 60
    assert view.title.startswith("Availability (60 min")
    assert all(slot.minutes >= 60 for slot in view.items)


def test_find_time_books_a_meeting_in_the_selected_slot(kernel):
    view = _open(kernel, "find-time")
    slot = view.selected()
    kernel.dispatcher.dispatch(event("enter"))
    type_text(kernel.dispatcher, "Sync")
    kernel.dispatcher.dispatch(event("ctrl+s"))
    kernel.queue.drain()
    level, text = kernel.flashes[-1]
    assert level is FlashLevel.INFO and text.startswith("Booked Sync at")
    booked = [e for e in kernel.client.list_events("grant-demo") if e.title == "Sync"]
    assert len(booked) == 1
    assert booked[0].start == slot.start
    assert booked[0].end - booked[0].start == timedelta(minutes=30)
