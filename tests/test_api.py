"""Tests for the in-memory demo client."""

from datetime import datetime, timezone

import pytest

from inboxdash.app.api import DemoClient
from inboxdash.errors import ApiError


def test_seeded_resources():
    client = DemoClient()
    assert len(client.list_messages("grant-demo")) == 7
    assert [g.id for g in client.list_grants()] == ["grant-demo", "grant-work"]
    assert len(client.list_events("grant-demo")) == 3


def test_list_returns_copies():
    client = DemoClient()
    msg = client.list_messages("grant-demo")[0]
    msg.subject = "changed"
    assert client.list_messages("grant-demo")[0].subject != "changed"


def test_fail_next_raises_once():
    client = DemoClient()
    client.fail_next = "timeout"
    with pytest.raises(ApiError, match="list contacts: timeout"):
        client.list_contacts("grant-demo")
    assert len(client.list_contacts("grant-demo")) == 3


def test_update_and_delete_message():
    client = DemoClient()
    updated = client.update_message("grant-demo", "msg-0", starred=True, folder="archive")
    assert updated.starred and updated.folder == "archive"
    client.delete_resource("grant-demo", "message", "msg-0")
    assert "msg-0" not in [m.id for m in client.list_messages("grant-demo")]
    with pytest.raises(ApiError):
        client.delete_resource("grant-demo", "message", "msg-0")


def test_save_resource_creates_and_updates():
    client = DemoClient()
    created = client.save_resource("grant-demo", "contact", {"name": "Kim", "email": "kim@x.io"})
    assert created.id.startswith("ct-")
    client.save_resource("grant-demo", "contact", {"name": "Kim Lee", "email": "kim@x.io"},
                         created.id)
    names = [c.name for c in client.list_contacts("grant-demo")]
    assert "Kim Lee" in names and "Kim" not in names


def test_webhook_triggers_parsed_from_text():
    client = DemoClient()
    hook = client.save_resource("grant-demo", "webhook",
                                {"url": "https://x.io/h", "triggers": "a.b, c.d"})
    assert hook.triggers == ["a.b", "c.d"]


def test_rsvp_validates_status():
    client = DemoClient()
    client.rsvp_event("grant-demo", "evt-1", "maybe")
    with pytest.raises(ApiError):
        client.rsvp_event("grant-demo", "evt-1", "perhaps")


def test_edit_keeps_fields_the_form_does_not_show():
    client = DemoClient()
    before = next(e for e in client.list_events("grant-demo") if e.id == "evt-2")
    client.save_resource("grant-demo", "event", {"title": "1:1 moved", "location": "Room 9"}, "evt-2")
    after = next(e for e in client.list_events("grant-demo") if e.id == "evt-2")
    assert after.title == "1:1 moved"
    assert (after.start, after.end) == (before.start, before.end)
    assert after.participants == ["sam@example.com"]

    client.save_resource("grant-demo", "webhook", {"url": "https://hooks.example.com/c2"}, "wh-2")
    hook = next(w for w in client.list_webhooks() if w.id == "wh-2")
    assert hook.status == "paused"
    assert hook.triggers == ["event.created", "event.updated"]


def test_created_ids_stay_unique_after_deletes():
    client = DemoClient()
    first = client.save_resource("grant-demo", "contact", {"name": "A", "email": "a@x.io"})
    client.delete_resource("grant-demo", "contact", "ct-1")
    second = client.save_resource("grant-demo", "contact", {"name": "B", "email": "b@x.io"})
    ids = [c.id for c in client.list_contacts("grant-demo")]
    assert first.id != second.id
    assert len(ids) == len(set(ids))

    sent_a = client.send_message("grant-demo", "a@x.io", "one", "body")
    client.delete_resource("grant-demo", "message", sent_a.id)
    sent_b = client.send_message("grant-demo", "b@x.io", "two", "body")
    assert sent_a.id != sent_b.id


def test_send_message_records_recipients():
    client = DemoClient()
    sent = client.send_message("grant-demo", "a@x.io, b@x.io,", "hi", "body")
    assert sent.recipients == ["a@x.io", "b@x.io"]
    assert sent.folder == "sent"


def test_event_times_from_iso_fields():
    client = DemoClient()
    start = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
    created = client.save_resource("grant-demo", "event", {
        "title": "Focus", "start": start.isoformat(), "end": "2026-03-02T11:00:00+00:00"})
    assert created.start == start
    assert created.end.hour == 11
    with pytest.raises(ApiError, match="save event"):
        client.save_resource("grant-demo", "event", {"title": "Bad", "start": "tuesday"})
