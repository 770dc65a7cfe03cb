"""API client contract and the in-memory demo client.

Views call these methods only from worker threads started through the
refresh scheduler, never from the UI thread.

// [LAW:locality-or-seam] The wire protocol lives behind ApiClient; nothing in
//   the kernel imports a concrete client.
"""

from __future__ import annotations

import copy
import dataclasses
import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Protocol

from inboxdash.errors import ApiError

DEFAULT_TIMEOUT = 30.0


@dataclass
class Message:
    id: str
    subject: str
    sender: str
    snippet: str
    date: datetime
    unread: bool = False
    starred: bool = False
    folder: str = "inbox"
    body: str = ""
    recipients: list[str] = field(default_factory=list)


@dataclass
class Event:
    id: str
    title: str
    start: datetime
    end: datetime
    location: str = ""
    participants: list[str] = field(default_factory=list)


@dataclass
class Contact:
    id: str
    name: str
    email: str
    company: str = ""
    phone: str = ""


@dataclass
class Webhook:
    id: str
    url: str
    triggers: list[str] = field(default_factory=list)
    status: str = "active"


@dataclass
class Grant:
    id: str
    email: str
    provider: str


class ApiClient(Protocol):
    """Resource fetch/mutate surface consumed by the views."""

    def list_messages(self, grant_id: str, query: str = "", timeout: float = DEFAULT_TIMEOUT) -> list[Message]: ...
    def list_events(self, grant_id: str, timeout: float = DEFAULT_TIMEOUT) -> list[Event]: ...
    def list_contacts(self, grant_id: str, timeout: float = DEFAULT_TIMEOUT) -> list[Contact]: ...
    def list_webhooks(self, timeout: float = DEFAULT_TIMEOUT) -> list[Webhook]: ...
    def list_grants(self, timeout: float = DEFAULT_TIMEOUT) -> list[Grant]: ...
    def update_message(self, grant_id: str, message_id: str, *, starred: bool | None = None,
                       unread: bool | None = None, folder: str | None = None) -> Message: ...
    def delete_resource(self, grant_id: str, kind: str, resource_id: str) -> None: ...
    def send_message(self, grant_id: str, to: str, subject: str, body: str) -> Message: ...
    def save_resource(self, grant_id: str, kind: str, fields: dict, resource_id: str = "") -> object: ...
    def rsvp_event(self, grant_id: str, event_id: str, status: str) -> None: ...
    def test_webhook(self, webhook_id: str) -> None: ...


def _split_list(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


# kind -> (resource class, id prefix for created items)
_SAVABLE = {
    "event": (Event, "evt"),
    "contact": (Contact, "ct"),
    "webhook": (Webhook, "wh"),
}


def _form_changes(cls, fields: dict) -> dict:
    """Convert form strings into typed values for the fields cls actually has."""
    types = {f.name: f.type for f in dataclasses.fields(cls) if f.name != "id"}
    changes = {}
    for name, raw in fields.items():
        kind = types.get(name)
        if kind is None:
            continue
        if kind == "datetime":
            value = raw if isinstance(raw, datetime) else datetime.fromisoformat(str(raw))
        elif kind == "list[str]":
            value = raw if isinstance(raw, list) else _split_list(str(raw))
        else:
            value = str(raw)
        changes[name] = value
    return changes


def _new_defaults(cls) -> dict:
    if cls is Event:
        start = datetime.now(timezone.utc).replace(second=0, microsecond=0)
        return {"title": "", "start": start, "end": start + timedelta(hours=1)}
    if cls is Contact:
        return {"name": "", "email": ""}
    return {"url": ""}


def _seed(now: datetime):
    messages = [
        Message(f"msg-{i}", subject, sender, snippet, now - timedelta(hours=i * 3),
                unread=i % 3 == 0, starred=i == 1, body=f"{snippet}\n\n-- {sender}")
        for i, (subject, sender, snippet) in enumerate([
            ("Quarterly planning", "ana@example.com", "Agenda for next week's planning session"),
            ("Re: Invoice #2291", "billing@vendor.io", "Thanks, payment received"),
            ("Design review notes", "li@example.com", "Attaching the notes from today"),
            ("Lunch?", "sam@example.com", "Thai place at noon?"),
            ("Build failed: main", "ci@example.com", "Job 4412 failed on step test"),
            ("Welcome aboard", "people@example.com", "A few things for your first week"),
        ])
    ]
    messages[0].recipients = ["demo@example.com", "li@example.com", "sam@example.com"]
    messages.append(Message("msg-draft-1", "Offsite venue options", "demo@example.com",
                            "Three places that fit 20 people", now - timedelta(days=1),
                            folder="drafts", body="Three places that fit 20 people",
                            recipients=["ana@example.com"]))
    events = [
        Event("evt-1", "Standup", now.replace(hour=9, minute=30), now.replace(hour=9, minute=45),
              "Zoom", ["ana@example.com", "li@example.com"]),
        Event("evt-2", "1:1 with Sam", now + timedelta(days=1), now + timedelta(days=1, minutes=30),
              "Room 4", ["sam@example.com"]),
        Event("evt-3", "Planning", now + timedelta(days=3), now + timedelta(days=3, hours=2),
              "Main hall", ["ana@example.com"]),
    ]
    contacts = [
        Contact("ct-1", "Ana Ruiz", "ana@example.com", "Example Co", "+1 555 0101"),
        Contact("ct-2", "Li Wei", "li@example.com", "Example Co"),
        Contact("ct-3", "Sam Patel", "sam@example.com", "", "+1 555 0199"),
    ]
    webhooks = [
        Webhook("wh-1", "https://hooks.example.com/mail", ["message.created"]),
        Webhook("wh-2", "https://hooks.example.com/cal", ["event.created", "event.updated"], "paused"),
    ]
    grants = [
        Grant("grant-demo", "demo@example.com", "google"),
        Grant("grant-work", "work@example.com", "microsoft"),
    ]
    return messages, events, contacts, webhooks, grants


class DemoClient:
    """Thread-safe in-memory ApiClient with canned data.

    fail_next can be set to make the next call raise ApiError, which
    exercises the flash path without a network.
    """

    def __init__(self, now: datetime | None = None):
        now = now or datetime.now(timezone.utc)
        self._lock = threading.Lock()
        (self._messages, self._events, self._contacts,
         self._webhooks, self._grants) = _seed(now)
        self.fail_next: str | None = None
        self._ids = itertools.count(1)

    def _check(self, operation: str) -> None:
        if self.fail_next is not None:
            detail, self.fail_next = self.fail_next, None
            raise ApiError(operation, detail)

    def list_messages(self, grant_id, query="", timeout=DEFAULT_TIMEOUT):
        with self._lock:
            self._check("list messages")
            q = query.lower()
            return [copy.copy(m) for m in self._messages
                    if not q or q in m.subject.lower() or q in m.sender.lower()]

    def list_events(self, grant_id, timeout=DEFAULT_TIMEOUT):
        with self._lock:
            self._check("list events")
            return [copy.copy(e) for e in self._events]

    def list_contacts(self, grant_id, timeout=DEFAULT_TIMEOUT):
        with self._lock:
            self._check("list contacts")
            return [copy.copy(c) for c in self._contacts]

    def list_webhooks(self, timeout=DEFAULT_TIMEOUT):
        with self._lock:
            self._check("list webhooks")
            return [copy.copy(w) for w in self._webhooks]

    def list_grants(self, timeout=DEFAULT_TIMEOUT):
        with self._lock:
            self._check("list grants")
            return [copy.copy(g) for g in self._grants]

    def update_message(self, grant_id, message_id, *, starred=None, unread=None, folder=None):
        with self._lock:
            self._check("update message")
            for m in self._messages:
                if m.id == message_id:
                    if starred is not None:
                        m.starred = starred
                    if unread is not None:
                        m.unread = unread
                    if folder is not None:
                        m.folder = folder
                    return copy.copy(m)
            raise ApiError("update message", f"message {message_id} not found")

    def delete_resource(self, grant_id, kind, resource_id):
        collections = {
            "message": self._messages,
            "event": self._events,
            "contact": self._contacts,
            "webhook": self._webhooks,
        }
        with self._lock:
            self._check(f"delete {kind}")
            items = collections.get(kind)
            if items is None:
                raise ApiError(f"delete {kind}", "unsupported resource kind")
            before = len(items)
            items[:] = [item for item in items if item.id != resource_id]
            if len(items) == before:
                raise ApiError(f"delete {kind}", f"{resource_id} not found")

    def send_message(self, grant_id, to, subject, body):
        with self._lock:
            self._check("send message")
            recipients = _split_list(to)
            msg = Message(f"msg-sent-{next(self._ids)}", subject, ", ".join(recipients), body[:60],
                          datetime.now(timezone.utc), folder="sent", body=body,
                          recipients=recipients)
            self._messages.append(msg)
            return copy.copy(msg)

    def save_resource(self, grant_id, kind, fields, resource_id=""):
        """Create (no resource_id) or update an event, contact or webhook from form fields.

        Updates only touch the fields present in ``fields``; everything the
        form did not show (event times, participants, webhook status) is kept.
        """
        collections = {"event": self._events, "contact": self._contacts, "webhook": self._webhooks}
        with self._lock:
            self._check(f"save {kind}")
            if kind not in collections:
                raise ApiError(f"save {kind}", "unsupported resource kind")
            cls, prefix = _SAVABLE[kind]
            items = collections[kind]
            try:
                changes = _form_changes(cls, fields)
            except ValueError as e:
                raise ApiError(f"save {kind}", str(e)) from e
            if not resource_id:
                item = cls(id=f"{prefix}-new-{next(self._ids)}", **{**_new_defaults(cls), **changes})
                items.append(item)
                return copy.copy(item)
            for i, existing in enumerate(items):
                if existing.id == resource_id:
                    items[i] = dataclasses.replace(existing, **changes)
                    return copy.copy(items[i])
            raise ApiError(f"save {kind}", f"{resource_id} not found")

    def rsvp_event(self, grant_id, event_id, status):
        with self._lock:
            self._check("rsvp")
            if status not in ("yes", "no", "maybe"):
                raise ApiError("rsvp", f"invalid status {status!r}")
            if not any(e.id == event_id for e in self._events):
                raise ApiError("rsvp", f"event {event_id} not found")

    def test_webhook(self, webhook_id):
        with self._lock:
            self._check("test webhook")
            if not any(w.id == webhook_id for w in self._webhooks):
                raise ApiError("test webhook", f"webhook {webhook_id} not found")
