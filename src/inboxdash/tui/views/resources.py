"""Concrete resource views: messages, events, contacts, webhooks, grants.

Each class only says what to fetch, how to render a row and which item
actions it supports; selection, filtering, loading and flashing live in
ResourceTableView.
"""

from __future__ import annotations

import logging

from inboxdash.errors import GrantSwitchError
from inboxdash.tui.actions import Action
from inboxdash.tui.status import FlashLevel
from inboxdash.tui.views.detail import DetailOverlay
from inboxdash.tui.views.forms import FormField, FormOverlay
from inboxdash.tui.views.table_view import Column, ResourceTableView

logger = logging.getLogger(__name__)


def _when(dt) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


# ─── Messages ──────────────────────────────────────────────────────────


def _flags(msg) -> str:
    return ("★" if msg.starred else " ") + ("●" if msg.unread else " ")


class MessagesView(ResourceTableView):
    name = "messages"
    noun = "message"
    columns = [
        Column("", _flags),
        Column("From", lambda m: m.sender),
        Column("Subject", lambda m: m.subject),
        Column("Date", lambda m: _when(m.date)),
    ]
    key_actions = {
        "n": Action.COMPOSE,
        "R": Action.REPLY,
        "A": Action.REPLY_ALL,
        "F": Action.FORWARD,
        "s": Action.STAR,
        "u": Action.MARK_UNREAD,
    }
    view_hints = [("n", "compose"), ("R", "reply"), ("s", "star"), ("dd", "delete"), ("x", "archive")]

    def __init__(self, ctx):
        super().__init__(ctx)
        self.folder = "inbox"

    @property
    def title(self) -> str:
        return f"Messages ({self.folder})"

    def fetch(self):
        cfg = self.ctx.config
        return [m for m in cfg.client.list_messages(cfg.grant_id) if m.folder == self.folder]

    def itemless_actions(self):
        return frozenset({Action.COMPOSE, Action.SHOW_FOLDER})

    def item_actions(self):
        return {
            Action.OPEN: self._open,
            Action.DELETE: lambda m, _: self._delete(m),
            Action.ARCHIVE: lambda m, _: self._update(m, "archive", folder="archive"),
            Action.STAR: lambda m, _: self._toggle_star(m),
            Action.UNSTAR: lambda m, _: self._update(m, "unstar", starred=False),
            Action.MARK_READ: lambda m, _: self._update(m, "mark read", unread=False),
            Action.MARK_UNREAD: lambda m, _: self._update(m, "mark unread", unread=True),
            Action.COMPOSE: lambda m, _: self._compose(),
            Action.REPLY: lambda m, _: self._compose(to=m.sender, subject=f"Re: {m.subject}"),
            Action.REPLY_ALL: lambda m, _: self._compose(to=", ".join(self._reply_all_to(m)),
                                                         subject=f"Re: {m.subject}"),
            Action.FORWARD: lambda m, _: self._compose(subject=f"Fwd: {m.subject}",
                                                       body=f"\n\n---\n{m.body}"),
            Action.SHOW_FOLDER: lambda m, folder: self._show_folder(str(folder)),
        }

    def _reply_all_to(self, msg) -> list[str]:
        """Sender plus every other recipient, minus the active grant's own address."""
        own = self.ctx.config.email.lower()
        seen = []
        for addr in [msg.sender] + list(msg.recipients):
            if addr.lower() != own and addr not in seen:
                seen.append(addr)
        return seen

    def _current(self, msg):
        """The latest fetched copy of msg; detail callbacks outlive the row they opened."""
        return next((m for m in self.items if m.id == msg.id), msg)

    def _open(self, msg, _arg) -> None:
        if msg.folder == "drafts":
            self._compose(to=", ".join(msg.recipients), subject=msg.subject, body=msg.body,
                          draft_id=msg.id)
            return
        overlay = DetailOverlay(
            msg.subject,
            [("From", msg.sender), ("To", ", ".join(msg.recipients)),
             ("Date", _when(msg.date)), ("Folder", msg.folder)],
            msg.body,
            extra_keys={
                "R": ("reply", lambda: self._compose(to=msg.sender, subject=f"Re: {msg.subject}")),
                "s": ("star", lambda: self._toggle_star(self._current(msg))),
            },
        )
        self.ctx.navigator.push_detail("message-detail", overlay)
        if msg.unread:
            self._update(msg, "mark read", unread=False)

    def _toggle_star(self, msg) -> None:
        self._update(msg, "star" if not msg.starred else "unstar", starred=not msg.starred)

    def _update(self, msg, label: str, **changes) -> None:
        cfg = self.ctx.config
        self.mutate(label, lambda: cfg.client.update_message(cfg.grant_id, msg.id, **changes),
                    f"{label}: {msg.subject}")

    def _delete(self, msg) -> None:
        cfg = self.ctx.config
        self.mutate("delete", lambda: cfg.client.delete_resource(cfg.grant_id, "message", msg.id),
                    f"Deleted: {msg.subject}")

    def _show_folder(self, folder: str) -> None:
        self.folder = folder
        self.cursor = 0
        self.refresh()

    def _compose(self, to: str = "", subject: str = "", body: str = "", draft_id: str = "") -> None:
        cfg = self.ctx.config
        navigator = self.ctx.navigator

        def _submit(values):
            if not values["to"].strip():
                self.ctx.flash(FlashLevel.WARN, "Recipient is required")
                return
            navigator.pop_detail()

            def _send():
                sent = cfg.client.send_message(cfg.grant_id, values["to"].strip(),
                                               values["subject"], values["body"])
                if draft_id:
                    cfg.client.delete_resource(cfg.grant_id, "message", draft_id)
                return sent

            self.mutate(
                "send",
                _send,
                f"Sent: {values['subject'] or '(no subject)'}",
            )

        form = FormOverlay("Compose", [
            FormField("to", "To", to),
            FormField("subject", "Subject", subject),
            FormField("body", "Body", body, multiline=True),
        ], _submit)
        navigator.push_detail("compose", form)


# ─── Events / contacts / webhooks share create/edit/delete ─────────────


class _CrudView(ResourceTableView):
    """A resource that can be created, edited and deleted through a form."""

    form_fields: list[tuple[str, str]] = []  # (field name, label)
    key_actions = {"n": Action.CREATE, "e": Action.EDIT}
    view_hints = [("n", "new"), ("e", "edit"), ("dd", "delete")]

    def field_values(self, item) -> dict[str, str]:
        return {name: str(getattr(item, name, "")) for name, _ in self.form_fields}

    def detail_fields(self, item) -> list[tuple[str, str]]:
        return [(label, value) for (_, label), value in
                zip(self.form_fields, self.field_values(item).values())]

    def itemless_actions(self):
        return frozenset({Action.CREATE})

    def item_actions(self):
        return {
            Action.OPEN: lambda item, _: self.ctx.navigator.push_detail(
                f"{self.noun}-detail",
                DetailOverlay(self.describe(item), self.detail_fields(item)),
            ),
            Action.CREATE: lambda item, _: self._open_form(None),
            Action.EDIT: lambda item, _: self._open_form(item),
            Action.DELETE: lambda item, _: self._delete(item),
        }

    def describe(self, item) -> str:
        return item.id

    def _open_form(self, item) -> None:
        values = self.field_values(item) if item is not None else {}
        resource_id = item.id if item is not None else ""
        cfg = self.ctx.config
        navigator = self.ctx.navigator
        verb = "Edit" if item is not None else "New"

        def _submit(fields):
            navigator.pop_detail()
            self.mutate(
                "save",
                lambda: cfg.client.save_resource(cfg.grant_id, self.noun, fields, resource_id),
                f"Saved {self.noun}",
            )

        form = FormOverlay(f"{verb} {self.noun}", [
            FormField(name, label, values.get(name, "")) for name, label in self.form_fields
        ], _submit)
        navigator.push_detail(f"{self.noun}-form", form)

    def _delete(self, item) -> None:
        cfg = self.ctx.config
        self.mutate("delete", lambda: cfg.client.delete_resource(cfg.grant_id, self.noun, item.id),
                    f"Deleted {self.noun} {self.describe(item)}")


class EventsView(_CrudView):
    name = "events"
    title = "Events"
    noun = "event"
    columns = [
        Column("Title", lambda e: e.title),
        Column("Start", lambda e: _when(e.start)),
        Column("End", lambda e: _when(e.end)),
        Column("Location", lambda e: e.location),
    ]
    form_fields = [("title", "Title"), ("location", "Location")]

    def fetch(self):
        cfg = self.ctx.config
        return cfg.client.list_events(cfg.grant_id)

    def describe(self, item) -> str:
        return item.title

    def item_actions(self):
        actions = super().item_actions()
        actions[Action.RSVP] = self._rsvp
        return actions

    def _rsvp(self, event, answer) -> None:
        cfg = self.ctx.config
        answer = str(answer or "yes")
        self.mutate("rsvp", lambda: cfg.client.rsvp_event(cfg.grant_id, event.id, answer),
                    f"RSVP {answer}: {event.title}")


class ContactsView(_CrudView):
    name = "contacts"
    title = "Contacts"
    noun = "contact"
    columns = [
        Column("Name", lambda c: c.name),
        Column("Email", lambda c: c.email),
        Column("Company", lambda c: c.company),
        Column("Phone", lambda c: c.phone),
    ]
    form_fields = [("name", "Name"), ("email", "Email"), ("company", "Company"), ("phone", "Phone")]

    def fetch(self):
        cfg = self.ctx.config
        return cfg.client.list_contacts(cfg.grant_id)

    def describe(self, item) -> str:
        return item.name


class WebhooksView(_CrudView):
    name = "webhooks"
    title = "Webhooks"
    noun = "webhook"
    columns = [
        Column("ID", lambda w: w.id),
        Column("URL", lambda w: w.url),
        Column("Triggers", lambda w: ", ".join(w.triggers)),
        Column("Status", lambda w: w.status),
    ]
    form_fields = [("url", "URL"), ("triggers", "Triggers")]
    key_actions = {"n": Action.CREATE, "e": Action.EDIT, "t": Action.TEST}
    view_hints = _CrudView.view_hints + [("t", "test")]

    def fetch(self):
        return self.ctx.config.client.list_webhooks()

    def field_values(self, item):
        return {"url": item.url, "triggers": ", ".join(item.triggers)}

    def item_actions(self):
        actions = super().item_actions()
        actions[Action.TEST] = lambda hook, _: self.mutate(
            "test", lambda: self.ctx.config.client.test_webhook(hook.id), f"Test sent to {hook.url}"
        )
        return actions


# ─── Grants ────────────────────────────────────────────────────────────


class GrantsView(ResourceTableView):
    name = "grants"
    title = "Grants"
    noun = "grant"
    columns = [
        Column("Email", lambda g: g.email),
        Column("Provider", lambda g: g.provider),
        Column("ID", lambda g: g.id),
    ]
    view_hints = [("enter", "switch")]

    def __init__(self, ctx):
        super().__init__(ctx)
        self.columns = [Column("", self._marker)] + GrantsView.columns

    def _marker(self, grant) -> str:
        return "*" if grant.id == self.ctx.config.grant_id else ""

    def hints(self):
        return [("j/k", "move")] + self.view_hints

    def fetch(self):
        return self.ctx.config.client.list_grants()

    def item_actions(self):
        return {
            Action.OPEN: lambda g, _: self.switch(g),
            Action.SWITCH: lambda g, _: self.switch(g),
        }

    def switch(self, grant) -> None:
        """Make grant active; failures are warnings and change nothing."""
        try:
            self.ctx.session.switch_grant(grant.id, grant.email, grant.provider)
        except GrantSwitchError as e:
            self.ctx.flash(FlashLevel.WARN, str(e))
            return
        self.ctx.flash(FlashLevel.INFO, f"Switched to {grant.email}")
        if self.ctx.navigator is not None:
            self.ctx.navigator.invalidate_loaded()
        self._rebuild()


def create_messages_view(ctx):
    return MessagesView(ctx)


def create_events_view(ctx):
    return EventsView(ctx)


def create_contacts_view(ctx):
    return ContactsView(ctx)


def create_webhooks_view(ctx):
    return WebhooksView(ctx)


def create_grants_view(ctx):
    return GrantsView(ctx)
