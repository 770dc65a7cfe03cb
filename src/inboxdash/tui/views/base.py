"""View contracts shared by the kernel and every concrete view.

A view is a named, session-lifetime object created by ViewRegistry. An
overlay is an ephemeral surface pushed above a view (detail, form, help);
overlays are never registered, which is how the dispatcher tells the two
apart.

Both use structural typing: concrete classes don't inherit these protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

from inboxdash.tui.actions import Action

Hint = tuple[str, str]  # (key, description)


class View(Protocol):
    name: str
    title: str

    @property
    def surface(self) -> Any:
        """The widget shown while this view is on top of the page stack."""
        ...

    def hints(self) -> list[Hint]: ...

    def load(self) -> None:
        """Start the first data load. Must not block: fetches go through the scheduler."""
        ...

    def refresh(self) -> None: ...

    def filter(self, text: str) -> None: ...

    def handle_key(self, event) -> bool:
        """Return True if the key was consumed, False to pass it through."""
        ...

    def perform(self, action: Action, arg: object = None) -> bool:
        """Run a shared action. Return False if this view does not support it."""
        ...


class Overlay(Protocol):
    title: str

    def hints(self) -> list[Hint]: ...

    def handle_key(self, event) -> bool: ...


@dataclass
class ViewContext:
    """Everything a view may touch outside itself.

    navigator is the ModeDispatcher; it is attached after construction
    because the dispatcher and the registry need each other.
    """

    session: Any  # GrantSession
    scheduler: Any  # AsyncRefreshScheduler
    flash: Callable[..., None]  # flash(level: FlashLevel, text: str)
    commands: Any = None  # CommandRegistry
    navigator: Any = None

    @property
    def config(self):
        return self.session.config

    @property
    def client(self):
        return self.session.config.client
