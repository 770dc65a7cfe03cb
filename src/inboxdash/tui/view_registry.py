"""View registry: one lazily created, session-lifetime view per resource name.

// [LAW:one-source-of-truth] All named-view metadata lives in VIEW_SPECS.
// [LAW:locality-or-seam] Adding a view = one entry here + the view module.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

HOME_VIEW = "dashboard"


@dataclass(frozen=True)
class ViewSpec:
    """Name and factory path of a navigable view."""

    name: str
    factory: str  # dotted path to a callable(context) -> View


VIEW_SPECS: list[ViewSpec] = [
    ViewSpec("dashboard", "inboxdash.tui.views.dashboard.create_dashboard_view"),
    ViewSpec("messages", "inboxdash.tui.views.resources.create_messages_view"),
    ViewSpec("events", "inboxdash.tui.views.resources.create_events_view"),
    ViewSpec("calendar", "inboxdash.tui.views.calendar_view.create_calendar_view"),
    ViewSpec("availability", "inboxdash.tui.views.availability.create_availability_view"),
    ViewSpec("contacts", "inboxdash.tui.views.resources.create_contacts_view"),
    ViewSpec("webhooks", "inboxdash.tui.views.resources.create_webhooks_view"),
    ViewSpec("grants", "inboxdash.tui.views.resources.create_grants_view"),
]


def _resolve_factory(dotted_path: str):
    """Resolve a dotted factory path like 'inboxdash.tui.views.dashboard.create_dashboard_view'."""
    module_path, func_name = dotted_path.rsplit(".", 1)
    mod = importlib.import_module(module_path)
    return getattr(mod, func_name)


class ViewRegistry:
    """Creates views on first request and caches them by name.

    Construction does no I/O; the caller schedules load() on first display.
    """

    def __init__(self, context, specs: list[ViewSpec] | None = None, home: str = HOME_VIEW):
        self._context = context
        self._factories = {s.name: s.factory for s in (specs if specs is not None else VIEW_SPECS)}
        self._home = home
        self._views: dict[str, object] = {}

    @property
    def names(self) -> list[str]:
        return list(self._factories)

    def resolve_name(self, name: str) -> str:
        """Canonical name for a navigation target; unknown names become home."""
        if name in self._factories:
            return name
        logger.debug("unknown view %r, falling back to %s", name, self._home)
        return self._home

    def get_or_create(self, name: str):
        name = self.resolve_name(name)
        view = self._views.get(name)
        if view is None:
            factory = self._factories[name]
            if isinstance(factory, str):
                factory = _resolve_factory(factory)
            view = factory(self._context)
            self._views[name] = view
            logger.debug("created view %s", name)
        return view

    def get(self, name: str):
        return self._views.get(name)

    def is_registered(self, name: str) -> bool:
        """True if name is a named view that has been created."""
        return name in self._views

    def created(self) -> list:
        return list(self._views.values())
