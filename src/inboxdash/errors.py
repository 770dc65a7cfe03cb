"""Exception types shared across inboxdash.

Workers never let these cross the thread boundary: the refresh scheduler
catches them and the UI thread turns them into flash messages.
"""


class InboxDashError(Exception):
    """Base class for all inboxdash errors."""


class ApiError(InboxDashError):
    """A fetch or mutation against the remote API failed."""

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"{operation}: {detail}")


class GrantSwitchError(InboxDashError):
    """Switching the active grant failed."""


class GrantSwitchUnavailable(GrantSwitchError):
    """No grant store is configured, so the active grant cannot change."""

    def __init__(self):
        super().__init__(
            "grant switching is not available: no grant store configured (demo mode?)"
        )
