"""inboxdash: k9s-style terminal dashboard for an email/calendar API."""

__version__ = "0.3.0"
