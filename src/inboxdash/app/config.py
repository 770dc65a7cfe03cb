"""Immutable startup configuration consumed by the kernel.

// [LAW:one-source-of-truth] Settings file defaults < CLI overrides, resolved once here.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

import inboxdash.io.settings


@dataclass(frozen=True)
class Config:
    client: Any
    grant_store: Any = None
    grant_id: str = ""
    email: str = ""
    provider: str = ""
    refresh_interval: float = 30.0
    initial_view: str = "dashboard"
    theme: str | None = None
    command_palette: bool = True

    def with_grant(self, grant_id: str, email: str, provider: str) -> "Config":
        """Copy with a new active grant identity; nothing else changes."""
        return dataclasses.replace(self, grant_id=grant_id, email=email, provider=provider)


def build_config(client, grant_store=None, overrides: dict | None = None) -> Config:
    """Merge persisted settings with explicit overrides (None means "not given")."""
    values = inboxdash.io.settings.load_settings()
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    return Config(
        client=client,
        grant_store=grant_store,
        grant_id=str(values.get("grant_id") or values.get("default_grant") or ""),
        email=str(values.get("email") or ""),
        provider=str(values.get("provider") or ""),
        refresh_interval=float(values["refresh_interval"]),
        initial_view=str(values["initial_view"] or "dashboard"),
        theme=values["theme"],
        command_palette=bool(values["command_palette"]),
    )
