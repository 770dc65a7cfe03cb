"""Grant store contract and active-grant switching.

// [LAW:single-enforcer] GrantSession.switch_grant is the only writer of the active grant.
"""

from __future__ import annotations

import logging
from typing import Protocol

import inboxdash.io.settings
from inboxdash.app.config import Config
from inboxdash.errors import GrantSwitchError, GrantSwitchUnavailable

logger = logging.getLogger(__name__)


class GrantStore(Protocol):
    def set_default_grant(self, grant_id: str) -> None: ...


class JsonGrantStore:
    """Persists the default grant id into the settings file."""

    def set_default_grant(self, grant_id: str) -> None:
        inboxdash.io.settings.save_setting("default_grant", grant_id)


class GrantSession:
    """Holds the current Config snapshot and swaps it on grant switch."""

    def __init__(self, config: Config):
        self._config = config

    @property
    def config(self) -> Config:
        return self._config

    def can_switch_grant(self) -> bool:
        return self._config.grant_store is not None

    def switch_grant(self, grant_id: str, email: str, provider: str) -> Config:
        """Make grant_id active. Raises GrantSwitchError; config is untouched on failure."""
        store = self._config.grant_store
        if store is None:
            raise GrantSwitchUnavailable()
        try:
            store.set_default_grant(grant_id)
        except Exception as e:
            raise GrantSwitchError(f"could not set default grant {grant_id}: {e}") from e
        self._config = self._config.with_grant(grant_id, email, provider)
        logger.info("switched active grant to %s (%s)", email, grant_id)
        return self._config
