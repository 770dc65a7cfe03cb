"""Settings file I/O for inboxdash.

Manages a JSON settings file at XDG_CONFIG_HOME/inboxdash/settings.json.
INBOXDASH_SETTINGS overrides the path (tests point it at tmp_path).

Import as: import inboxdash.io.settings
"""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# [LAW:one-source-of-truth] All known settings and their defaults.
SCHEMA: dict[str, object] = {
    "theme": None,
    "initial_view": "dashboard",
    "refresh_interval": 30.0,
    "command_palette": True,
    "default_grant": None,
}


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def _is_optional_str(value) -> bool:
    return value is None or isinstance(value, str)


# Accepted value shape per key; anything else falls back to the SCHEMA default.
_VALID = {
    "theme": _is_optional_str,
    "initial_view": lambda v: isinstance(v, str) and bool(v),
    "refresh_interval": _is_number,
    "command_palette": lambda v: isinstance(v, bool),
    "default_grant": _is_optional_str,
}


def get_config_path() -> Path:
    """Return path to settings file."""
    override = os.environ.get("INBOXDASH_SETTINGS")
    if override:
        return Path(override)
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "inboxdash" / "settings.json"


def load_settings() -> dict:
    """Load settings merged over SCHEMA defaults.

    Unknown keys are dropped; a missing or corrupt file yields the defaults,
    and so does any single value of the wrong type.
    """
    path = get_config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        data = {}
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("ignoring unreadable settings file %s: %s", path, e)
        data = {}
    if not isinstance(data, dict):
        logger.warning("ignoring settings file %s: expected an object", path)
        data = {}
    values = {}
    for key, default in SCHEMA.items():
        value = data.get(key, default)
        if not _VALID[key](value):
            logger.warning("ignoring setting %s=%r in %s: invalid value", key, value, path)
            value = default
        values[key] = value
    return values


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Writes to a temp file then renames to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)
