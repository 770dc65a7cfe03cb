"""Tests for settings file I/O and Config construction."""

import json
import logging

import pytest

import inboxdash.io.settings as settings
from inboxdash.app.api import DemoClient
from inboxdash.app.config import Config, build_config


def test_missing_file_yields_defaults(isolated_settings):
    assert not isolated_settings.exists()
    assert settings.load_settings() == settings.SCHEMA


def test_save_and_load_round_trip(isolated_settings):
    settings.save_setting("theme", "nord")
    assert json.loads(isolated_settings.read_text())["theme"] == "nord"
    assert settings.load_settings()["theme"] == "nord"


def test_unknown_keys_dropped(isolated_settings):
    isolated_settings.write_text(json.dumps({"initial_view": "events", "bogus": 1}))
    loaded = settings.load_settings()
    assert loaded["initial_view"] == "events"
    assert "bogus" not in loaded


def test_corrupt_file_falls_back_to_defaults(isolated_settings):
    isolated_settings.write_text("{not json")
    assert settings.load_settings() == settings.SCHEMA


def test_build_config_applies_overrides_over_settings(isolated_settings):
    isolated_settings.write_text(json.dumps({"refresh_interval": 10, "theme": "nord"}))
    config = build_config(DemoClient(), overrides={"theme": "dracula", "initial_view": None})
    assert config.theme == "dracula"
    assert config.refresh_interval == 10.0
    assert config.initial_view == "dashboard"
    assert config.command_palette is True


def test_build_config_uses_default_grant(isolated_settings):
    isolated_settings.write_text(json.dumps({"default_grant": "grant-work"}))
    assert build_config(DemoClient()).grant_id == "grant-work"


def test_with_grant_copies_only_identity():
    client = DemoClient()
    config = Config(client=client, theme="nord", refresh_interval=5.0)
    switched = config.with_grant("grant-work", "work@example.com", "microsoft")
    assert switched is not config
    assert (switched.grant_id, switched.email, switched.provider) == (
        "grant-work", "work@example.com", "microsoft")
    assert switched.theme == "nord"
    assert switched.client is client
    assert config.grant_id == ""


@pytest.mark.parametrize("key, bad", [
    ("refresh_interval", "fast"),
    ("refresh_interval", True),
    ("refresh_interval", -5),
    ("command_palette", "no"),
    ("initial_view", 3),
    ("initial_view", ""),
    ("theme", ["nord"]),
    ("default_grant", 7),
])
def test_wrong_type_falls_back_to_default_with_warning(isolated_settings, caplog, key, bad):
    isolated_settings.write_text(json.dumps({"default_grant": "grant-work", key: bad}))
    with caplog.at_level(logging.WARNING, logger="inboxdash.io.settings"):
        loaded = settings.load_settings()
    assert loaded[key] == settings.SCHEMA[key]
    assert key in caplog.text
    if key != "default_grant":
        assert loaded["default_grant"] == "grant-work"


def test_non_object_file_yields_defaults(isolated_settings):
    isolated_settings.write_text("[1, 2]")
    assert settings.load_settings() == settings.SCHEMA


def test_build_config_survives_bad_types(isolated_settings):
    isolated_settings.write_text(json.dumps({
        "refresh_interval": "soon", "command_palette": "false", "initial_view": None,
    }))
    config = build_config(DemoClient())
    assert config.refresh_interval == 30.0
    assert config.command_palette is True
    assert config.initial_view == "dashboard"
