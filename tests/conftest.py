"""Pytest configuration and shared fixtures for inboxdash tests."""

import pytest

from tests.fakes import FakeClock


def pytest_configure(config):
    config.addinivalue_line("markers", "textual: in-process Textual pilot tests")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings and logs at tmp_path so tests never touch the real home."""
    path = tmp_path / "settings.json"
    monkeypatch.setenv("INBOXDASH_SETTINGS", str(path))
    monkeypatch.setenv("INBOXDASH_LOG_DIR", str(tmp_path / "logs"))
    return path


@pytest.fixture
def clock():
    return FakeClock()
