"""Textual in-process test harness for inboxdash.

Re-exports the public API:
    from tests.harness import run_app, press_and_settle, SyncThreads
"""

from tests.harness.app_runner import SyncThreads, make_config, run_app
from tests.harness.interactions import press_and_settle, press_sequence

__all__ = ["SyncThreads", "make_config", "run_app", "press_and_settle", "press_sequence"]
