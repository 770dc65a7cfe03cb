"""Two-key timed chords (gg, dd) recognized from single key presses."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from inboxdash.tui.actions import CHORD_ACTIONS, Action

CHORD_TIMEOUT = 0.5  # seconds


@dataclass
class ChordState:
    pending_key: str | None = None
    pressed_at: float = 0.0


class KeyChordDetector:
    """Feed chord-eligible keys; returns the action when a chord completes.

    A pending key older than CHORD_TIMEOUT is stale and never matched: the
    next press of the same key starts a fresh window instead.
    """

    def __init__(self, state: ChordState | None = None,
                 clock: Callable[[], float] = time.monotonic,
                 actions: dict[str, Action] | None = None):
        self.state = state if state is not None else ChordState()
        self._clock = clock
        self._actions = CHORD_ACTIONS if actions is None else actions

    def is_chord_key(self, key: str) -> bool:
        return key in self._actions

    @property
    def pending(self) -> bool:
        return self.state.pending_key is not None

    def feed(self, key: str) -> Action | None:
        now = self._clock()
        state = self.state
        if (
            state.pending_key == key
            and now - state.pressed_at <= CHORD_TIMEOUT
        ):
            self.reset()
            return self._actions[key]
        state.pending_key = key
        state.pressed_at = now
        return None

    def reset(self) -> None:
        self.state.pending_key = None
        self.state.pressed_at = 0.0
