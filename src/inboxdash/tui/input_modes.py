"""Input modes and the consolidated kernel state.

All keyboard input routes through ModeDispatcher.dispatch based on the
current mode. Textual BINDINGS are not used.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from inboxdash.tui.chords import ChordState
from inboxdash.tui.palette import PaletteState
from inboxdash.tui.prompt import PromptState


class InputMode(Enum):
    """Mutually exclusive input modes.

    Chord-pending is not a mode: it is ChordState.pending_key, only
    consulted in NORMAL.
    """
    NORMAL = auto()
    COMMAND_PROMPT = auto()
    FILTER_PROMPT = auto()
    PALETTE = auto()


@dataclass
class KernelState:
    """// [LAW:single-enforcer] Mutated only by ModeDispatcher."""

    mode: InputMode = InputMode.NORMAL
    chord: ChordState = field(default_factory=ChordState)
    prompt: PromptState = field(default_factory=PromptState)
    palette: PaletteState = field(default_factory=PaletteState)
    quit_requested: bool = False


# [LAW:one-source-of-truth] Hint menu per prompt mode; NORMAL uses the view's hints.
PROMPT_HINTS: dict[InputMode, list[tuple[str, str]]] = {
    InputMode.COMMAND_PROMPT: [
        ("enter", "run"),
        ("esc", "cancel"),
        ("^U", "clear"),
        ("^W", "del-word"),
    ],
    InputMode.FILTER_PROMPT: [
        ("enter", "filter"),
        ("esc", "clear"),
        ("^A/^E", "home/end"),
    ],
}

# Hints appended after every view's own hints in NORMAL.
GLOBAL_HINTS: list[tuple[str, str]] = [
    (":", "cmd"),
    ("/", "filter"),
    ("?", "help"),
    ("r", "refresh"),
]

# [LAW:one-source-of-truth] Display data for the help overlay.
KEY_GROUPS: list[tuple[str, list[tuple[str, str]]]] = [
    ("Nav", [
        ("gg/G", "Top / bottom"),
        ("j/k", "Row down / up"),
        ("^D/^U", "Half page"),
        ("^F/^B", "Full page"),
        ("enter", "Open"),
        ("esc", "Back"),
    ]),
    ("Items", [
        ("dd", "Delete"),
        ("x", "Archive"),
        ("s", "Star"),
        ("u", "Unread"),
        ("n", "Compose"),
    ]),
    ("Prompt", [
        (":", "Command"),
        ("/", "Filter"),
        (":42", "Select row 42"),
        (":e <view>", "Jump to view"),
    ]),
    ("Other", [
        ("r", "Refresh"),
        ("?", "This help"),
        ("^C", "Quit"),
    ]),
]
