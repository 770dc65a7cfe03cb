"""Shared action vocabulary for keys and typed commands.

Both the key dispatcher and the command resolver call View.perform() with
one of these; views map their own keys onto the same values, so a key
press and a typed command run the same code.
"""

from enum import Enum


class Action(Enum):
    # Movement
    GO_TOP = "go_top"
    GO_BOTTOM = "go_bottom"
    SELECT_ROW = "select_row"  # arg: 1-indexed row number
    HALF_PAGE_DOWN = "half_page_down"
    HALF_PAGE_UP = "half_page_up"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"

    # Item actions
    OPEN = "open"
    DELETE = "delete"
    ARCHIVE = "archive"
    STAR = "star"
    UNSTAR = "unstar"
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    COMPOSE = "compose"
    REPLY = "reply"
    REPLY_ALL = "reply_all"
    FORWARD = "forward"
    CREATE = "create"
    EDIT = "edit"
    TEST = "test"
    RSVP = "rsvp"  # arg: "yes" | "no" | "maybe"
    SHOW_FOLDER = "show_folder"  # arg: folder name
    SWITCH = "switch"


# Keys that scroll by page; resolved before the view sees them.
PAGE_KEYS: dict[str, Action] = {
    "ctrl+d": Action.HALF_PAGE_DOWN,
    "ctrl+u": Action.HALF_PAGE_UP,
    "ctrl+f": Action.PAGE_DOWN,
    "ctrl+b": Action.PAGE_UP,
}

# Two-key chords: pressing the key twice within the chord window runs the action.
CHORD_ACTIONS: dict[str, Action] = {
    "g": Action.GO_TOP,
    "d": Action.DELETE,
}

# Single-shot globals that act immediately and never touch chord state.
SINGLE_SHOT_ACTIONS: dict[str, Action] = {
    "G": Action.GO_BOTTOM,
    "x": Action.ARCHIVE,
}
