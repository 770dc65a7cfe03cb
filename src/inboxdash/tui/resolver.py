"""Typed command line -> canonical resolution.

Resolution order:
1. digits only       -> select row N
2. exact alias match -> the registered command
3. "e <resource>"    -> navigate to that resource (vim ":e <buffer>")
4. anything else     -> no-op; unknown commands are silently ignored
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from inboxdash.tui.actions import Action
from inboxdash.tui.commands import Command, CommandKind, CommandRegistry

logger = logging.getLogger(__name__)

_JUMP_VERB = "e "


class ResolutionKind(Enum):
    SELECT_ROW = "select_row"
    NAVIGATE = "navigate"
    ACTION = "action"
    QUIT = "quit"
    HELP = "help"
    REFRESH = "refresh"
    NOOP = "noop"


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    target: str = ""
    action: Action | None = None
    arg: object = None
    command: Command | None = None


NOOP = Resolution(ResolutionKind.NOOP)

_KIND_MAP = {
    CommandKind.NAVIGATE: ResolutionKind.NAVIGATE,
    CommandKind.ACTION: ResolutionKind.ACTION,
    CommandKind.QUIT: ResolutionKind.QUIT,
    CommandKind.HELP: ResolutionKind.HELP,
    CommandKind.REFRESH: ResolutionKind.REFRESH,
    CommandKind.GROUP: ResolutionKind.NOOP,
}


def clamp_row(n: int, row_count: int) -> int:
    """Clamp a 1-indexed row number to [1, row_count]."""
    return max(1, min(n, max(row_count, 1)))


class CommandResolver:
    def __init__(self, registry: CommandRegistry):
        self.registry = registry

    def resolve(self, text: str) -> Resolution:
        text = text.strip()
        if not text:
            return NOOP

        if text.isascii() and text.isdigit():
            return Resolution(ResolutionKind.SELECT_ROW, action=Action.SELECT_ROW, arg=int(text))

        cmd = self.registry.get(text)
        if cmd is not None:
            return self._from_command(cmd)

        if text.startswith(_JUMP_VERB):
            target = self.registry.get(text[len(_JUMP_VERB):].strip())
            if target is not None and target.kind is CommandKind.NAVIGATE:
                return self._from_command(target)

        logger.debug("ignoring unknown command %r", text)
        return NOOP

    @staticmethod
    def _from_command(cmd: Command) -> Resolution:
        return Resolution(
            _KIND_MAP[cmd.kind],
            target=cmd.target,
            action=cmd.action,
            arg=cmd.arg,
            command=cmd,
        )
