"""Command registry: names, aliases and palette search.

The registry is filled once by command_definitions.build_default_registry()
and only read afterwards. Lookup is exact and case-sensitive ("G" and "g"
are different commands); palette search is case-insensitive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from inboxdash.tui.actions import Action

logger = logging.getLogger(__name__)


class CommandCategory(Enum):
    NAVIGATION = "Navigation"
    MESSAGES = "Messages"
    CALENDAR = "Calendar"
    CONTACTS = "Contacts"
    WEBHOOKS = "Webhooks"
    FOLDERS = "Folders"
    VIM = "Vim Commands"
    SYSTEM = "System"


# Display order for help and palette grouping.
CATEGORY_ORDER = list(CommandCategory)


class CommandKind(Enum):
    NAVIGATE = "navigate"
    ACTION = "action"
    QUIT = "quit"
    HELP = "help"
    REFRESH = "refresh"
    GROUP = "group"  # parent of sub-commands, does nothing on its own


@dataclass(frozen=True)
class Command:
    name: str
    kind: CommandKind
    description: str
    category: CommandCategory
    aliases: tuple[str, ...] = ()
    target: str = ""  # view name for NAVIGATE
    action: Action | None = None
    arg: object = None
    shortcut: str = ""
    context_view: str = ""  # "" = available everywhere
    subcommands: tuple["Command", ...] = field(default=(), compare=False)

    def all_names(self) -> tuple[str, ...]:
        return (self.name,) + self.aliases

    def display_aliases(self) -> str:
        return ", ".join(self.aliases)


def match_score(target: str, query: str) -> int:
    """Lower is better: 0 exact, 1 prefix, 2 contains, 3 in-order fuzzy, -1 no match."""
    target = target.lower()
    if target == query:
        return 0
    if target.startswith(query):
        return 1
    if query in target:
        return 2
    it = iter(target)
    if all(ch in it for ch in query):
        return 3
    return -1


def _context_tier(cmd: Command, context: str) -> int:
    return 0 if context and cmd.context_view == context else 1


class CommandRegistry:
    def __init__(self):
        self._commands: list[Command] = []
        self._by_name: dict[str, Command] = {}

    def register(self, cmd: Command) -> None:
        """Add cmd and its sub-commands ("event new", "event create", ...)."""
        self._commands.append(cmd)
        self._index(cmd)
        for sub in cmd.subcommands:
            full = Command(
                name=f"{cmd.name} {sub.name}",
                kind=sub.kind,
                description=sub.description,
                category=cmd.category,
                aliases=tuple(f"{cmd.name} {a}" for a in sub.aliases),
                target=sub.target,
                action=sub.action,
                arg=sub.arg,
                shortcut=sub.shortcut,
                context_view=sub.context_view or cmd.context_view,
            )
            self._commands.append(full)
            self._index(full)

    def _index(self, cmd: Command) -> None:
        for name in cmd.all_names():
            existing = self._by_name.setdefault(name, cmd)
            if existing is not cmd:
                logger.warning("command name %r already registered by %s; keeping first",
                               name, existing.name)

    def get(self, name: str) -> Command | None:
        return self._by_name.get(name)

    def top_level(self, context: str = "") -> list[Command]:
        """All top-level commands: those scoped to context first, then by name."""
        return sorted((c for c in self._commands if " " not in c.name),
                      key=lambda c: (_context_tier(c, context), c.name))

    def by_category(self) -> list[tuple[CommandCategory, list[Command]]]:
        groups = []
        for cat in CATEGORY_ORDER:
            cmds = [c for c in self._commands if c.category is cat and " " not in c.name]
            if cmds:
                groups.append((cat, cmds))
        return groups

    def subcommands(self, parent: str) -> list[Command]:
        """Direct children of parent, named by their last word."""
        prefix = parent.strip() + " "
        result = []
        for cmd in self._commands:
            if cmd.name.startswith(prefix) and " " not in cmd.name[len(prefix):]:
                result.append(cmd)
        return result

    def has_subcommands(self, name: str) -> bool:
        return bool(self.subcommands(name))

    def search(self, query: str, context: str = "") -> list[Command]:
        """Top-level commands matching query.

        Best match first; on equal scores commands scoped to the context
        view come before the rest, then alphabetical.
        """
        query = query.strip().lower()
        if not query:
            return self.top_level(context)
        scored = []
        for cmd in self._commands:
            if " " in cmd.name:
                continue
            scores = [s for s in (match_score(n, query) for n in cmd.all_names()) if s >= 0]
            if scores:
                scored.append((min(scores), _context_tier(cmd, context), cmd.name, cmd))
        scored.sort(key=lambda t: t[:3])
        return [t[3] for t in scored]

    def search_subcommands(self, parent: str, query: str) -> list[Command]:
        subs = self.subcommands(parent)
        query = query.strip().lower()
        if not query:
            return subs
        prefix = parent.strip() + " "
        return [
            cmd for cmd in subs
            if any(match_score(n[len(prefix):], query) >= 0
                   for n in cmd.all_names() if n.startswith(prefix))
        ]
