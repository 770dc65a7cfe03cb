"""Built-in command table.

// [LAW:one-source-of-truth] Every typed command, alias and palette entry is defined here.
"""

from inboxdash.tui.actions import Action
from inboxdash.tui.commands import Command, CommandCategory, CommandKind, CommandRegistry

_NAV = CommandKind.NAVIGATE
_ACT = CommandKind.ACTION
_GROUP = CommandKind.GROUP


def _nav(name, aliases, description, target=None, category=CommandCategory.NAVIGATION):
    return Command(name, _NAV, description, category,
                   aliases=tuple(aliases), target=target or name)


def _act(name, aliases, description, category, action, arg=None, shortcut="", context=""):
    return Command(name, _ACT, description, category, aliases=tuple(aliases),
                   action=action, arg=arg, shortcut=shortcut, context_view=context)


def _sub(name, aliases, description, action, arg=None):
    return Command(name, _ACT, description, CommandCategory.SYSTEM,
                   aliases=tuple(aliases), action=action, arg=arg)


_CRUD = (
    _sub("new", ["create"], "Create new {}", Action.CREATE),
    _sub("edit", ["update"], "Edit current {}", Action.EDIT),
    _sub("delete", ["del"], "Delete current {}", Action.DELETE),
)


def _crud(noun, extra=()):
    return tuple(
        Command(s.name, s.kind, s.description.format(noun), s.category,
                aliases=s.aliases, action=s.action, arg=s.arg)
        for s in _CRUD
    ) + tuple(extra)


COMMANDS: list[Command] = [
    # Navigation
    _nav("messages", ["m", "msg"], "Go to messages view"),
    _nav("events", ["e", "ev"], "Go to calendar events view"),
    _nav("calendar", ["cal", "week"], "Go to calendar week view"),
    _nav("contacts", ["c", "ct"], "Go to contacts view"),
    _nav("webhooks", ["w", "wh"], "Go to webhooks view"),
    _nav("grants", ["g", "gr"], "Go to grants/accounts view"),
    _nav("dashboard", ["d", "dash", "home"], "Go to dashboard"),

    # Messages
    _act("compose", ["n", "new"], "Compose new email", CommandCategory.MESSAGES,
         Action.COMPOSE, shortcut="n"),
    _act("reply", ["r"], "Reply to current message", CommandCategory.MESSAGES,
         Action.REPLY, shortcut="R", context="messages"),
    _act("replyall", ["ra", "reply-all"], "Reply all to message", CommandCategory.MESSAGES,
         Action.REPLY_ALL, shortcut="A", context="messages"),
    _act("forward", ["f", "fwd"], "Forward message", CommandCategory.MESSAGES,
         Action.FORWARD, shortcut="F", context="messages"),
    _act("star", ["s"], "Toggle star on message", CommandCategory.MESSAGES,
         Action.STAR, shortcut="s", context="messages"),
    _act("unstar", [], "Remove star from message", CommandCategory.MESSAGES,
         Action.UNSTAR, context="messages"),
    _act("read", ["mr"], "Mark as read", CommandCategory.MESSAGES,
         Action.MARK_READ, context="messages"),
    _act("unread", ["mu"], "Mark as unread", CommandCategory.MESSAGES,
         Action.MARK_UNREAD, shortcut="u", context="messages"),
    _act("delete", ["del", "rm"], "Delete current item", CommandCategory.MESSAGES,
         Action.DELETE, shortcut="dd"),
    _act("archive", [], "Archive message", CommandCategory.MESSAGES,
         Action.ARCHIVE, shortcut="x", context="messages"),

    # Calendar
    Command("event", _GROUP, "Event management", CommandCategory.CALENDAR,
            context_view="events", subcommands=_crud("event")),
    Command("rsvp", _GROUP, "RSVP to event", CommandCategory.CALENDAR, context_view="events",
            subcommands=tuple(
                _sub(answer, [], f"RSVP {answer} to event", Action.RSVP, answer)
                for answer in ("yes", "no", "maybe")
            )),
    _nav("availability", ["avail"], "Check availability", category=CommandCategory.CALENDAR),
    _nav("find-time", ["findtime"], "Find meeting time", target="availability",
         category=CommandCategory.CALENDAR),

    # Contacts
    Command("contact", _GROUP, "Contact management", CommandCategory.CONTACTS,
            context_view="contacts", subcommands=_crud("contact")),

    # Webhooks
    Command("webhook", _GROUP, "Webhook management", CommandCategory.WEBHOOKS,
            context_view="webhooks",
            subcommands=_crud("webhook", [_sub("test", [], "Test current webhook", Action.TEST)])),

    # Folders
    Command("folder", _GROUP, "Folder management", CommandCategory.FOLDERS,
            context_view="messages",
            subcommands=tuple(
                _sub(folder, [], f"Show {folder} folder", Action.SHOW_FOLDER, folder)
                for folder in ("inbox", "sent", "drafts", "trash", "archive")
            )),
    _act("inbox", [], "Go to inbox folder", CommandCategory.FOLDERS, Action.SHOW_FOLDER, "inbox"),
    _act("sent", [], "Go to sent folder", CommandCategory.FOLDERS, Action.SHOW_FOLDER, "sent"),
    _act("trash", [], "Go to trash folder", CommandCategory.FOLDERS, Action.SHOW_FOLDER, "trash"),
    _act("drafts", ["dr"], "Go to drafts", CommandCategory.FOLDERS, Action.SHOW_FOLDER, "drafts"),

    # Vim
    Command("quit", CommandKind.QUIT, "Quit application", CommandCategory.VIM,
            aliases=("q", "exit")),
    Command("quit!", CommandKind.QUIT, "Force quit", CommandCategory.VIM, aliases=("q!",)),
    Command("wq", CommandKind.QUIT, "Save and quit", CommandCategory.VIM, aliases=("x",)),
    Command("help", CommandKind.HELP, "Show help", CommandCategory.VIM,
            aliases=("h",), shortcut="?"),
    _act("top", ["first", "gg"], "Go to first row", CommandCategory.VIM,
         Action.GO_TOP, shortcut="gg"),
    _act("bottom", ["last", "G"], "Go to last row", CommandCategory.VIM,
         Action.GO_BOTTOM, shortcut="G"),

    # System
    Command("refresh", CommandKind.REFRESH, "Refresh current view", CommandCategory.SYSTEM,
            aliases=("reload",), shortcut="r"),
]


def build_default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for cmd in COMMANDS:
        registry.register(cmd)
    return registry
