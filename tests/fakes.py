"""Test doubles for the kernel: clock, key events, views, overlays and host."""

from types import SimpleNamespace

from inboxdash.tui.actions import Action
from inboxdash.tui.chords import KeyChordDetector
from inboxdash.tui.command_definitions import build_default_registry
from inboxdash.tui.dispatcher import ModeDispatcher
from inboxdash.tui.input_modes import KernelState
from inboxdash.tui.resolver import CommandResolver
from inboxdash.tui.view_registry import ViewRegistry, ViewSpec


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def event(key: str, character: str | None = None):
    """Key event with the two attributes the dispatcher reads."""
    if character is None and len(key) == 1:
        character = key
    return SimpleNamespace(key=key, character=character)


def type_text(dispatcher, text: str) -> None:
    for ch in text:
        dispatcher.dispatch(event(ch))


class FakeView:
    """Records every call; supports the actions in `supported`."""

    def __init__(self, name, supported=(Action.GO_TOP, Action.GO_BOTTOM, Action.SELECT_ROW,
                                        Action.DELETE, Action.ARCHIVE, Action.STAR)):
        self.name = name
        self.title = name.title()
        self.surface = SimpleNamespace(label=f"{name}-surface")
        self.supported = set(supported)
        self.calls: list = []
        self.keys: list[str] = []
        self.consume_escape = False

    def hints(self):
        return [("j/k", "move")]

    def load(self):
        self.calls.append(("load",))

    def refresh(self):
        self.calls.append(("refresh",))

    def filter(self, text):
        self.calls.append(("filter", text))

    def handle_key(self, ev):
        self.keys.append(ev.key)
        if ev.key == "escape":
            return self.consume_escape
        return ev.key in ("j", "k", "enter")

    def perform(self, action, arg=None):
        if action not in self.supported:
            return False
        self.calls.append(("perform", action, arg))
        return True

    def performed(self, action):
        return [c for c in self.calls if c[0] == "perform" and c[1] is action]


class FakeOverlay:
    title = "Detail"

    def __init__(self):
        self.keys: list[str] = []

    def hints(self):
        return [("esc", "back")]

    def handle_key(self, ev):
        self.keys.append(ev.key)
        return True


class FakeHost:
    def __init__(self):
        self.pages: list = []
        self.mode_syncs = 0
        self.exited = False

    def sync_page(self, entry):
        self.pages.append(entry)

    def sync_mode(self):
        self.mode_syncs += 1

    def exit_app(self):
        self.exited = True


VIEW_NAMES = ["dashboard", "messages", "events", "contacts", "webhooks", "grants"]


def make_dispatcher(use_palette=False, clock=None, help_factory=None):
    """Dispatcher over FakeViews; returns (dispatcher, host, views, flashes)."""
    views = {name: FakeView(name) for name in VIEW_NAMES}
    specs = [ViewSpec(name, lambda _ctx, n=name: views[n]) for name in VIEW_NAMES]
    registry = ViewRegistry(context=None, specs=specs)
    host = FakeHost()
    flashes: list = []
    state = KernelState()
    chords = KeyChordDetector(state.chord, clock=clock) if clock is not None else None
    dispatcher = ModeDispatcher(
        registry,
        CommandResolver(build_default_registry()),
        host,
        lambda level, text: flashes.append((level, text)),
        help_factory=help_factory,
        chords=chords,
        use_palette=use_palette,
        state=state,
    )
    dispatcher.start("dashboard")
    return dispatcher, host, views, flashes
