"""ModeDispatcher: the single key-event entry point and page-stack navigator.

Routing, evaluated in priority order for every key:
1. PALETTE active          -> palette owns the key
2. COMMAND/FILTER prompt   -> prompt owns the key; enter/escape commit and close
3. detail overlay on top   -> only ctrl+c and escape intercepted, rest forwarded
4. NORMAL on a named view  -> global bindings, then the active view

// [LAW:single-enforcer] The only writer of KernelState and the only caller of PageStack.pop.
// [LAW:one-source-of-truth] Crumbs, hints and focus always derive from the top entry.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from inboxdash.tui.actions import PAGE_KEYS, SINGLE_SHOT_ACTIONS, Action
from inboxdash.tui.chords import KeyChordDetector
from inboxdash.tui.input_modes import GLOBAL_HINTS, PROMPT_HINTS, InputMode, KernelState
from inboxdash.tui.page_stack import PageEntry, PageStack
from inboxdash.tui.palette import CommandPalette, PaletteOutcome
from inboxdash.tui.prompt import PromptKind, handle_prompt_key
from inboxdash.tui.resolver import CommandResolver, ResolutionKind
from inboxdash.tui.status import FlashLevel
from inboxdash.tui.view_registry import ViewRegistry

logger = logging.getLogger(__name__)

PALETTE_PAGE = "palette"
HELP_PAGE = "help"


class KernelHost(Protocol):
    """What the dispatcher needs from the surrounding UI."""

    def sync_page(self, entry: PageEntry) -> None:
        """Show entry.surface, update crumbs/hints, move focus to it."""
        ...

    def sync_mode(self) -> None:
        """Show or hide the prompt bar to match the current mode."""
        ...

    def exit_app(self) -> None: ...


class ModeDispatcher:
    def __init__(
        self,
        registry: ViewRegistry,
        resolver: CommandResolver,
        host: KernelHost,
        flash: Callable[[FlashLevel, str], None],
        *,
        palette: CommandPalette | None = None,
        palette_surface_factory: Callable[[CommandPalette], object] | None = None,
        help_factory: Callable[["ModeDispatcher"], object] | None = None,
        chords: KeyChordDetector | None = None,
        use_palette: bool = True,
        state: KernelState | None = None,
    ):
        self.registry = registry
        self.resolver = resolver
        self.host = host
        self._flash = flash
        self.state = state if state is not None else KernelState()
        self.stack = PageStack()
        self.chords = chords if chords is not None else KeyChordDetector(self.state.chord)
        self.palette = palette if palette is not None else CommandPalette(
            resolver.registry, self.state.palette
        )
        self._palette_surface_factory = palette_surface_factory
        self._help_factory = help_factory
        self.use_palette = use_palette
        self._loaded: set[str] = set()

    # ─── Derived state ─────────────────────────────────────────────────

    @property
    def mode(self) -> InputMode:
        return self.state.mode

    def active_view(self):
        """The named view on top of the stack, or None when an overlay is on top."""
        entry = self.stack.top_entry()
        if entry is None:
            return None
        view = self.registry.get(entry.name)
        if view is None or view.surface is not entry.surface:
            return None
        return view

    def in_detail_overlay(self) -> bool:
        return len(self.stack) > 1 and self.active_view() is None

    def hints(self) -> list[tuple[str, str]]:
        if self.mode in PROMPT_HINTS:
            return PROMPT_HINTS[self.mode]
        entry = self.stack.top_entry()
        if entry is None:
            return []
        view = self.active_view()
        if view is not None:
            return list(view.hints()) + GLOBAL_HINTS
        return list(entry.surface.hints()) if hasattr(entry.surface, "hints") else []

    def crumbs(self) -> list[str]:
        result = []
        for entry in self.stack.entries():
            view = self.registry.get(entry.name)
            if view is not None and view.surface is entry.surface:
                result.append(view.title)
            else:
                result.append(getattr(entry.surface, "title", entry.name))
        return result

    # ─── Navigation ────────────────────────────────────────────────────

    def start(self, initial_view: str) -> None:
        self.navigate_to(initial_view)

    def navigate_to(self, name: str) -> None:
        """Collapse to a single frame showing the named view (unknown -> dashboard)."""
        view = self.registry.get_or_create(name)
        self.stack.switch_to(view.name, view.surface)
        self.chords.reset()
        self._sync_page()
        if view.name not in self._loaded:
            self._loaded.add(view.name)
            view.load()

    def push_detail(self, name: str, surface) -> None:
        self.stack.push(name, surface)
        self.chords.reset()
        self._sync_page()

    def pop_detail(self) -> bool:
        """Pop one level unless that would remove the home entry."""
        if len(self.stack) <= 1:
            return False
        popped = self.stack.pop()
        logger.debug("popped %s, now %s", popped, self.stack.names())
        self._sync_page()
        return True

    go_back = pop_detail

    def invalidate_loaded(self) -> None:
        """Views not currently on screen reload next time they are shown."""
        current = self.active_view()
        self._loaded = {current.name} if current is not None else set()

    def _sync_page(self) -> None:
        entry = self.stack.top_entry()
        if entry is not None:
            self.host.sync_page(entry)

    # ─── Prompt / palette ──────────────────────────────────────────────

    def open_command_prompt(self) -> None:
        self._set_prompt_mode(InputMode.COMMAND_PROMPT, PromptKind.COMMAND)

    def open_filter_prompt(self) -> None:
        self._set_prompt_mode(InputMode.FILTER_PROMPT, PromptKind.FILTER)

    def _set_prompt_mode(self, mode: InputMode, kind: PromptKind) -> None:
        self.chords.reset()
        self.state.prompt.reset(kind)
        self.state.mode = mode
        self.host.sync_mode()

    def close_prompt(self) -> None:
        self.state.mode = InputMode.NORMAL
        self.host.sync_mode()
        self._sync_page()

    def open_palette(self) -> None:
        self.chords.reset()
        view = self.active_view()
        self.palette.open(getattr(view, "name", ""))
        self.state.mode = InputMode.PALETTE
        surface = (
            self._palette_surface_factory(self.palette)
            if self._palette_surface_factory is not None
            else self.palette
        )
        self.push_detail(PALETTE_PAGE, surface)
        self.host.sync_mode()

    def close_palette(self) -> None:
        self.state.mode = InputMode.NORMAL
        if self.stack.top() == PALETTE_PAGE:
            self.pop_detail()
        self.host.sync_mode()

    # ─── Commands ──────────────────────────────────────────────────────

    def on_command(self, text: str) -> None:
        """Resolve and run a command from the prompt, palette or help overlay."""
        resolution = self.resolver.resolve(text)
        kind = resolution.kind
        if kind is ResolutionKind.NOOP:
            return
        logger.debug("command %r -> %s", text, kind.value)
        if kind is ResolutionKind.NAVIGATE:
            self.navigate_to(resolution.target)
        elif kind in (ResolutionKind.ACTION, ResolutionKind.SELECT_ROW):
            if not self.perform(resolution.action, resolution.arg):
                name = resolution.command.name if resolution.command else text
                self._flash(FlashLevel.WARN, f"{name}: not available here")
        elif kind is ResolutionKind.QUIT:
            self.quit()
        elif kind is ResolutionKind.HELP:
            self.show_help()
        elif kind is ResolutionKind.REFRESH:
            self.refresh_active()

    def on_filter(self, text: str) -> None:
        view = self.active_view()
        if view is None:
            return
        view.filter(text)
        view.refresh()

    def perform(self, action: Action, arg: object = None) -> bool:
        view = self.active_view()
        if view is None:
            return False
        return bool(view.perform(action, arg))

    def refresh_active(self) -> None:
        view = self.active_view()
        if view is not None:
            view.refresh()

    def show_help(self) -> None:
        if self._help_factory is None:
            return
        self.push_detail(HELP_PAGE, self._help_factory(self))

    def quit(self) -> None:
        self.state.quit_requested = True
        self.host.exit_app()

    # ─── Key dispatch ──────────────────────────────────────────────────

    def dispatch(self, event) -> bool:
        """Route one key event. Returns True if it was consumed."""
        mode = self.state.mode
        if mode is InputMode.PALETTE:
            return self._dispatch_palette(event)
        if mode in (InputMode.COMMAND_PROMPT, InputMode.FILTER_PROMPT):
            return self._dispatch_prompt(event)
        if self.in_detail_overlay():
            return self._dispatch_overlay(event)
        return self._dispatch_normal(event)

    def _dispatch_palette(self, event) -> bool:
        outcome = self.palette.handle_key(event)
        if outcome is PaletteOutcome.KEEP_OPEN:
            self.host.sync_mode()
            return True
        committed = self.palette.committed
        self.close_palette()
        if outcome is PaletteOutcome.COMMIT:
            self.on_command(committed)
        return True

    def _dispatch_prompt(self, event) -> bool:
        result = handle_prompt_key(self.state.prompt, event)
        if result is None:
            self.host.sync_mode()
            return True
        was_filter = self.state.mode is InputMode.FILTER_PROMPT
        self.close_prompt()
        if was_filter:
            self.on_filter(result)
        elif result:
            self.on_command(result)
        return True

    def _dispatch_overlay(self, event) -> bool:
        if event.key == "ctrl+c":
            self.quit()
            return True
        if event.key == "escape":
            self.pop_detail()
            return True
        entry = self.stack.top_entry()
        return bool(entry.surface.handle_key(event))

    def _dispatch_normal(self, event) -> bool:
        key = event.key
        view = self.active_view()

        if key == "ctrl+c":
            self.quit()
            return True

        if key == "escape":
            if view is not None and view.handle_key(event):
                return True
            self.pop_detail()
            return True

        if key in PAGE_KEYS:
            self.perform(PAGE_KEYS[key])
            return True

        char = event.character
        if char == ":":
            if self.use_palette:
                self.open_palette()
            else:
                self.open_command_prompt()
            return True
        if char == "/":
            self.open_filter_prompt()
            return True
        if char == "?":
            self.show_help()
            return True
        if key == "r":
            self.refresh_active()
            return True

        if self.chords.is_chord_key(key):
            action = self.chords.feed(key)
            if action is not None:
                self.perform(action)
            return True

        if key in SINGLE_SHOT_ACTIONS:
            self.perform(SINGLE_SHOT_ACTIONS[key])
            return True

        if view is not None:
            return bool(view.handle_key(event))
        return False
