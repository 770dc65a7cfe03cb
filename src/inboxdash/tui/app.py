"""Main TUI application using Textual.

// [LAW:single-enforcer] on_key is the sole key dispatcher; it hands every
//   key to ModeDispatcher and never interprets keys itself.
// [LAW:single-enforcer] on__redraw_pending is the only consumer of RedrawQueue.
"""

from __future__ import annotations

import logging
import time
import traceback

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message

from inboxdash.app.config import Config
from inboxdash.app.grants import GrantSession
from inboxdash.tui.command_definitions import build_default_registry
from inboxdash.tui.dispatcher import ModeDispatcher
from inboxdash.tui.footer import CrumbsBar, HintsFooter
from inboxdash.tui.help_panel import create_help_overlay
from inboxdash.tui.input_modes import InputMode
from inboxdash.tui.page_stack import PageEntry
from inboxdash.tui.palette import CommandPaletteOverlay
from inboxdash.tui.prompt import PromptBar
from inboxdash.tui.refresh import AsyncRefreshScheduler, RedrawQueue
from inboxdash.tui.resolver import CommandResolver
from inboxdash.tui.status import FlashLevel, StatusIndicator, StatusModel, StatusTicker
from inboxdash.tui.view_registry import ViewRegistry
from inboxdash.tui.views.base import ViewContext

logger = logging.getLogger(__name__)


class _RedrawPending(Message, bubble=False):
    """Thread-safe bridge: worker/ticker threads → app message pump."""


class InboxDashApp(App, inherit_bindings=False):
    """k9s-style dashboard over messages, events, contacts, webhooks and grants."""

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    #header {
        dock: top;
        height: 1;
        background: $panel;
    }
    #pages {
        height: 1fr;
    }
    """

    def __init__(self, config: Config, start_thread=None, clock=time.monotonic):
        super().__init__()
        self._config = config
        self._clock = clock
        self.session = GrantSession(config)
        self.status_model = StatusModel(clock)
        self.status_model.account = config.email
        self.redraw_queue = RedrawQueue()

        scheduler_kwargs = {"start_thread": start_thread} if start_thread is not None else {}
        self.scheduler = AsyncRefreshScheduler(
            self.redraw_queue, on_error=self._on_fetch_error, **scheduler_kwargs
        )

        self.command_registry = build_default_registry()
        self.view_context = ViewContext(
            session=self.session,
            scheduler=self.scheduler,
            flash=self.flash,
            commands=self.command_registry,
        )
        self.view_registry = ViewRegistry(self.view_context)
        self.dispatcher = ModeDispatcher(
            self.view_registry,
            CommandResolver(self.command_registry),
            host=self,
            flash=self.flash,
            palette_surface_factory=CommandPaletteOverlay,
            help_factory=create_help_overlay,
            use_palette=config.command_palette,
        )
        self.view_context.navigator = self.dispatcher
        self.ticker = StatusTicker(self.redraw_queue, self._on_status_tick)
        self._last_auto_refresh = clock()
        self._chrome_ready = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="header"):
            yield CrumbsBar(id="crumbs")
            yield StatusIndicator(id="status")
        yield Vertical(id="pages")
        yield PromptBar(id="prompt")
        yield HintsFooter(id="hints")

    def on_mount(self) -> None:
        theme = self._config.theme
        if theme and theme in self.available_themes:
            self.theme = theme
        elif theme:
            logger.warning("unknown theme %r, keeping default", theme)

        self._chrome_ready = True
        self.redraw_queue.set_wake(self._wake)
        self.dispatcher.start(self._config.initial_view)
        self.ticker.start()
        self._repaint_status()
        self.redraw_queue.drain()

    def on_unmount(self) -> None:
        self.ticker.stop()
        self.redraw_queue.set_wake(None)
        logger.info("inboxdash TUI shutting down")

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the UI running.

        Logs the traceback and shows a flash instead of tearing down the app.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        logger.error("Unhandled exception: %s\n%s", error, tb)
        self.flash(FlashLevel.ERROR, f"{type(error).__name__}: {error}")

    # ─── Redraw queue ──────────────────────────────────────────────────

    def _wake(self) -> None:
        # Called from any thread.
        self.post_message(_RedrawPending())

    def on__redraw_pending(self, message: _RedrawPending) -> None:
        self.redraw_queue.drain()
        self._sync_chrome()

    # ─── Status ────────────────────────────────────────────────────────

    def flash(self, level: FlashLevel, text: str) -> None:
        self.status_model.set_flash(level, text)
        self._repaint_status()

    def _on_fetch_error(self, key: str, error: Exception) -> None:
        self.flash(FlashLevel.ERROR, f"{key}: {error}")

    def _on_status_tick(self) -> None:
        self.status_model.tick()
        interval = self._config.refresh_interval
        now = self._clock()
        if (
            interval > 0
            and self.status_model.live
            and self.dispatcher.mode is InputMode.NORMAL
            and not self.dispatcher.in_detail_overlay()
            and now - self._last_auto_refresh >= interval
        ):
            self._last_auto_refresh = now
            self.dispatcher.refresh_active()
        self._repaint_status()

    def _repaint_status(self) -> None:
        if not self._chrome_ready:
            return
        self.query_one("#status", StatusIndicator).show(self.status_model)

    # ─── KernelHost ────────────────────────────────────────────────────

    def sync_page(self, entry: PageEntry) -> None:
        """Show only entry.surface; drop surfaces that left the stack."""
        pages = self.query_one("#pages", Vertical)
        keep = {id(e.surface) for e in self.dispatcher.stack.entries()}
        keep.update(id(view.surface) for view in self.view_registry.created())
        for child in list(pages.children):
            if id(child) not in keep:
                child.remove()
            else:
                child.display = child is entry.surface
        surface = entry.surface
        surface.display = True
        if surface.parent is None:
            pages.mount(surface)
        self._sync_chrome()

    def sync_mode(self) -> None:
        mode = self.dispatcher.mode
        prompt = self.query_one("#prompt", PromptBar)
        if mode in (InputMode.COMMAND_PROMPT, InputMode.FILTER_PROMPT):
            prompt.show_state(self.dispatcher.state.prompt)
        else:
            prompt.hide()
        if mode is InputMode.PALETTE:
            entry = self.dispatcher.stack.top_entry()
            if entry is not None and isinstance(entry.surface, CommandPaletteOverlay):
                entry.surface.refresh_display()
        self._sync_chrome()

    def exit_app(self) -> None:
        self.exit()

    def _sync_chrome(self) -> None:
        if not self._chrome_ready:
            return
        self.status_model.account = self.session.config.email
        self.query_one("#crumbs", CrumbsBar).update_display(self.dispatcher.crumbs())
        self.query_one("#hints", HintsFooter).update_display(self.dispatcher.hints())
        self._repaint_status()

    # ─── Keys ──────────────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        try:
            consumed = self.dispatcher.dispatch(event)
        except Exception as e:
            logger.exception("key %r failed", event.key)
            self.flash(FlashLevel.ERROR, f"{event.key}: {e}")
            consumed = True
        if consumed:
            event.prevent_default()
            self._sync_chrome()
