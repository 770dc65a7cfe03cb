"""Status line: flash messages, clock and the 1 Hz ticker that repaints it."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from rich.text import Text
from textual.widgets import Static

from inboxdash.tui.refresh import RedrawQueue, UiUpdate

logger = logging.getLogger(__name__)

FLASH_SECONDS = 3.0
TICK_INTERVAL = 1.0


class FlashLevel(Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


_FLASH_STYLES = {
    FlashLevel.INFO: "bold green",
    FlashLevel.WARN: "bold yellow",
    FlashLevel.ERROR: "bold red",
}

_LOG_LEVELS = {
    FlashLevel.INFO: logging.INFO,
    FlashLevel.WARN: logging.WARNING,
    FlashLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Flash:
    text: str
    level: FlashLevel
    expires_at: float


class StatusModel:
    """What the status line shows. Touched only on the UI thread."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.flash: Flash | None = None
        self.account: str = ""
        self.live: bool = True

    def set_flash(self, level: FlashLevel, text: str, seconds: float = FLASH_SECONDS) -> None:
        logger.log(_LOG_LEVELS[level], "flash: %s", text)
        self.flash = Flash(text, level, self._clock() + seconds)

    def tick(self) -> None:
        """Drop an expired flash."""
        if self.flash is not None and self._clock() >= self.flash.expires_at:
            self.flash = None

    def render(self, now: datetime | None = None) -> Text:
        now = now or datetime.now()
        text = Text()
        if self.flash is not None:
            text.append(self.flash.text, style=_FLASH_STYLES[self.flash.level])
            text.append("  ")
        if self.account:
            text.append(self.account, style="cyan")
            text.append("  ")
        text.append("● live" if self.live else "‖ paused", style="green" if self.live else "dim")
        text.append("  ")
        text.append(now.strftime("%H:%M:%S"), style="bold")
        return text


class StatusTicker:
    """Background 1 Hz timer that enqueues a status repaint.

    Runs while the lock-protected running flag is true; stop() is final and
    a stopped ticker never restarts.
    """

    def __init__(self, redraw_queue: RedrawQueue, on_tick: Callable[[], None],
                 interval: float = TICK_INTERVAL):
        self._queue = redraw_queue
        self._on_tick = on_tick
        self._interval = interval
        self._lock = threading.Lock()
        self._running = False
        self._stopped = False
        self._wakeup = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> bool:
        with self._lock:
            if self._running or self._stopped:
                return False
            self._running = True
        self._thread = threading.Thread(target=self._run, name="status-ticker", daemon=True)
        self._thread.start()
        return True

    def stop(self) -> None:
        with self._lock:
            self._running = False
            self._stopped = True
        self._wakeup.set()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            self._wakeup.wait(self._interval)
            with self._lock:
                if not self._running:
                    return
            self._queue.put(UiUpdate(self._on_tick, label="status-tick"))


class StatusIndicator(Static):
    """Right side of the header row."""

    DEFAULT_CSS = """
    StatusIndicator {
        width: 1fr;
        height: 1;
        content-align: right middle;
        text-align: right;
    }
    """

    def show(self, model: StatusModel) -> None:
        self.update(model.render())
