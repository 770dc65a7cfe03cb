"""Off-thread data loads merged back through a single UI-thread redraw queue.

Pattern:
1. submit() bumps the key's generation and starts a worker thread.
2. The worker runs fetch(); the value or the exception is wrapped in a
   UiUpdate and put on the bounded RedrawQueue. Nothing else is touched
   from the worker.
3. wake() (thread-safe) asks the UI thread to drain().
4. drain() runs updates in enqueue order on the UI thread.

// [LAW:single-enforcer] drain() is the only place worker results reach view state.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

REDRAW_QUEUE_SIZE = 256


@dataclass(frozen=True)
class UiUpdate:
    """A unit of work to run on the UI thread."""

    callback: Callable[[], None]
    label: str = ""


class RedrawQueue:
    """Bounded FIFO of UiUpdate; producers are any thread, the consumer is the UI thread."""

    def __init__(self, maxsize: int = REDRAW_QUEUE_SIZE, wake: Callable[[], None] | None = None):
        self._queue: queue.Queue[UiUpdate] = queue.Queue(maxsize=maxsize)
        self._wake = wake

    def set_wake(self, wake: Callable[[], None] | None) -> None:
        self._wake = wake

    def put(self, update: UiUpdate) -> None:
        self._queue.put(update)
        wake = self._wake
        if wake is not None:
            wake()

    def drain(self) -> int:
        """Run every queued update in order. Returns how many ran."""
        ran = 0
        while True:
            try:
                update = self._queue.get_nowait()
            except queue.Empty:
                return ran
            try:
                update.callback()
            except Exception:
                logger.exception("redraw callback %s failed", update.label or update.callback)
            ran += 1

    def __len__(self) -> int:
        return self._queue.qsize()


def _start_thread(target: Callable[[], None], name: str) -> None:
    threading.Thread(target=target, name=name, daemon=True).start()


class AsyncRefreshScheduler:
    """Runs blocking fetches on worker threads and applies results on the UI thread.

    With discard_stale (the default) every key carries a monotonic
    generation: a completion whose generation is older than the newest
    submit for that key is dropped, so a slow stale fetch can never
    overwrite newer data. With discard_stale=False the last applied
    completion wins.
    """

    def __init__(
        self,
        redraw_queue: RedrawQueue,
        on_error: Callable[[str, Exception], None] | None = None,
        discard_stale: bool = True,
        start_thread: Callable[[Callable[[], None], str], None] = _start_thread,
    ):
        self.queue = redraw_queue
        self._on_error = on_error
        self._discard_stale = discard_stale
        self._start_thread = start_thread
        self._generations: dict[str, int] = defaultdict(int)

    def submit(
        self,
        key: str,
        fetch: Callable[[], object],
        apply: Callable[[object], None],
        on_error: Callable[[Exception], None] | None = None,
    ) -> int:
        """Start fetch() off the UI thread; returns the generation assigned to it."""
        self._generations[key] += 1
        generation = self._generations[key]

        def _worker():
            try:
                value = fetch()
            except Exception as e:
                logger.warning("fetch %s#%d failed: %s", key, generation, e)
                self.queue.put(UiUpdate(
                    lambda err=e: self._complete_error(key, generation, err, on_error),
                    label=f"{key}#{generation}:error",
                ))
                return
            self.queue.put(UiUpdate(
                lambda: self._complete_ok(key, generation, value, apply),
                label=f"{key}#{generation}",
            ))

        self._start_thread(_worker, f"fetch-{key}-{generation}")
        return generation

    def is_current(self, key: str, generation: int) -> bool:
        return not self._discard_stale or generation == self._generations[key]

    def _complete_ok(self, key, generation, value, apply) -> None:
        if not self.is_current(key, generation):
            logger.debug("dropping stale result %s#%d", key, generation)
            return
        apply(value)

    def _complete_error(self, key, generation, error, on_error) -> None:
        if not self.is_current(key, generation):
            logger.debug("dropping stale error %s#%d: %s", key, generation, error)
            return
        if on_error is not None:
            on_error(error)
        elif self._on_error is not None:
            self._on_error(key, error)
