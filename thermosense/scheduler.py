from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger("thermosense.scheduler")


class Ticker:
    """
    Repeating timer on a daemon thread.

    Calls ``callback()`` every ``interval_s`` seconds until ``stop()``.
    A failing callback is logged and the ticker keeps going.

    Each started thread owns its own stop event, so a thread that outlives
    ``stop(timeout=...)`` still exits after its current callback and never
    runs alongside the thread of a later ``start()``.
    """

    def __init__(self, interval_s: float, callback: Callable[[], object], *, name: str = "thermosense-ticker"):
        if interval_s <= 0.0:
            raise ValueError(f"interval_s must be > 0, got {interval_s}")
        self.interval_s = float(interval_s)
        self.callback = callback
        self.name = name
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop is not None
            and not self._stop.is_set()
        )

    def _loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_s):
            try:
                self.callback()
            except Exception:
                logger.exception("Tick callback failed")

    def start(self) -> None:
        if self.is_running:
            return
        stop_event = threading.Event()
        self._stop = stop_event
        self._thread = threading.Thread(target=self._loop, args=(stop_event,), name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Ticker started ({self.interval_s:.3f}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._stop is not None:
            self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None
        logger.debug("Ticker stopped")
