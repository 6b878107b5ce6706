"""Scheduler package for the recurring update check."""

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import Final

from hotsuploader.scheduling.models import UpdateSchedule

logger: Final = logging.getLogger(__name__)


class Scheduler:
    """Fires a callback on a fixed period for the lifetime of the process.

    The first tick happens one full interval after :meth:`start`; the caller
    runs the immediate check itself. Ticks are not serialised against the
    work they trigger, the callback is expected to hand that work off to the
    background pool and return.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval: timedelta = UpdateSchedule.interval,
    ) -> None:
        if interval.total_seconds() <= 0:
            raise ValueError("Scheduler interval must be positive")
        self.callback = callback
        self.interval = interval
        self.ticks = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start ticking on a daemon thread."""
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run, name="hotsuploader-scheduler", daemon=True
        )
        self._thread.start()
        logger.debug("Scheduler started, every %s", self.interval)

    def run(self) -> None:
        """Tick until stopped."""
        seconds = self.interval.total_seconds()
        while not self._stop.wait(seconds):
            self.ticks += 1
            logger.debug("Scheduler tick %d", self.ticks)
            self.callback()

    def stop(self, timeout: float | None = 1.0) -> None:
        """Stop ticking and wake the timer thread immediately."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None


__all__ = ["Scheduler", "UpdateSchedule"]
