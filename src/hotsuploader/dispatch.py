"""Execution contexts: the presentation dispatcher and the background pool."""

from __future__ import annotations

import itertools
import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum
from typing import Any, Final

logger: Final = logging.getLogger(__name__)

ExceptionHandler = Callable[[BaseException], None]


class ShutdownMode(Enum):
    """When the dispatcher loop ends on its own."""

    ON_LAST_WINDOW_CLOSE = "on_last_window_close"
    ON_EXPLICIT_SHUTDOWN = "on_explicit_shutdown"


class Dispatcher:
    """Queue of callables processed on the presentation thread.

    Work posted from any thread runs on the thread that calls :meth:`run`.
    A callback that raises is handed to the registered exception handler and
    the loop keeps going; without a handler the exception propagates.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[Callable[..., Any], tuple[Any, ...]] | None] = (
            queue.Queue()
        )
        self._stopped = threading.Event()
        self.shutdown_mode = ShutdownMode.ON_LAST_WINDOW_CLOSE
        self.exception_handler: ExceptionHandler | None = None

    @property
    def is_running(self) -> bool:
        return not self._stopped.is_set()

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Queue a callback for the presentation thread."""
        self._queue.put((callback, args))

    def _invoke(self, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            callback(*args)
        except Exception as exc:
            if self.exception_handler is None:
                raise
            self.exception_handler(exc)

    def process_pending(self) -> int:
        """Run every queued callback without blocking.

        Returns:
            Number of callbacks run
        """
        count = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return count
            if item is None:
                continue
            self._invoke(*item)
            count += 1

    def run(self) -> None:
        """Process callbacks until :meth:`shutdown` is called."""
        while not self._stopped.is_set():
            item = self._queue.get()
            if item is None:
                continue
            self._invoke(*item)
        logger.debug("Dispatcher loop finished")

    def shutdown(self) -> None:
        """Stop the loop once the current callback returns."""
        self._stopped.set()
        self._queue.put(None)

    def last_window_closed(self) -> None:
        """Called by the UI layer when no window remains open."""
        if self.shutdown_mode is ShutdownMode.ON_LAST_WINDOW_CLOSE:
            logger.debug("Last window closed, shutting down")
            self.shutdown()


class TaskPool:
    """Cooperative pool for work that must not block the presentation thread.

    Tasks started with :meth:`spawn` are fire-and-forget: each runs on its own
    daemon thread, so work still in flight at exit is abandoned rather than
    awaited. A failure nobody collects is handed to the registered exception
    handler.
    """

    def __init__(self, name_prefix: str = "hotsuploader-task") -> None:
        self.name_prefix = name_prefix
        self.exception_handler: ExceptionHandler | None = None
        self._closed = False
        self._counter = itertools.count(1)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def spawn(self, func: Callable[..., Any], *args: Any) -> Future[Any]:
        """Start ``func`` in the background without awaiting it.

        After :meth:`shutdown` the returned future is already cancelled.
        """
        future: Future[Any] = Future()
        if self._closed:
            future.cancel()
            return future

        future.add_done_callback(self._on_done)
        thread = threading.Thread(
            target=self._run,
            args=(future, func, args),
            name=f"{self.name_prefix}-{next(self._counter)}",
            daemon=True,
        )
        thread.start()
        return future

    @staticmethod
    def _run(future: Future[Any], func: Callable[..., Any], args: tuple[Any, ...]) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = func(*args)
        except BaseException as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)

    def _on_done(self, future: Future[Any]) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            return
        if self.exception_handler is None:
            logger.error("Unobserved task exception", exc_info=exc)
            return
        self.exception_handler(exc)

    def shutdown(self) -> None:
        """Refuse new work; running tasks are abandoned, not awaited."""
        self._closed = True
