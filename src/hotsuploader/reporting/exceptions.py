"""Central reporting of unhandled exceptions from every execution context."""

from __future__ import annotations

import logging
import sys
import threading
from types import TracebackType
from typing import Any, Final

from hotsuploader.dispatch import Dispatcher, TaskPool
from hotsuploader.presentation.protocols import NoticePresenter
from hotsuploader.reporting.notice import NoticeRenderer

logger: Final = logging.getLogger(__name__)

DISPATCHER_CHANNEL: Final = "dispatcher"
TASK_CHANNEL: Final = "task"
DOMAIN_CHANNEL: Final = "domain"


class ExceptionReporter:
    """Logs unhandled exceptions and shows a best-effort notice.

    Three independent channels are watched:

    - ``dispatcher``: callbacks running on the presentation thread
    - ``task``: background tasks whose failure nobody collected
    - ``domain``: anything that reaches ``sys.excepthook`` or
      ``threading.excepthook``

    Reporting never raises. A presenter that cannot show the notice (for
    example when no UI thread exists yet) is ignored.
    """

    def __init__(
        self,
        presenter: NoticePresenter,
        dispatcher: Dispatcher,
        tasks: TaskPool,
        renderer: NoticeRenderer | None = None,
    ) -> None:
        self.presenter = presenter
        self.dispatcher = dispatcher
        self.tasks = tasks
        self.renderer = renderer or NoticeRenderer()
        self.installed = False
        self._previous_excepthook: Any = None
        self._previous_thread_excepthook: Any = None

    def install(self) -> None:
        """Subscribe to all three failure channels."""
        if self.installed:
            return

        self.dispatcher.exception_handler = lambda exc: self.report(exc, DISPATCHER_CHANNEL)
        self.tasks.exception_handler = lambda exc: self.report(exc, TASK_CHANNEL)

        self._previous_excepthook = sys.excepthook
        self._previous_thread_excepthook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._thread_excepthook

        self.installed = True
        logger.debug("Exception reporter installed")

    def uninstall(self) -> None:
        """Restore the hooks that were active before :meth:`install`."""
        if not self.installed:
            return

        self.dispatcher.exception_handler = None
        self.tasks.exception_handler = None
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._thread_excepthook:
            threading.excepthook = self._previous_thread_excepthook

        self.installed = False

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        self.report(exc_value, DOMAIN_CHANNEL)

    def _thread_excepthook(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_value is None or issubclass(args.exc_type, SystemExit):
            return
        self.report(args.exc_value, DOMAIN_CHANNEL)

    def report(self, exc: BaseException, channel: str) -> None:
        """Log and display an unhandled exception.

        Args:
            exc: The exception
            channel: Originating channel tag
        """
        logger.error("Unhandled %s exception", channel, exc_info=exc)
        try:
            notice = self.renderer.render(exc, channel)
            self.presenter.show_notice(notice)
        except Exception as notice_exc:
            # probably not on a UI thread
            logger.debug("Could not display notice: %s", notice_exc)
