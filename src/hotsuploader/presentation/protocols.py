# src/hotsuploader/presentation/protocols.py
from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Final, Protocol, runtime_checkable

import typer

if TYPE_CHECKING:
    from hotsuploader.reporting.notice import ErrorNotice

logger: Final = logging.getLogger(__name__)


@runtime_checkable
class TrayIcon(Protocol):
    """Protocol defining the background tray affordance.

    The tray is created hidden and is shown when the application starts
    without a main window. Activation callbacks run on the UI thread.
    """

    visible: bool

    def on_activate(self, callback: Callable[[], None]) -> None:
        """Register a callback for a click/activation of the tray icon."""
        ...

    def dispose(self) -> None:
        """Remove the icon and release its OS resources."""
        ...


@runtime_checkable
class MainWindow(Protocol):
    """Protocol for the main application window."""

    def show(self) -> None:
        """Show the window."""
        ...


@runtime_checkable
class NoticePresenter(Protocol):
    """Protocol for the modal notice shown for unexpected failures."""

    def show_notice(self, notice: ErrorNotice) -> None:
        """Show a notice and block until the user dismisses it."""
        ...


WindowFactory = Callable[[], MainWindow]


class HeadlessTrayIcon:
    """Tray stand-in for sessions without a desktop shell."""

    def __init__(self) -> None:
        self._visible = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        if value != self._visible:
            logger.info("Tray icon %s", "shown" if value else "hidden")
        self._visible = value

    def on_activate(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def activate(self) -> None:
        for callback in list(self._callbacks):
            callback()

    def dispose(self) -> None:
        self._visible = False
        self._callbacks.clear()


class ConsoleWindow:
    """Main window stand-in that only reports being shown."""

    def show(self) -> None:
        logger.info("Main window shown")


class ConsoleNoticePresenter:
    """Writes notices to stderr."""

    def show_notice(self, notice: ErrorNotice) -> None:
        if sys.stderr is None:
            raise RuntimeError("No console available for notices")
        typer.secho(notice.title, fg=typer.colors.RED, err=True)
        typer.echo(notice.message, err=True)


class MockTrayIcon(HeadlessTrayIcon):
    """Mock implementation of TrayIcon for testing."""

    def __init__(self) -> None:
        super().__init__()
        self.dispose_calls = 0

    def dispose(self) -> None:
        self.dispose_calls += 1
        super().dispose()


class MockMainWindow:
    """Mock implementation of MainWindow for testing."""

    def __init__(self) -> None:
        self.show_calls = 0

    def show(self) -> None:
        self.show_calls += 1


class MockWindowFactory:
    """Window factory that keeps every window it creates."""

    def __init__(self) -> None:
        self.windows: list[MockMainWindow] = []

    def __call__(self) -> MockMainWindow:
        window = MockMainWindow()
        self.windows.append(window)
        return window

    @property
    def shown(self) -> int:
        return sum(w.show_calls for w in self.windows)


class MockNoticePresenter:
    """Mock implementation of NoticePresenter for testing."""

    def __init__(self) -> None:
        self.notices: list[ErrorNotice] = []

    def show_notice(self, notice: ErrorNotice) -> None:
        self.notices.append(notice)


class FailingNoticePresenter:
    """Presenter that simulates having no UI thread available."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or RuntimeError("not on the UI thread")
        self.attempts = 0

    def show_notice(self, notice: ErrorNotice) -> None:
        self.attempts += 1
        raise self.error
