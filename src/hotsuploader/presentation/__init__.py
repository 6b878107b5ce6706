"""Presentation package - window/tray protocols and startup visibility."""

from .protocols import (
    ConsoleNoticePresenter,
    ConsoleWindow,
    HeadlessTrayIcon,
    MainWindow,
    NoticePresenter,
    TrayIcon,
    WindowFactory,
)
from .visibility import Presentation, VisibilityCoordinator

__all__ = [
    "ConsoleNoticePresenter",
    "ConsoleWindow",
    "HeadlessTrayIcon",
    "MainWindow",
    "NoticePresenter",
    "Presentation",
    "TrayIcon",
    "VisibilityCoordinator",
    "WindowFactory",
]
