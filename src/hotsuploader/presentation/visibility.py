"""Startup presentation: main window or tray only."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Final

from hotsuploader.observable import Signal
from hotsuploader.presentation.protocols import TrayIcon, WindowFactory
from hotsuploader.settings.store import SettingsStore
from hotsuploader.system.autostart import AUTORUN_ARG, AutostartRegistry

logger: Final = logging.getLogger(__name__)


class Presentation(Enum):
    """What the user sees after startup."""

    WINDOW = "window"
    TRAY = "tray"


class VisibilityCoordinator:
    """Chooses between the main window and the tray icon.

    A login-triggered launch with ``minimize_to_tray`` enabled shows only
    the tray icon. Activating the tray opens the main window and hides the
    icon; going back to the tray is left to the UI layer.
    """

    def __init__(
        self,
        tray: TrayIcon,
        window_factory: WindowFactory,
        store: SettingsStore,
        autostart: AutostartRegistry,
        executable: Path,
    ) -> None:
        self.tray = tray
        self.window_factory = window_factory
        self.store = store
        self.autostart = autostart
        self.executable = executable
        self.autostart_changed: Signal[bool] = Signal()
        self.tray.on_activate(self._on_tray_activated)

    def resolve_initial(self, launch_args: Sequence[str]) -> Presentation:
        """Show the tray or the main window for this launch."""
        if AUTORUN_ARG in launch_args and self.store.settings.minimize_to_tray:
            self.tray.visible = True
            logger.debug("Autorun launch, starting in tray")
            return Presentation.TRAY

        self.show_main_window()
        return Presentation.WINDOW

    def show_main_window(self) -> None:
        self.window_factory().show()

    def _on_tray_activated(self) -> None:
        if not self.tray.visible:
            return
        self.show_main_window()
        self.tray.visible = False

    @property
    def start_with_windows(self) -> bool:
        """Whether a login entry exists for this executable."""
        return self.autostart.is_registered(self.executable)

    @start_with_windows.setter
    def start_with_windows(self, enabled: bool) -> None:
        if enabled:
            self.autostart.register(self.executable, AUTORUN_ARG)
        else:
            self.autostart.unregister(self.executable)
        self.autostart_changed.emit(self.start_with_windows)
