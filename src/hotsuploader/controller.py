# filepath: src/hotsuploader/controller.py
"""Core lifecycle controller for the Hotsapi Uploader."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from pathlib import Path
from types import TracebackType
from typing import Final

from hotsuploader.dispatch import Dispatcher, ShutdownMode, TaskPool
from hotsuploader.manager import IdleManager, ManagerLike, create_coordination_lock
from hotsuploader.observable import ObservableValue
from hotsuploader.presentation.protocols import (
    ConsoleNoticePresenter,
    ConsoleWindow,
    HeadlessTrayIcon,
    NoticePresenter,
    TrayIcon,
    WindowFactory,
)
from hotsuploader.presentation.visibility import Presentation, VisibilityCoordinator
from hotsuploader.reporting.exceptions import ExceptionReporter
from hotsuploader.reporting.notice import NoticeRenderer
from hotsuploader.scheduling import Scheduler
from hotsuploader.scheduling.models import UpdateSchedule
from hotsuploader.settings.application import (
    AppPaths,
    ApplicationSettings,
    default_executable,
    default_install_dir,
)
from hotsuploader.settings.migration import SettingsMigrator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.settings.user import SettingsError, UserSettings
from hotsuploader.system.autostart import AutostartRegistry, create_autostart_registry
from hotsuploader.updates.checker import ClientFactory, UpdateChecker
from hotsuploader.version import AppVersion

logger: Final = logging.getLogger(__name__)

ManagerFactory = Callable[[Path], ManagerLike]


class UploaderApp:
    """Main controller class for the uploader process lifecycle.

    This class orchestrates startup and shutdown:
    - Installing the exception reporter before anything else can fail
    - Restoring the settings backup after an in-place upgrade
    - Creating the tray icon and the background manager
    - Choosing between the main window and the tray
    - Checking for updates now and every hour
    - Saving and backing up settings on exit

    Collaborators can be injected; anything left out gets a headless
    default so the lifecycle also runs without a desktop shell.
    Use it as a context manager to guarantee the shutdown path.
    """

    def __init__(
        self,
        settings_path: Path | None = None,
        install_dir: Path | None = None,
        tray_factory: Callable[[], TrayIcon] | None = None,
        window_factory: WindowFactory | None = None,
        notice_presenter: NoticePresenter | None = None,
        manager_factory: ManagerFactory | None = None,
        client_factory: ClientFactory | None = None,
        autostart: AutostartRegistry | None = None,
        executable: Path | None = None,
        dispatcher: Dispatcher | None = None,
        tasks: TaskPool | None = None,
        schedule: UpdateSchedule | None = None,
        version: AppVersion | None = None,
        debug: bool = False,
    ):
        """Initialize the uploader controller.

        Args:
            settings_path: Settings store location (default per-user path)
            install_dir: Directory of the running executable
            tray_factory: Builds the tray icon during startup
            window_factory: Builds a main window each time one is shown
            notice_presenter: Shows notices for unhandled exceptions
            manager_factory: Builds the background manager for a storage path
            client_factory: Builds the update-transport client
            autostart: Run-at-login registry
            executable: Executable registered for autostart
            dispatcher: Presentation execution context
            tasks: Background task pool
            schedule: Update-check schedule
            version: Running application version
            debug: Debug build; enables debug logging and disables self-update
        """
        # Configure logging
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )

        # Report failures from here on, including the rest of construction
        self.dispatcher = dispatcher or Dispatcher()
        self.tasks = tasks or TaskPool()
        self.renderer = NoticeRenderer()
        self.reporter = ExceptionReporter(
            notice_presenter or ConsoleNoticePresenter(),
            self.dispatcher,
            self.tasks,
            self.renderer,
        )
        self.reporter.install()

        paths = AppPaths.from_install_dir(install_dir or default_install_dir(), settings_path)
        self.settings = ApplicationSettings(
            SettingsStore(paths.settings_file),
            paths,
            version=version,
            schedule=schedule,
            debug=debug,
        )
        self.store = self.settings.store
        self.paths = paths
        self.renderer.version = self.settings.version_string

        self.migrator = SettingsMigrator(self.store, paths, self.settings.version)
        self.checker = UpdateChecker(
            self.store,
            self.migrator,
            self.settings.version,
            paths.staging_dir,
            client_factory=client_factory,
            debug=debug,
        )

        self.tray_factory = tray_factory or HeadlessTrayIcon
        self.window_factory = window_factory or ConsoleWindow
        self.manager_factory = manager_factory or IdleManager
        self.autostart = autostart or create_autostart_registry()
        self.executable = executable or default_executable()

        self.tray: TrayIcon | None = None
        self.manager: ManagerLike | None = None
        self.visibility: VisibilityCoordinator | None = None
        self.scheduler: Scheduler | None = None
        self.presentation: Presentation | None = None
        self._lock = create_coordination_lock()
        self._started = False
        self._shut_down = False

    # ── state exposed to the UI layer ──────────────────────────────────────
    @property
    def update_available(self) -> ObservableValue[bool]:
        return self.checker.update_available

    @property
    def version_string(self) -> str:
        return self.settings.version_string

    @property
    def start_with_windows(self) -> bool:
        return self._require_visibility().start_with_windows

    @start_with_windows.setter
    def start_with_windows(self, enabled: bool) -> None:
        self._require_visibility().start_with_windows = enabled

    def _require_visibility(self) -> VisibilityCoordinator:
        if self.visibility is None:
            raise RuntimeError("Application has not started")
        return self.visibility

    # ── lifecycle ──────────────────────────────────────────────────────────
    def startup(self, launch_args: Sequence[str] = ()) -> Presentation:
        """Run the one-time startup sequence.

        Args:
            launch_args: Process launch arguments (``--autorun`` for login starts)

        Returns:
            What was presented to the user
        """
        if self._started:
            raise RuntimeError("Startup already ran")
        self._started = True

        # The process keeps running with zero windows (tray only)
        self.dispatcher.shutdown_mode = ShutdownMode.ON_EXPLICIT_SHUTDOWN
        self.reporter.install()
        self._load_settings()
        logger.info("App %s started", self.version_string)

        if self.migrator.restore_pending():
            self.migrator.restore()

        self.tray = self.tray_factory()
        self.tray.visible = False
        self.visibility = VisibilityCoordinator(
            self.tray,
            self.window_factory,
            self.store,
            self.autostart,
            self.executable,
        )

        self.manager = self.manager_factory(self.paths.replay_storage)
        # Enable collection modification from any thread
        self.manager.files.enable_synchronization(self._lock)

        self.presentation = self.visibility.resolve_initial(launch_args)
        self.manager.start()

        # Check for updates on startup and then every hour
        self.check_for_updates()
        self.scheduler = Scheduler(self.check_for_updates, self.settings.schedule.interval)
        self.scheduler.start()
        return self.presentation

    def _load_settings(self) -> None:
        try:
            self.store.load()
        except SettingsError:
            logger.exception("Settings store unreadable, starting from defaults")
            self.store.settings = UserSettings()

    def check_for_updates(self) -> Future[bool]:
        """Start an update check in the background; the result is not awaited."""
        return self.tasks.spawn(self.checker.check)

    def shutdown(self) -> None:
        """Persist and back up settings, then release every resource.

        Resources are released even when the backup fails; the backup error
        itself propagates.
        """
        if self._shut_down:
            return
        self._shut_down = True

        try:
            if self._started:
                self.migrator.backup()
        finally:
            if self.scheduler is not None:
                self.scheduler.stop()
            self.tasks.shutdown()
            self.checker.close()
            if self.tray is not None:
                self.tray.dispose()
            self.dispatcher.shutdown()
            logger.info("App %s stopped", self.version_string)

    def run(self, launch_args: Sequence[str] = ()) -> None:
        """Start up, process UI work until shutdown, then clean up."""
        with self:
            self.startup(launch_args)
            self.dispatcher.run()

    def __enter__(self) -> UploaderApp:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown()
