"""Internal application settings derived from the install location."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from hotsuploader.scheduling.models import UpdateSchedule
from hotsuploader.settings.store import SettingsStore
from hotsuploader.settings.user import UserSettings
from hotsuploader.version import AppVersion, current_version

# Load environment variables from .env file(s)
load_dotenv()


def default_install_dir() -> Path:
    """Directory holding the running executable.

    Frozen builds live next to their executable; a source checkout uses the
    working directory instead.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path.cwd()


def default_executable() -> Path:
    """Path registered for autostart."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def default_settings_file() -> Path:
    """OS-standard per-user roaming location of the settings store.

    ``HOTSUPLOADER_SETTINGS`` overrides the location.
    """
    env_path = os.environ.get("HOTSUPLOADER_SETTINGS")
    if env_path:
        return Path(env_path).expanduser()

    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Hotsapi" / "Hotsapi.Uploader" / "user.yaml"

    base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "hotsuploader" / "user.yaml"


@dataclass
class AppPaths:
    """Application file and directory paths.

    The backup record, replay storage and update staging area sit one level
    above the install directory so they survive the install directory being
    replaced by an update.
    """

    install_dir: Path
    settings_file: Path
    backup_file: Path
    replay_storage: Path
    staging_dir: Path

    @classmethod
    def from_install_dir(
        cls, install_dir: Path, settings_file: Path | None = None
    ) -> AppPaths:
        """Create paths from the install directory."""
        parent = install_dir.parent
        return cls(
            install_dir=install_dir,
            settings_file=settings_file or default_settings_file(),
            backup_file=parent / "last.config",
            replay_storage=parent / "replays.xml",
            staging_dir=parent / "packages",
        )


class ApplicationSettings:
    """Application settings container.

    Combines the user settings store with derived paths, the running version
    and the update schedule.

    Examples:
        paths = AppPaths.from_install_dir(default_install_dir())
        app_settings = ApplicationSettings(SettingsStore.open(paths.settings_file), paths)
        print(app_settings.version_string)
    """

    def __init__(
        self,
        store: SettingsStore,
        paths: AppPaths,
        version: AppVersion | None = None,
        schedule: UpdateSchedule | None = None,
        debug: bool = False,
    ):
        """Initialize application settings with configuration sources."""
        self.store = store
        self.paths = paths
        self.version = version or current_version()
        self.schedule = schedule or UpdateSchedule()
        self.debug = debug

    @property
    def user(self) -> UserSettings:
        """Current user settings record."""
        return self.store.settings

    @property
    def version_string(self) -> str:
        return self.version.display
