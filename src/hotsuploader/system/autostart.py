"""Run-at-login registration for the uploader executable."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from hotsuploader.utils.file import ensure_directory_exists

logger: Final = logging.getLogger(__name__)

AUTORUN_ARG: Final = "--autorun"


@runtime_checkable
class AutostartRegistry(Protocol):
    """Protocol for OS login-startup entries keyed by executable."""

    def is_registered(self, executable: Path) -> bool:
        """Check whether a login entry exists for the executable."""
        ...

    def register(self, executable: Path, arguments: str = AUTORUN_ARG) -> None:
        """Create or overwrite the login entry."""
        ...

    def unregister(self, executable: Path) -> None:
        """Remove the login entry if present."""
        ...


class XdgAutostart:
    """Desktop-entry files in the XDG autostart directory."""

    def __init__(self, autostart_dir: Path | None = None) -> None:
        if autostart_dir is None:
            config_home = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
            autostart_dir = config_home / "autostart"
        self.autostart_dir = autostart_dir

    def entry_path(self, executable: Path) -> Path:
        return self.autostart_dir / f"{executable.stem}.desktop"

    def is_registered(self, executable: Path) -> bool:
        return self.entry_path(executable).exists()

    def register(self, executable: Path, arguments: str = AUTORUN_ARG) -> None:
        ensure_directory_exists(self.autostart_dir)
        entry = self.entry_path(executable)
        entry.write_text(
            "[Desktop Entry]\n"
            "Type=Application\n"
            f"Name={executable.stem}\n"
            f'Exec="{executable}" {arguments}\n'
            "X-GNOME-Autostart-enabled=true\n",
            encoding="utf-8",
        )
        logger.info("Autostart entry written: %s", entry)

    def unregister(self, executable: Path) -> None:
        entry = self.entry_path(executable)
        if entry.exists():
            entry.unlink()
            logger.info("Autostart entry removed: %s", entry)


class WindowsStartupFolder:
    """Launcher scripts in the per-user Startup folder."""

    def __init__(self, startup_dir: Path | None = None) -> None:
        if startup_dir is None:
            appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
            startup_dir = appdata / "Microsoft" / "Windows" / "Start Menu" / "Programs" / "Startup"
        self.startup_dir = startup_dir

    def entry_path(self, executable: Path) -> Path:
        return self.startup_dir / f"{executable.stem}.cmd"

    def is_registered(self, executable: Path) -> bool:
        return self.entry_path(executable).exists()

    def register(self, executable: Path, arguments: str = AUTORUN_ARG) -> None:
        ensure_directory_exists(self.startup_dir)
        entry = self.entry_path(executable)
        entry.write_text(f'@start "" "{executable}" {arguments}\r\n', encoding="utf-8")
        logger.info("Startup entry written: %s", entry)

    def unregister(self, executable: Path) -> None:
        entry = self.entry_path(executable)
        if entry.exists():
            entry.unlink()
            logger.info("Startup entry removed: %s", entry)


# Factory function to create the registry for this platform
def create_autostart_registry(platform: str = sys.platform) -> AutostartRegistry:
    """Create an autostart registry for the given platform.

    Args:
        platform: ``sys.platform`` style identifier

    Returns:
        An AutostartRegistry implementation
    """
    if platform == "win32":
        return WindowsStartupFolder()
    return XdgAutostart()
