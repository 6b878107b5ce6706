"""Load/save pair for the persisted user settings."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from hotsuploader.settings.user import SettingsError, UserSettings
from hotsuploader.utils.file import ensure_directory_exists

logger: Final = logging.getLogger(__name__)


class SettingsStore:
    """Owner of the settings record and its file on disk.

    One instance is created at startup and handed to every component that
    reads or writes settings. Writes happen on lifecycle boundaries only
    (startup restore, backup after an update, shutdown), the lock just keeps
    two of those from interleaving.
    """

    def __init__(self, path: Path, settings: UserSettings | None = None) -> None:
        self.path = path
        self.settings = settings or UserSettings()
        self.lock = threading.RLock()

    @classmethod
    def open(cls, path: Path) -> SettingsStore:
        """Create a store and load it from ``path``."""
        store = cls(path)
        store.load()
        return store

    def load(self) -> UserSettings:
        """Load settings, falling back to defaults when no store exists yet.

        Raises:
            SettingsError: If an existing store is unreadable or invalid
        """
        with self.lock:
            if not self.path.exists():
                logger.debug("No settings store at %s, using defaults", self.path)
                self.settings = UserSettings()
            else:
                self.settings = UserSettings.load(self.path)
            return self.settings

    def reload(self) -> UserSettings:
        """Re-read the store, replacing the in-memory settings."""
        with self.lock:
            self.settings = UserSettings.load(self.path)
            return self.settings

    def upgrade(self) -> UserSettings:
        """Run the format-upgrade step over the current store content."""
        with self.lock:
            raw = UserSettings.read_raw(self.path)
            try:
                self.settings = UserSettings.model_validate(UserSettings.upgrade_data(raw))
            except ValidationError as err:
                raise SettingsError(f"Invalid settings after upgrade:\n{err}") from err
            logger.debug("Settings upgraded to format %d", self.settings.settings_version)
            return self.settings

    def save(self) -> None:
        """Write the settings atomically, creating the directory if needed."""
        with self.lock:
            ensure_directory_exists(self.path.parent)
            tmp = self.path.with_name(self.path.name + ".tmp")
            tmp.write_text(self.settings.dump(), encoding="utf-8")
            os.replace(tmp, self.path)
