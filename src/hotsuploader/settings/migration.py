"""Settings backup and restore across in-place version upgrades."""

from __future__ import annotations

import logging
from typing import Final

from hotsuploader.settings.application import AppPaths
from hotsuploader.settings.store import SettingsStore
from hotsuploader.utils.file import copy_file, ensure_directory_exists
from hotsuploader.version import AppVersion, current_version

logger: Final = logging.getLogger(__name__)


class SettingsMigrator:
    """Keeps a copy of the settings store outside the install directory.

    An update replaces the install directory and the new version starts with
    a store stamped by an older version. That marks the upgrade as required,
    and the backup taken by the old version is copied back over the store
    exactly once.
    """

    def __init__(
        self, store: SettingsStore, paths: AppPaths, version: AppVersion | None = None
    ) -> None:
        self.store = store
        self.paths = paths
        self.version = version or current_version()

    def restore_pending(self) -> bool:
        """Whether startup has to run :meth:`restore`.

        Settings last written by a different application version set
        ``upgrade_required`` again.
        """
        settings = self.store.settings
        if settings.last_version != str(self.version) and not settings.upgrade_required:
            logger.info(
                "Settings written by version %s, running %s",
                settings.last_version,
                self.version,
            )
            settings.upgrade_required = True
        return settings.upgrade_required

    def backup(self) -> None:
        """Make a backup of our settings.

        Persists the current settings, then copies the store file to the
        backup location. Failures propagate to the caller.
        """
        with self.store.lock:
            self.store.save()
            copy_file(self.store.path, self.paths.backup_file)
        logger.debug("Settings backed up to %s", self.paths.backup_file)

    def restore(self) -> None:
        """Restore our settings backup if any.

        Restore failures are logged and do not stop startup. The upgrade flag
        is cleared and the running version stamped in every case, so a first
        launch without a backup only records that no restore is pending.
        """
        source = self.paths.backup_file
        destination = self.store.path

        with self.store.lock:
            if source.exists():
                try:
                    ensure_directory_exists(destination.parent)
                    copy_file(source, destination)
                    self.store.reload()
                    self.store.upgrade()
                    logger.info("Settings restored from %s", source)
                except Exception:
                    logger.exception("Error upgrading settings")
            else:
                logger.debug("No settings backup at %s", source)

            self.store.settings.upgrade_required = False
            self.store.settings.last_version = str(self.version)
            self.store.save()
