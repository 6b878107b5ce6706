"""Background self-update check."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Final

from hotsuploader.observable import ObservableValue
from hotsuploader.settings.migration import SettingsMigrator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.updates.client import UpdateClient, create_update_client
from hotsuploader.version import AppVersion

logger: Final = logging.getLogger(__name__)

ClientFactory = Callable[[str, AppVersion, Path], UpdateClient]


class ClientState(Enum):
    """Lifecycle of the lazily built update-transport client."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FAILED = "failed"


class UpdateChecker:
    """Detects, downloads and flags new application versions.

    Each scheduled tick calls :meth:`check` as an independent background
    task. Ticks may overlap: client construction happens once under a lock,
    and the flag/backup updates are idempotent.
    """

    def __init__(
        self,
        store: SettingsStore,
        migrator: SettingsMigrator,
        current_version: AppVersion,
        staging_dir: Path,
        client_factory: ClientFactory | None = None,
        debug: bool = False,
    ) -> None:
        self.store = store
        self.migrator = migrator
        self.current_version = current_version
        self.staging_dir = staging_dir
        self.client_factory = client_factory or create_update_client
        self.debug = debug

        self.update_available: ObservableValue[bool] = ObservableValue(False)
        self.state = ClientState.UNINITIALIZED
        self._client: UpdateClient | None = None
        self._init_lock = threading.Lock()

    @property
    def update_manager_initialized(self) -> bool:
        return self.state is ClientState.READY

    def _ensure_client(self) -> UpdateClient | None:
        """Build the client on first use; a failed build is retried next time."""
        with self._init_lock:
            if self.state is ClientState.READY:
                return self._client

            repository = self.store.settings.update_repository
            try:
                self._client = self.client_factory(
                    repository, self.current_version, self.staging_dir
                )
            except Exception as exc:
                self.state = ClientState.FAILED
                logger.warning("Error initializing update client for %s: %s", repository, exc)
                return None

            self.state = ClientState.READY
            logger.debug("Update client ready for %s", repository)
            return self._client

    def check(self) -> bool:
        """Run one update check.

        Returns:
            True if a new release was found and staged
        """
        if self.debug or not self.store.settings.auto_update:
            logger.debug("Update check skipped (debug=%s)", self.debug)
            return False

        client = self._ensure_client()
        if client is None:
            return False

        try:
            release = client.check_and_apply_update()
        except Exception as exc:
            logger.warning("Error checking for updates: %s", exc, exc_info=True)
            return False

        if release is None:
            logger.debug("No update available")
            return False

        logger.info("Update %s available", release.version.display)
        self.update_available.set(True)
        # Keep settings safe in case the update is applied before our own shutdown backup
        self.migrator.backup()
        return True

    def close(self) -> None:
        """Release the update client, if one was built."""
        with self._init_lock:
            if self._client is not None:
                self._client.close()
                self._client = None
            self.state = ClientState.UNINITIALIZED
