"""Application settings management.

This package provides:
- UserSettings: Versioned user settings persisted in the per-user store
- SettingsStore: Explicit load/save owner of the settings record
- ApplicationSettings: Install-derived paths, version and schedule
- SettingsMigrator: Backup/restore of the store across upgrades
"""

from hotsuploader.settings.application import AppPaths, ApplicationSettings
from hotsuploader.settings.migration import SettingsMigrator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.settings.user import SettingsError, UserSettings

__all__ = [
    "AppPaths",
    "ApplicationSettings",
    "SettingsError",
    "SettingsMigrator",
    "SettingsStore",
    "UserSettings",
]
