"""User settings persisted in the per-user configuration store."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Current on-disk format. Version 1 files come from the Windows client.
SETTINGS_FORMAT_VERSION: Final = 2

DEFAULT_UPDATE_REPOSITORY: Final = "https://github.com/Poma/Hotsapi.Uploader"

# Version 1 key names mapped onto the current field names
LEGACY_KEYS: Final = {
    "AutoUpdate": "auto_update",
    "MinimizeToTray": "minimize_to_tray",
    "UpdateRepository": "update_repository",
    "UpgradeRequired": "upgrade_required",
}


class SettingsError(RuntimeError):
    """Raised when the settings store cannot be read or validated."""


class UserSettings(BaseModel):
    """Versioned key/value configuration record for the uploader.

    Only the keys used by the lifecycle coordinator are declared. Anything
    else found in the store (window placement, upload preferences written by
    the UI layer) is kept as an extra field and written back unchanged.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    settings_version: int = Field(
        SETTINGS_FORMAT_VERSION, ge=1, description="On-disk format version"
    )
    auto_update: bool = Field(True, description="Check for new versions in the background")
    minimize_to_tray: bool = Field(
        True, description="Start in the tray when launched at login"
    )
    update_repository: str = Field(
        DEFAULT_UPDATE_REPOSITORY,
        min_length=1,
        description="Repository that publishes application releases",
    )
    upgrade_required: bool = Field(
        True,
        description="Restore the settings backup on next start (set after an in-place upgrade)",
    )
    last_version: str | None = Field(
        None, description="Application version the settings were last migrated for"
    )

    @staticmethod
    def upgrade_data(raw: dict[str, Any]) -> dict[str, Any]:
        """Bring raw store content up to the current format.

        Args:
            raw: Parsed store content of any known format version

        Returns:
            New dict using current key names and format version
        """
        data: dict[str, Any] = {}
        for key, value in raw.items():
            data[LEGACY_KEYS.get(key, key)] = value
        data["settings_version"] = SETTINGS_FORMAT_VERSION
        return data

    def dump(self) -> str:
        """Serialise to YAML."""
        return yaml.safe_dump(self.model_dump(mode="json"), sort_keys=False)

    @classmethod
    def read_raw(cls, path: Path) -> dict[str, Any]:
        """Read the YAML mapping stored at ``path``.

        Raises:
            SettingsError: If the file cannot be read or is not a mapping
        """
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise SettingsError(f"Unable to read settings YAML: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings root is not a mapping: {path}")
        return data

    @classmethod
    def load(cls, path: Path) -> UserSettings:
        """Load settings from a YAML file.

        Args:
            path: Path to the settings store

        Returns:
            Validated UserSettings object

        Raises:
            SettingsError: If the file cannot be parsed or is invalid
        """
        data = cls.read_raw(path)
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise SettingsError(f"Invalid settings:\n{err}") from err
