# src/hotsuploader/system/__init__.py
"""System module for OS integration."""

from hotsuploader.system.autostart import (
    AUTORUN_ARG,
    AutostartRegistry,
    WindowsStartupFolder,
    XdgAutostart,
    create_autostart_registry,
)

__all__ = [
    "AUTORUN_ARG",
    "AutostartRegistry",
    "WindowsStartupFolder",
    "XdgAutostart",
    "create_autostart_registry",
]
