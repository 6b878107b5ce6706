"""Hotsapi Uploader CLI application.

This module provides the command-line interface for the uploader,
including the main run loop, update checks, settings backup/restore and
run-at-login management.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Final

import typer

from hotsuploader.controller import UploaderApp
from hotsuploader.settings.application import (
    AppPaths,
    ApplicationSettings,
    default_executable,
    default_install_dir,
)
from hotsuploader.settings.migration import SettingsMigrator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.settings.user import SettingsError, UserSettings
from hotsuploader.system.autostart import AUTORUN_ARG, create_autostart_registry
from hotsuploader.updates.checker import UpdateChecker
from hotsuploader.version import current_version

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Hotsapi Uploader", add_completion=False)
settings_app = typer.Typer(help="Settings store helpers")
autostart_app = typer.Typer(help="Run-at-login registration")
app.add_typer(settings_app, name="settings")
app.add_typer(autostart_app, name="autostart")

logger: Final = logging.getLogger(__name__)  # Will be "hotsuploader.cli"

SETTINGS_OPTION = typer.Option(
    None, "--settings", "-s", dir_okay=False, help="Settings store (default per-user path)"
)
INSTALL_DIR_OPTION = typer.Option(
    None, "--install-dir", file_okay=False, help="Directory of the installed executable"
)
DEBUG_OPTION = typer.Option(False, "--debug", help="Debug build: verbose logging, no self-update")
AUTORUN_OPTION = typer.Option(
    False, AUTORUN_ARG, help="Launched by the OS at login (may start in the tray)"
)
FILE_ARGUMENT = typer.Argument(..., exists=True, dir_okay=False, help="Settings file")


def _application_settings(
    settings: Path | None, install_dir: Path | None, debug: bool = False
) -> ApplicationSettings:
    paths = AppPaths.from_install_dir(install_dir or default_install_dir(), settings)
    try:
        store = SettingsStore.open(paths.settings_file)
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    return ApplicationSettings(store, paths, debug=debug)


@app.command()
def run(
    settings: Path | None = SETTINGS_OPTION,
    install_dir: Path | None = INSTALL_DIR_OPTION,
    autorun: bool = AUTORUN_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Run the uploader until interrupted."""
    uploader = UploaderApp(settings_path=settings, install_dir=install_dir, debug=debug)
    uploader.run([AUTORUN_ARG] if autorun else [])


@app.command()
def version() -> None:
    """Print the application version."""
    typer.echo(current_version().display)


@app.command("check-update")
def check_update(
    settings: Path | None = SETTINGS_OPTION,
    install_dir: Path | None = INSTALL_DIR_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Check for a new release once and stage it if found."""
    app_settings = _application_settings(settings, install_dir, debug)
    migrator = SettingsMigrator(app_settings.store, app_settings.paths)
    checker = UpdateChecker(
        app_settings.store,
        migrator,
        app_settings.version,
        app_settings.paths.staging_dir,
        debug=debug,
    )
    try:
        found = checker.check()
    finally:
        checker.close()

    if found:
        typer.secho("Update downloaded, restart to apply", fg=typer.colors.GREEN)
    else:
        typer.echo(f"No update applied (running {app_settings.version_string})")


# ───────────────────────── settings sub-commands ─────────────────────────────
@settings_app.command("show")
def show_settings(
    settings: Path | None = SETTINGS_OPTION,
    install_dir: Path | None = INSTALL_DIR_OPTION,
) -> None:
    """Print the current settings."""
    app_settings = _application_settings(settings, install_dir)
    typer.echo(f"# {app_settings.paths.settings_file}")
    typer.echo(app_settings.user.dump(), nl=False)


@settings_app.command("validate")
def validate_settings(file: Path = FILE_ARGUMENT) -> None:
    """Validate a settings file against the schema."""
    try:
        UserSettings.load(file)
        typer.echo("✅ Settings valid")
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@settings_app.command("backup")
def backup_settings(
    settings: Path | None = SETTINGS_OPTION,
    install_dir: Path | None = INSTALL_DIR_OPTION,
) -> None:
    """Save the settings and copy them to the backup location."""
    app_settings = _application_settings(settings, install_dir)
    SettingsMigrator(app_settings.store, app_settings.paths).backup()
    typer.secho(f"Settings backed up to {app_settings.paths.backup_file}", fg=typer.colors.GREEN)


@settings_app.command("restore")
def restore_settings(
    settings: Path | None = SETTINGS_OPTION,
    install_dir: Path | None = INSTALL_DIR_OPTION,
) -> None:
    """Restore the settings backup, if one exists."""
    app_settings = _application_settings(settings, install_dir)
    if not app_settings.paths.backup_file.exists():
        typer.echo(f"No backup at {app_settings.paths.backup_file}")
    SettingsMigrator(app_settings.store, app_settings.paths).restore()
    typer.echo("Restore finished")


# ───────────────────────── autostart sub-commands ────────────────────────────
@autostart_app.command("status")
def autostart_status() -> None:
    """Show whether the uploader starts at login."""
    registered = create_autostart_registry().is_registered(default_executable())
    typer.echo("enabled" if registered else "disabled")


@autostart_app.command("enable")
def autostart_enable() -> None:
    """Start the uploader at login."""
    create_autostart_registry().register(default_executable(), AUTORUN_ARG)
    typer.secho("Autostart enabled", fg=typer.colors.GREEN)


@autostart_app.command("disable")
def autostart_disable() -> None:
    """Stop starting the uploader at login."""
    create_autostart_registry().unregister(default_executable())
    typer.echo("Autostart disabled")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    main()
