from pathlib import Path

import pytest

from hotsuploader.presentation.protocols import MockTrayIcon, MockWindowFactory
from hotsuploader.presentation.visibility import Presentation, VisibilityCoordinator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.system.autostart import AUTORUN_ARG, XdgAutostart


@pytest.fixture
def tray() -> MockTrayIcon:
    return MockTrayIcon()


@pytest.fixture
def windows() -> MockWindowFactory:
    return MockWindowFactory()


@pytest.fixture
def autostart(tmp_path: Path) -> XdgAutostart:
    return XdgAutostart(tmp_path / "autostart")


@pytest.fixture
def coordinator(
    tray: MockTrayIcon,
    windows: MockWindowFactory,
    store: SettingsStore,
    autostart: XdgAutostart,
    tmp_path: Path,
) -> VisibilityCoordinator:
    return VisibilityCoordinator(tray, windows, store, autostart, tmp_path / "Hotsapi.Uploader")


@pytest.mark.parametrize(
    ("launch_args", "minimize", "expected"),
    [
        ([AUTORUN_ARG], True, Presentation.TRAY),
        ([AUTORUN_ARG], False, Presentation.WINDOW),
        ([], True, Presentation.WINDOW),
        (["--other"], True, Presentation.WINDOW),
    ],
)
def test_resolve_initial(
    coordinator: VisibilityCoordinator,
    tray: MockTrayIcon,
    windows: MockWindowFactory,
    store: SettingsStore,
    launch_args: list[str],
    minimize: bool,
    expected: Presentation,
) -> None:
    store.settings.minimize_to_tray = minimize

    assert coordinator.resolve_initial(launch_args) is expected

    in_tray = expected is Presentation.TRAY
    assert tray.visible is in_tray
    assert windows.shown == (0 if in_tray else 1)


def test_tray_activation_opens_window(
    coordinator: VisibilityCoordinator,
    tray: MockTrayIcon,
    windows: MockWindowFactory,
    store: SettingsStore,
) -> None:
    store.settings.minimize_to_tray = True
    coordinator.resolve_initial([AUTORUN_ARG])

    tray.activate()

    assert windows.shown == 1
    assert tray.visible is False


def test_activation_of_hidden_tray_is_ignored(
    coordinator: VisibilityCoordinator, tray: MockTrayIcon, windows: MockWindowFactory
) -> None:
    tray.activate()

    assert windows.shown == 0


def test_start_with_windows_toggle(
    coordinator: VisibilityCoordinator, autostart: XdgAutostart, tmp_path: Path
) -> None:
    changes: list[bool] = []
    coordinator.autostart_changed.subscribe(changes.append)

    assert coordinator.start_with_windows is False
    coordinator.start_with_windows = True
    assert autostart.is_registered(tmp_path / "Hotsapi.Uploader")

    coordinator.start_with_windows = False
    assert coordinator.start_with_windows is False
    assert changes == [True, False]
