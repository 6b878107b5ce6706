import logging
import sys
import threading
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from conftest import FakeUpdateClient, InlineTaskPool
from hotsuploader.controller import UploaderApp
from hotsuploader.dispatch import ShutdownMode
from hotsuploader.presentation.protocols import (
    MockNoticePresenter,
    MockTrayIcon,
    MockWindowFactory,
)
from hotsuploader.presentation.visibility import Presentation
from hotsuploader.reporting.exceptions import TASK_CHANNEL, ExceptionReporter
from hotsuploader.settings.application import AppPaths
from hotsuploader.settings.user import UserSettings
from hotsuploader.system.autostart import AUTORUN_ARG, XdgAutostart
from hotsuploader.updates.client import ReleaseInfo
from hotsuploader.version import AppVersion

AppFactory = Callable[..., UploaderApp]


@pytest.fixture
def client() -> FakeUpdateClient:
    return FakeUpdateClient(None)


@pytest.fixture
def windows() -> MockWindowFactory:
    return MockWindowFactory()


@pytest.fixture
def presenter() -> MockNoticePresenter:
    return MockNoticePresenter()


@pytest.fixture
def make_app(
    paths: AppPaths,
    tmp_path: Path,
    client: FakeUpdateClient,
    windows: MockWindowFactory,
    presenter: MockNoticePresenter,
) -> Generator[AppFactory, None, None]:
    built: list[UploaderApp] = []

    def factory(**overrides: object) -> UploaderApp:
        options: dict[str, object] = {
            "settings_path": paths.settings_file,
            "install_dir": paths.install_dir,
            "tray_factory": MockTrayIcon,
            "window_factory": windows,
            "notice_presenter": presenter,
            "client_factory": lambda url, version, staging: client,
            "autostart": XdgAutostart(tmp_path / "autostart"),
            "executable": paths.install_dir / "Hotsapi.Uploader",
            "tasks": InlineTaskPool(),
            "version": AppVersion(1, 4, 2),
        }
        options.update(overrides)
        uploader = UploaderApp(**options)  # type: ignore[arg-type]
        built.append(uploader)
        return uploader

    yield factory

    for uploader in built:
        uploader.reporter.uninstall()
        try:
            uploader.shutdown()
        except OSError:
            pass


def _write(path: Path, settings: UserSettings) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(settings.dump(), encoding="utf-8")


def test_startup_shows_window_and_checks_for_updates(
    make_app: AppFactory, windows: MockWindowFactory, client: FakeUpdateClient, paths: AppPaths
) -> None:
    uploader = make_app()

    assert uploader.startup([]) is Presentation.WINDOW

    assert windows.shown == 1
    assert uploader.tray is not None and uploader.tray.visible is False
    assert uploader.dispatcher.shutdown_mode is ShutdownMode.ON_EXPLICIT_SHUTDOWN
    assert uploader.reporter.installed
    assert uploader.manager is not None
    assert uploader.manager.files.is_synchronized
    assert uploader.manager.started  # type: ignore[attr-defined]
    assert client.calls == 1
    assert uploader.scheduler is not None and uploader.scheduler.is_running
    # first launch: nothing to restore, flag cleared
    assert uploader.store.settings.upgrade_required is False
    assert UserSettings.load(paths.settings_file).upgrade_required is False


def test_startup_twice_is_rejected(make_app: AppFactory) -> None:
    uploader = make_app()
    uploader.startup()

    with pytest.raises(RuntimeError):
        uploader.startup()


def test_restore_happens_before_presentation(
    make_app: AppFactory, paths: AppPaths, client: FakeUpdateClient
) -> None:
    _write(paths.settings_file, UserSettings(minimize_to_tray=False, upgrade_required=True))
    _write(
        paths.backup_file,
        UserSettings(minimize_to_tray=True, auto_update=False, upgrade_required=False),
    )
    uploader = make_app()

    assert uploader.startup([AUTORUN_ARG]) is Presentation.TRAY

    assert uploader.store.settings.minimize_to_tray is True
    assert uploader.store.settings.upgrade_required is False
    assert client.calls == 0


def test_no_restore_without_upgrade_flag(make_app: AppFactory, paths: AppPaths) -> None:
    _write(
        paths.settings_file,
        UserSettings(minimize_to_tray=False, upgrade_required=False, last_version="1.4.2"),
    )
    _write(paths.backup_file, UserSettings(minimize_to_tray=True, upgrade_required=False))
    uploader = make_app()

    assert uploader.startup([AUTORUN_ARG]) is Presentation.WINDOW
    assert uploader.store.settings.minimize_to_tray is False


def test_corrupt_store_falls_back_to_defaults(
    make_app: AppFactory, paths: AppPaths, caplog: pytest.LogCaptureFixture
) -> None:
    paths.settings_file.parent.mkdir(parents=True)
    paths.settings_file.write_text("- not\n- a mapping\n", encoding="utf-8")
    uploader = make_app()

    with caplog.at_level(logging.ERROR):
        assert uploader.startup([]) is Presentation.WINDOW

    assert "Settings store unreadable" in caplog.text
    assert uploader.store.settings.auto_update is True


def test_update_found_sets_flag_and_backs_up(
    make_app: AppFactory, client: FakeUpdateClient, release: ReleaseInfo, paths: AppPaths
) -> None:
    client.result = release
    uploader = make_app()
    seen: list[bool] = []
    uploader.update_available.subscribe(seen.append)

    uploader.startup()

    assert uploader.update_available.value is True
    assert seen == [True]
    assert paths.backup_file.exists()


def test_debug_build_never_builds_update_client(
    make_app: AppFactory, client: FakeUpdateClient
) -> None:
    uploader = make_app(debug=True)
    uploader.startup()

    assert client.calls == 0
    assert uploader.checker.update_manager_initialized is False


def test_backup_failure_during_update_reaches_task_channel(
    make_app: AppFactory,
    client: FakeUpdateClient,
    release: ReleaseInfo,
    paths: AppPaths,
    presenter: MockNoticePresenter,
) -> None:
    paths.backup_file.mkdir()
    client.result = release
    uploader = make_app()

    uploader.startup()

    assert uploader.update_available.value is True
    assert [n.channel for n in presenter.notices] == [TASK_CHANNEL]

    with pytest.raises(OSError):
        uploader.shutdown()
    assert uploader.tray is not None and uploader.tray.visible is False
    assert uploader.dispatcher.is_running is False


def test_shutdown_backs_up_and_releases(make_app: AppFactory, paths: AppPaths) -> None:
    uploader = make_app()
    uploader.startup()
    tray = uploader.tray
    assert isinstance(tray, MockTrayIcon)
    uploader.store.settings.minimize_to_tray = False

    uploader.shutdown()
    uploader.shutdown()

    assert UserSettings.load(paths.backup_file).minimize_to_tray is False
    assert paths.backup_file.read_bytes() == paths.settings_file.read_bytes()
    assert tray.dispose_calls == 1
    assert uploader.scheduler is not None and not uploader.scheduler.is_running
    assert uploader.dispatcher.is_running is False


def test_shutdown_before_startup_skips_backup(make_app: AppFactory, paths: AppPaths) -> None:
    uploader = make_app()

    uploader.shutdown()

    assert not paths.backup_file.exists()


def test_context_manager_cleans_up_on_error(make_app: AppFactory, paths: AppPaths) -> None:
    uploader = make_app()

    with pytest.raises(KeyError):
        with uploader:
            uploader.startup()
            raise KeyError("boom")

    assert paths.backup_file.exists()
    assert uploader.dispatcher.is_running is False


def test_run_until_dispatcher_shutdown(make_app: AppFactory, paths: AppPaths) -> None:
    uploader = make_app()
    ran: list[str] = []
    uploader.dispatcher.post(ran.append, "ui")
    uploader.dispatcher.post(uploader.dispatcher.shutdown)

    uploader.run([])

    assert ran == ["ui"]
    assert paths.backup_file.exists()


def test_start_with_windows_requires_startup(make_app: AppFactory, tmp_path: Path) -> None:
    uploader = make_app()
    with pytest.raises(RuntimeError):
        _ = uploader.start_with_windows

    uploader.startup()
    uploader.start_with_windows = True

    assert uploader.start_with_windows is True
    assert (tmp_path / "autostart" / "Hotsapi.Uploader.desktop").exists()


def test_version_string(make_app: AppFactory) -> None:
    assert make_app().version_string == "v1.4.2"


def test_version_change_triggers_restore_and_upgrade(
    make_app: AppFactory, paths: AppPaths, client: FakeUpdateClient
) -> None:
    _write(
        paths.settings_file,
        UserSettings(minimize_to_tray=True, upgrade_required=False, last_version="1.3.0"),
    )
    paths.backup_file.write_text(
        "settings_version: 1\nAutoUpdate: false\nMinimizeToTray: false\n", encoding="utf-8"
    )
    uploader = make_app()

    assert uploader.startup([AUTORUN_ARG]) is Presentation.WINDOW

    settings = UserSettings.load(paths.settings_file)
    assert settings.settings_version == 2
    assert settings.auto_update is False
    assert settings.minimize_to_tray is False
    assert settings.upgrade_required is False
    assert settings.last_version == "1.4.2"
    assert client.calls == 0


def test_reporter_installed_before_construction_can_fail(
    monkeypatch: pytest.MonkeyPatch, paths: AppPaths
) -> None:
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)

    def broken_registry() -> XdgAutostart:
        raise RuntimeError("no home directory")

    monkeypatch.setattr("hotsuploader.controller.create_autostart_registry", broken_registry)

    with pytest.raises(RuntimeError):
        UploaderApp(
            settings_path=paths.settings_file,
            install_dir=paths.install_dir,
            notice_presenter=MockNoticePresenter(),
            tasks=InlineTaskPool(),
        )

    assert isinstance(getattr(sys.excepthook, "__self__", None), ExceptionReporter)
