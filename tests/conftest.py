from collections.abc import Callable, Generator
from concurrent.futures import Future
from pathlib import Path
from typing import Any

import pytest

from hotsuploader.dispatch import Dispatcher, TaskPool
from hotsuploader.settings.application import AppPaths
from hotsuploader.settings.migration import SettingsMigrator
from hotsuploader.settings.store import SettingsStore
from hotsuploader.updates.client import ReleaseInfo


class InlineTaskPool(TaskPool):
    """Task pool that runs spawned work on the calling thread."""

    def __init__(self) -> None:
        super().__init__()
        self.spawned: list[Future[Any]] = []

    def spawn(self, func: Callable[..., Any], *args: Any) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(func(*args))
        except Exception as exc:
            future.set_exception(exc)
        self.spawned.append(future)
        self._on_done(future)
        return future


class FakeUpdateClient:
    """Update client returning canned results."""

    def __init__(self, result: ReleaseInfo | Exception | None = None) -> None:
        self.result = result
        self.calls = 0
        self.closed = False

    def check_and_apply_update(self) -> ReleaseInfo | None:
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def paths(tmp_path: Path) -> AppPaths:
    install_dir = tmp_path / "app-1.4.2"
    install_dir.mkdir()
    return AppPaths.from_install_dir(install_dir, tmp_path / "roaming" / "user.yaml")


@pytest.fixture
def store(paths: AppPaths) -> SettingsStore:
    return SettingsStore.open(paths.settings_file)


@pytest.fixture
def migrator(store: SettingsStore, paths: AppPaths) -> SettingsMigrator:
    return SettingsMigrator(store, paths)


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher()


@pytest.fixture
def tasks() -> Generator[InlineTaskPool, None, None]:
    pool = InlineTaskPool()
    yield pool
    pool.shutdown()


@pytest.fixture
def release() -> ReleaseInfo:
    return ReleaseInfo(tag_name="v1.5.0", name="Hotsapi Uploader 1.5")
