"""Interface of the background file-monitoring/upload manager."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import nullcontext
from pathlib import Path
from typing import Any, ContextManager, Final, Generic, Protocol, TypeVar, runtime_checkable

from hotsuploader.observable import Signal

T = TypeVar("T")

logger: Final = logging.getLogger(__name__)


class SynchronizedCollection(Generic[T]):
    """Ordered collection mutated by background threads and read by the UI.

    Before background mutation starts, :meth:`enable_synchronization` binds
    the collection to a coordination lock. Every mutation and snapshot then
    takes that lock; ``changed`` fires after each mutation.
    """

    def __init__(self) -> None:
        self._items: list[T] = []
        self._lock: Any = None
        self.changed: Signal[SynchronizedCollection[T]] = Signal()

    @property
    def is_synchronized(self) -> bool:
        return self._lock is not None

    def enable_synchronization(self, lock: Any) -> None:
        """Register the collection for cross-thread access under ``lock``."""
        self._lock = lock

    def _guard(self) -> ContextManager[Any]:
        return self._lock if self._lock is not None else nullcontext()

    def append(self, item: T) -> None:
        with self._guard():
            self._items.append(item)
        self.changed.emit(self)

    def remove(self, item: T) -> None:
        with self._guard():
            self._items.remove(item)
        self.changed.emit(self)

    def snapshot(self) -> list[T]:
        with self._guard():
            return list(self._items)

    def __len__(self) -> int:
        with self._guard():
            return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())


@runtime_checkable
class ManagerLike(Protocol):
    """Background manager bound to a persisted item store."""

    files: SynchronizedCollection[Any]

    def start(self) -> None:
        """Begin monitoring and uploading; returns immediately."""
        ...


class IdleManager:
    """Manager stand-in that tracks no files.

    Used when the uploader runs without its upload backend, so the lifecycle
    can still be exercised end to end.
    """

    def __init__(self, storage_path: Path) -> None:
        self.storage_path = storage_path
        self.files: SynchronizedCollection[Any] = SynchronizedCollection()
        self.started = False

    def start(self) -> None:
        self.started = True
        logger.info("Manager started with storage %s", self.storage_path)


def create_coordination_lock() -> Any:
    """Lock shared between the UI and the manager for collection access."""
    return threading.RLock()
