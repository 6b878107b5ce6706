"""Explicit subscription primitives used to publish state to the UI layer."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Final, Generic, TypeVar

T = TypeVar("T")

logger: Final = logging.getLogger(__name__)


class Signal(Generic[T]):
    """Callback hub that delivers one value to every subscriber.

    Subscribers are called on the emitting thread. Listeners that need to
    touch UI objects should marshal onto the dispatcher themselves.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Callable[[T], None]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a listener.

        Args:
            callback: Called with each emitted value

        Returns:
            A callable that removes the listener again
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def emit(self, value: T) -> None:
        """Deliver a value to a snapshot of the current listeners."""
        with self._lock:
            listeners = list(self._listeners)
        for callback in listeners:
            callback(value)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)


class ObservableValue(Signal[T]):
    """A value holder that notifies subscribers when the value changes.

    Setting the current value again is a no-op, so concurrent writers that
    agree on the value produce a single notification.
    """

    def __init__(self, initial: T) -> None:
        super().__init__()
        self._value = initial
        self._value_lock = threading.Lock()

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        """Update the value.

        Args:
            value: New value

        Returns:
            True if the value changed and subscribers were notified
        """
        with self._value_lock:
            if self._value == value:
                return False
            self._value = value
        logger.debug("Observable value changed to %r", value)
        self.emit(value)
        return True
