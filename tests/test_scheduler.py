import threading
from datetime import timedelta

import pytest

from hotsuploader.scheduling import Scheduler, UpdateSchedule


def test_default_interval_is_one_hour() -> None:
    assert UpdateSchedule().interval == timedelta(hours=1)
    assert Scheduler(lambda: None).interval == timedelta(hours=1)


def test_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        Scheduler(lambda: None, timedelta(0))


def test_ticks_until_stopped() -> None:
    ticked = threading.Event()
    calls: list[int] = []

    def callback() -> None:
        calls.append(1)
        if len(calls) >= 3:
            ticked.set()

    scheduler = Scheduler(callback, timedelta(milliseconds=10))
    scheduler.start()
    try:
        assert ticked.wait(5)
    finally:
        scheduler.stop()

    assert scheduler.is_running is False
    count = len(calls)
    assert scheduler.ticks >= 3
    ticked.clear()
    assert not ticked.wait(0.05)
    assert len(calls) == count


def test_no_tick_before_first_interval() -> None:
    calls: list[int] = []
    scheduler = Scheduler(lambda: calls.append(1), timedelta(hours=1))
    scheduler.start()
    scheduler.start()
    assert scheduler.is_running is True

    scheduler.stop()

    assert calls == []
    assert scheduler.ticks == 0
