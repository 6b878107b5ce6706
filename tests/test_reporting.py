import logging
import sys
import threading
from collections.abc import Generator

import pytest

from conftest import InlineTaskPool
from hotsuploader.dispatch import Dispatcher
from hotsuploader.presentation.protocols import FailingNoticePresenter, MockNoticePresenter
from hotsuploader.reporting.exceptions import (
    DISPATCHER_CHANNEL,
    DOMAIN_CHANNEL,
    TASK_CHANNEL,
    ExceptionReporter,
)
from hotsuploader.reporting.notice import NoticeRenderer


@pytest.fixture
def presenter() -> MockNoticePresenter:
    return MockNoticePresenter()


@pytest.fixture
def reporter(
    presenter: MockNoticePresenter, dispatcher: Dispatcher, tasks: InlineTaskPool
) -> Generator[ExceptionReporter, None, None]:
    reporter = ExceptionReporter(presenter, dispatcher, tasks, NoticeRenderer(version="v1.4"))
    yield reporter
    reporter.uninstall()


def _error_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [
        r
        for r in caplog.records
        if r.levelno == logging.ERROR and r.name == "hotsuploader.reporting.exceptions"
    ]


def _boom() -> None:
    raise ValueError("boom")


def test_dispatcher_exception_reported_once(
    reporter: ExceptionReporter,
    dispatcher: Dispatcher,
    presenter: MockNoticePresenter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    reporter.install()
    ran: list[str] = []
    dispatcher.post(_boom)
    dispatcher.post(ran.append, "after")

    with caplog.at_level(logging.ERROR):
        assert dispatcher.process_pending() == 2

    records = _error_records(caplog)
    assert len(records) == 1
    assert records[0].getMessage() == f"Unhandled {DISPATCHER_CHANNEL} exception"
    assert isinstance(records[0].exc_info[1], ValueError)
    assert [n.channel for n in presenter.notices] == [DISPATCHER_CHANNEL]
    assert ran == ["after"]


def test_task_exception_reported_once(
    reporter: ExceptionReporter,
    tasks: InlineTaskPool,
    presenter: MockNoticePresenter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    reporter.install()
    with caplog.at_level(logging.ERROR):
        future = tasks.spawn(_boom)

    assert isinstance(future.exception(), ValueError)
    assert len(_error_records(caplog)) == 1
    assert [n.channel for n in presenter.notices] == [TASK_CHANNEL]


def test_thread_exception_reported_on_domain_channel(
    reporter: ExceptionReporter,
    presenter: MockNoticePresenter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    reporter.install()
    with caplog.at_level(logging.ERROR):
        thread = threading.Thread(target=_boom)
        thread.start()
        thread.join()

    assert len(_error_records(caplog)) == 1
    assert [n.channel for n in presenter.notices] == [DOMAIN_CHANNEL]


def test_sys_excepthook_reports_domain_channel(
    reporter: ExceptionReporter,
    presenter: MockNoticePresenter,
    caplog: pytest.LogCaptureFixture,
) -> None:
    reporter.install()
    try:
        _boom()
    except ValueError as exc:
        error = exc

    with caplog.at_level(logging.ERROR):
        sys.excepthook(type(error), error, error.__traceback__)

    assert len(_error_records(caplog)) == 1
    notice = presenter.notices[0]
    assert notice.title == "Unhandled domain exception"
    assert "ValueError: boom" in notice.message
    assert "v1.4" in notice.message


def test_failing_presenter_is_ignored(
    dispatcher: Dispatcher, tasks: InlineTaskPool, caplog: pytest.LogCaptureFixture
) -> None:
    presenter = FailingNoticePresenter()
    reporter = ExceptionReporter(presenter, dispatcher, tasks)

    with caplog.at_level(logging.DEBUG):
        reporter.report(ValueError("boom"), TASK_CHANNEL)

    assert presenter.attempts == 1
    assert len(_error_records(caplog)) == 1
    assert "Could not display notice" in caplog.text


def test_uninstall_restores_previous_hooks(
    presenter: MockNoticePresenter, dispatcher: Dispatcher, tasks: InlineTaskPool
) -> None:
    previous_sys = sys.excepthook
    previous_thread = threading.excepthook
    reporter = ExceptionReporter(presenter, dispatcher, tasks)

    reporter.install()
    reporter.install()
    assert sys.excepthook is not previous_sys
    assert dispatcher.exception_handler is not None

    reporter.uninstall()
    assert sys.excepthook is previous_sys
    assert threading.excepthook is previous_thread
    assert dispatcher.exception_handler is None
    assert tasks.exception_handler is None


def test_dispatcher_without_handler_propagates(dispatcher: Dispatcher) -> None:
    dispatcher.post(_boom)

    with pytest.raises(ValueError):
        dispatcher.process_pending()


def test_notice_render_custom_template() -> None:
    renderer = NoticeRenderer(template="{{ channel }}: {{ detail.splitlines()[-1] }}")

    notice = renderer.render(KeyError("missing"), TASK_CHANNEL)

    assert notice.title == "Unhandled task exception"
    assert notice.message == "task: KeyError: 'missing'"
