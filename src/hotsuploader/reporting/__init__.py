"""Exception reporting for the uploader process."""

from hotsuploader.reporting.exceptions import (
    DISPATCHER_CHANNEL,
    DOMAIN_CHANNEL,
    TASK_CHANNEL,
    ExceptionReporter,
)
from hotsuploader.reporting.notice import ErrorNotice, NoticeRenderer

__all__ = [
    "DISPATCHER_CHANNEL",
    "DOMAIN_CHANNEL",
    "TASK_CHANNEL",
    "ErrorNotice",
    "ExceptionReporter",
    "NoticeRenderer",
]
