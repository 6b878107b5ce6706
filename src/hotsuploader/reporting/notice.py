"""Text of the notice shown for unexpected failures."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime

from jinja2 import Template


@dataclass
class ErrorNotice:
    """A user-visible report of an unhandled exception."""

    title: str
    message: str
    channel: str
    timestamp: datetime = field(default_factory=datetime.now)


class NoticeRenderer:
    """Renders notices for unhandled exceptions."""

    # Notice body using Jinja2 syntax
    NOTICE_TEMPLATE = """\
{{ detail }}
--
{{ app_name }} {{ version }} | channel: {{ channel }} | {{ timestamp }}"""

    def __init__(
        self,
        app_name: str = "Hotsapi Uploader",
        version: str = "",
        template: str | None = None,
    ) -> None:
        """Initialize the notice renderer.

        Args:
            app_name: Application name shown in the footer
            version: Version string shown in the footer
            template: Custom notice template (uses default if None)
        """
        self.app_name = app_name
        self.version = version
        self.template = Template(template or self.NOTICE_TEMPLATE)

    def render(self, exc: BaseException, channel: str) -> ErrorNotice:
        """Build the notice for an exception raised on ``channel``.

        The message carries the full exception detail including traceback.
        """
        detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        timestamp = datetime.now()
        message = self.template.render(
            detail=detail.rstrip(),
            app_name=self.app_name,
            version=self.version,
            channel=channel,
            timestamp=timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        )
        return ErrorNotice(
            title=f"Unhandled {channel} exception",
            message=message,
            channel=channel,
            timestamp=timestamp,
        )
