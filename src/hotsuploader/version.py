"""Application version parsing and display formatting."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from hotsuploader import __version__

_VERSION_RE: Final = re.compile(r"^v?(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True, order=True)
class AppVersion:
    """Three-part application version (major.minor.build)."""

    major: int
    minor: int
    build: int = 0

    @classmethod
    def parse(cls, text: str) -> AppVersion:
        """Parse a version or release tag such as ``1.4.2`` or ``v1.4``.

        Args:
            text: Version string, optionally prefixed with ``v``

        Returns:
            Parsed AppVersion

        Raises:
            ValueError: If the string does not start with MAJOR.MINOR
        """
        match = _VERSION_RE.match(text.strip())
        if not match:
            raise ValueError(f"Invalid version string: {text!r}")
        major, minor, build = match.groups()
        return cls(int(major), int(minor), int(build or 0))

    @property
    def display(self) -> str:
        """Render as ``vMAJOR.MINOR`` with ``.BUILD`` only when non-zero."""
        text = f"v{self.major}.{self.minor}"
        if self.build:
            text += f".{self.build}"
        return text

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"


def current_version() -> AppVersion:
    """Version of the running package."""
    return AppVersion.parse(__version__)
