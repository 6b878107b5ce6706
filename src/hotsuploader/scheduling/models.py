"""Data models for scheduling the recurring update check."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass
class UpdateSchedule:
    """Recurring update-check timing."""

    interval: timedelta = timedelta(hours=1)
