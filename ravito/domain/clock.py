"""
Wall-clock helpers for the night-guard window.

Night runs from ``start_hour`` (inclusive) to ``end_hour`` (exclusive) and
may wrap past midnight (22:00 -> 06:00 by default).  Callers pass the hour
or an injected clock instead of reading the host's local time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]

NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6


def is_night_time(
    hour: int, start_hour: int = NIGHT_START_HOUR, end_hour: int = NIGHT_END_HOUR
) -> bool:
    """Return True if *hour* (0-23) falls in the night window."""
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def zone_clock(timezone: str) -> Clock:
    """Clock returning aware ``datetime`` values in *timezone*."""
    tz = ZoneInfo(timezone)

    def now() -> datetime:
        return datetime.now(tz)

    return now
