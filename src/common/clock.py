"""
Clock helpers shared by the monitoring and versioning layers.
It centralizes cross-cutting concerns like settings, logging, and clock access used by the monitor and versioning layers.
Components accept a `clock` callable so tests can pin time without patching globals.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def epoch_millis(moment: datetime) -> int:
    """Return whole milliseconds since the Unix epoch for a timezone-aware instant."""

    return int(moment.timestamp() * 1000)


def ensure_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""

    if moment.tzinfo is None or moment.tzinfo.utcoffset(moment) is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)
