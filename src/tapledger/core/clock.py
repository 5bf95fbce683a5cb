"""
Clock sources for record timestamps.

Services never call ``datetime.now()`` directly; they read time from an
injected clock so that ``last_played_at`` values are reproducible in tests
and tools.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    """Anything that can report the current time as an aware UTC datetime."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Manually driven clock.

    Starts at ``start`` (or the Unix epoch) and only moves when ``set()`` or
    ``advance()`` is called.
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = _ensure_utc(start or datetime(1970, 1, 1, tzinfo=timezone.utc))

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = _ensure_utc(value)

    def advance(self, seconds: float = 0.0, **delta: float) -> datetime:
        self._now = self._now + timedelta(seconds=seconds, **delta)
        return self._now


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_unix_seconds(value: datetime) -> int:
    """Convert an aware datetime to whole Unix seconds (storage format)."""
    return int(_ensure_utc(value).timestamp())


def from_unix_seconds(value: int) -> datetime:
    """Convert stored Unix seconds back to an aware UTC datetime."""
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
