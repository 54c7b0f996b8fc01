"""Provide clock and timestamp helpers."""

from __future__ import annotations

import uuid
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional, Union

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now()


class FixedClock:
    """Clock that always returns the same instant until moved."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


def _short_id(prefix: str = "") -> str:
    token = uuid.uuid4().hex[:8]
    return f"{prefix}-{token}" if prefix else token


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        if not isinstance(value, str):
            value = str(value)
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse an ISO date (a full datetime string keeps only its date part).

    Raises:
        ValueError: If *value* is a non-empty string that is not ISO formatted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    if "T" in text:
        parsed = _parse_iso(text)
        if parsed is None:
            raise ValueError(f"Invalid date: {text!r}")
        return parsed.date()
    return date.fromisoformat(text)


def parse_time(value: Union[str, time, None]) -> Optional[time]:
    """Parse an ISO time such as ``09:30`` or ``09:30:15``.

    Raises:
        ValueError: If *value* is a non-empty string that is not ISO formatted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))
