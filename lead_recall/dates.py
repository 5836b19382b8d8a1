"""Timestamp parsing and day arithmetic shared by the contact views."""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pandas as pd

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_DAY = timedelta(days=1)
_RELATIVE_KEYWORDS = frozenset({"now", "today"})


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse ``value`` into an aware UTC datetime, or ``None`` if it cannot be.

    Naive values are read as UTC. Unparsable input is treated as absent rather
    than raising, so one bad imported row never aborts a whole batch.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    # pandas resolves these against the system clock.
    if value.strip().lower() in _RELATIVE_KEYWORDS:
        return None

    parsed = pd.to_datetime(value.strip(), utc=True, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(now: datetime, then: datetime) -> int:
    """Whole days elapsed from ``then`` to ``now``, floored and never negative."""

    elapsed = _as_utc(now) - _as_utc(then)
    return max(0, elapsed // ONE_DAY)


def local_now(utc_offset_hours: float = 0.0) -> datetime:
    """Current time expressed in a fixed-offset business timezone."""

    zone = timezone(timedelta(hours=utc_offset_hours))
    return datetime.now(timezone.utc).astimezone(zone)


def local_date(now: datetime, days: int = 0) -> str:
    """Calendar date string (``YYYY-MM-DD``) of ``now`` shifted by ``days``."""

    return (now + timedelta(days=days)).date().isoformat()


def to_iso(now: datetime) -> str:
    return _as_utc(now).isoformat()


__all__ = ["EPOCH", "parse_timestamp", "days_between", "local_now", "local_date", "to_iso"]
