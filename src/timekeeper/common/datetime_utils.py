from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from ..core.constants import DB_TIMESTAMP_FORMAT

SECONDS_PER_HOUR = Decimal(3600)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def at_time_of_day(reference: datetime, time_of_day: time) -> datetime:
    """Return a new datetime on ``reference``'s calendar date at ``time_of_day``."""
    return datetime.combine(reference.date(), time_of_day)


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Exact (unrounded) hours from start to end; negative when end < start."""
    delta = end - start
    seconds = Decimal(delta.days * 86400 + delta.seconds) + Decimal(delta.microseconds) / Decimal(1_000_000)
    return seconds / SECONDS_PER_HOUR


def week_start_for(day: date) -> date:
    """Sunday on or before ``day`` (weeks run Sunday..Saturday)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def format_db_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Fixed ``YYYY-MM-DD HH:MM:SS`` local form used for stored timestamps (no offset)."""
    if value is None:
        return None
    return value.strftime(DB_TIMESTAMP_FORMAT)


def parse_db_timestamp(value) -> Optional[datetime]:
    """Accept a datetime, a stored ``YYYY-MM-DD HH:MM:SS`` string or an ISO-like form (``T`` separator, no seconds)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(microsecond=0, tzinfo=None)

    v = str(value).strip().replace("T", " ")
    for fmt in (DB_TIMESTAMP_FORMAT, "%Y-%m-%d %H:%M"):
        try:
            return datetime.strptime(v, fmt)
        except ValueError:
            continue

    # Browser JSON dates, e.g. 2026-02-02T07:00:00.000Z; the offset is dropped (local wall time).
    if v.endswith("Z"):
        v = v[:-1]
    try:
        return datetime.fromisoformat(v).replace(microsecond=0, tzinfo=None)
    except ValueError:
        raise ValueError(f"Invalid timestamp: {value!r}")
