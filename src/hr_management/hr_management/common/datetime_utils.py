from __future__ import annotations

import calendar
from datetime import date, datetime, time

import pytz

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError("Date must be in YYYY-MM-DD format")


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Current wall-clock time in the business timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(pytz.timezone(tz_name))


def ms_since_midnight(value: datetime | time) -> int:
    t = value.time() if isinstance(value, datetime) else value
    return ((t.hour * 60 + t.minute) * 60 + t.second) * 1000 + t.microsecond // 1000


def format_duration(elapsed_ms: int) -> str:
    """Format elapsed milliseconds as ``"{hours}h {minutes}m"``; seconds are dropped."""
    elapsed_ms = max(int(elapsed_ms), 0)
    hours = elapsed_ms // 3_600_000
    minutes = (elapsed_ms % 3_600_000) // 60_000
    return f"{hours}h {minutes}m"


def month_name(value: date) -> str:
    """Lower-case English month name, the key used by ledger buckets."""
    return calendar.month_name[value.month].lower()


def normalize_month(value: str) -> str:
    month = (value or "").strip().lower()
    if month not in {m.lower() for m in calendar.month_name if m}:
        raise ValidationError(f"Unknown month: {value!r}")
    return month
