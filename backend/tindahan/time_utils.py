from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def business_date(tz_name: str, now: Optional[datetime] = None) -> str:
    """
    Current calendar date in the store's timezone as "YYYY-MM-DD".

    `now` is a UTC-naive datetime (defaults to utcnow()).
    """
    if now is None:
        now = utcnow()
    return to_local_date(now, tz_name).isoformat()


def to_local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of a UTC-naive datetime in the given timezone."""
    return dt.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def local_midnight_utc(day: date, tz_name: str) -> datetime:
    """Start of a local calendar day, as a UTC-naive datetime."""
    local = datetime(day.year, day.month, day.day, tzinfo=ZoneInfo(tz_name))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def normalize_business_date(value) -> str:
    """Accept a date, datetime or "YYYY-MM-DD" string; return "YYYY-MM-DD"."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return date.fromisoformat(value.strip()).isoformat()
    raise ValueError("invalid date")


def id_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp prefix used in generated document keys (yyyyMMdd_HHmmss)."""
    return (now or utcnow()).strftime("%Y%m%d_%H%M%S")
