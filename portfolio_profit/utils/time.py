"""Time utilities (UTC)."""

from datetime import date, datetime, time, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime; naive values are assumed UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_unix(dt: datetime) -> int:
    return int(ensure_utc(dt).timestamp())


def end_of_day_utc(day: date) -> datetime:
    """
    Last second of ``day`` in UTC.

    Daily candles are stamped at midnight, so a range ending at the start
    of a day would drop that day's close.
    """
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
