from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterator, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(value: date) -> datetime:
    if isinstance(value, datetime):
        value = as_utc(value).date()
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def end_of_day(value: date) -> datetime:
    """Last representable instant of the value's UTC calendar day."""
    if isinstance(value, datetime):
        value = as_utc(value).date()
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def parse_date(value: Any, fallback: Optional[datetime]) -> Optional[datetime]:
    """Parse an ISO date/datetime, returning ``fallback`` for missing or malformed input."""
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return start_of_day(value)
    if not value or not isinstance(value, str):
        return fallback
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return fallback
    return as_utc(parsed)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
