"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def now() -> datetime:
    """Current local time (naive)"""
    return datetime.now()


def local_day(value: Union[date, datetime]) -> date:
    """Calendar day of a timestamp in local time"""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def is_same_day(a: Union[date, datetime], b: Union[date, datetime]) -> bool:
    return local_day(a) == local_day(b)


def start_of_day(value: Union[date, datetime]) -> datetime:
    day = local_day(value)
    return datetime(day.year, day.month, day.day)


def format_month(value: Union[date, datetime]) -> str:
    """Reference month key, e.g. 2024-02"""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month(value: DateLike) -> date:
    """
    Normalize a reference month to the first day of that month.

    Accepts date/datetime objects or "YYYY-MM" / "YYYY-MM-DD" strings.
    """
    if isinstance(value, (date, datetime)):
        return date(value.year, value.month, 1)
    parts = value.strip().split("-")
    if len(parts) < 2:
        raise ValueError(f"Invalid reference month: {value!r}")
    return date(int(parts[0]), int(parts[1]), 1)


def parse_timestamp(value: DateLike) -> datetime:
    """Parse an ISO-8601 string (or date) into a datetime"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def coerce_timestamp(value: Optional[DateLike]) -> datetime:
    """Timestamp for a new record: parsed value, or now when omitted"""
    if value is None:
        return now()
    return parse_timestamp(value)
