"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterator, Optional

from dateutil import parser as date_parser
from dateutil import tz


def get_timezone(name: str):
    """Return a tzinfo for an IANA zone name.

    Raises:
        ValueError: If the zone name is unknown
    """
    zone = tz.gettz(name)
    if zone is None:
        raise ValueError(f"Unknown timezone '{name}'")
    return zone


def now_in(zone) -> datetime:
    """Return the current wall-clock time in ``zone`` as a naive datetime."""
    return datetime.now(zone).replace(tzinfo=None)


def today_in(zone) -> date:
    """Return today's calendar date in ``zone``."""
    return now_in(zone).date()


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2025-01-15", "January 15, 2025", ...) and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string
        today: Reference day for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def to_local_datetime(value: Any, zone=None) -> Optional[datetime]:
    """Normalize a stored instant to a naive datetime.

    Accepts datetimes, dates, ISO-like strings and epoch milliseconds.
    Aware values are converted to ``zone`` (when given) before the tzinfo is
    dropped. Returns None for anything unusable.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        result = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        try:
            result = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            result = date_parser.isoparse(value)
        except ValueError:
            try:
                result = date_parser.parse(value)
            except (ValueError, OverflowError):
                return None
    else:
        return None

    if result.tzinfo is not None:
        if zone is not None:
            result = result.astimezone(zone)
        result = result.replace(tzinfo=None)
    return result


def start_of_day(day: date) -> datetime:
    """Return midnight at the start of ``day``."""
    return datetime.combine(day, time.min)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
