"""
Date and time helpers for backend timestamps.

The backend sends ISO8601 strings (usually UTC with a trailing ``Z``).
Calendar-day questions such as "was this trade closed today" are answered
in the user's local time zone.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO8601 timestamp from the backend.

    Args:
        value: ISO string, datetime, or None

    Returns:
        Timezone-aware datetime (naive values are assumed UTC), or None

    Raises:
        ValueError: If the string is not ISO8601
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse a ``YYYY-MM-DD`` date, also accepting full ISO timestamps.

    Returns:
        date, or None for empty input

    Raises:
        ValueError: If the value is not a date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if len(text) > 10:
        return parse_timestamp(text).date()  # type: ignore[union-attr]
    return date.fromisoformat(text)


def format_date_param(value: Union[date, datetime]) -> str:
    """Format a date as the ``YYYY-MM-DD`` query parameter the backend expects."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def local_date(moment: datetime) -> date:
    """Calendar date of a timestamp in the local time zone."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone().date()


def is_same_local_day(moment: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check whether a timestamp falls on the same local calendar day as ``now``.

    Args:
        moment: Timestamp to check, None never matches
        now: Reference time, defaults to the current time

    Returns:
        True if both fall on the same local date
    """
    if moment is None:
        return False
    if now is None:
        now = datetime.now().astimezone()
    return local_date(moment) == local_date(now)


def export_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp used in export file names, e.g. ``2024-03-01-154512``."""
    if now is None:
        now = datetime.now()
    return now.strftime("%Y-%m-%d-%H%M%S")
