"""
Datetime utilities for the chatsync framework.

Wire timestamps arrive as ISO 8601 strings (JavaScript `Date.toJSON()` output,
which ends in `Z`). Everything handed to the caches is timezone-aware.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Union


def ensure_tz_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is timezone-aware (UTC if naive).

    Args:
        dt: The datetime to process, can be None

    Returns:
        The timezone-aware datetime (or None if input was None)
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def from_timestamp(timestamp: Union[int, float]) -> datetime:
    """
    Create a timezone-aware UTC datetime from a timestamp.

    Args:
        timestamp: Unix timestamp (seconds since epoch)

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def from_isoformat(iso_string: str) -> datetime:
    """
    Create a timezone-aware datetime from an ISO format string.

    A trailing `Z` is accepted. If the string has no timezone info, UTC is assumed.

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime
    """
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"
    dt = datetime.fromisoformat(iso_string)
    return ensure_tz_aware(dt)


def parse_wire_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp field from a wire payload.

    Accepts ISO strings, epoch numbers (milliseconds when larger than 1e11)
    and datetimes. Anything unparseable yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_tz_aware(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000.0 if value > 1e11 else value
        return from_timestamp(seconds)
    if isinstance(value, str):
        try:
            return from_isoformat(value)
        except ValueError:
            return None
    return None
