"""Timestamp utilities for UTC handling.

All timestamps inside the portal core are timezone-aware UTC datetimes. The
persistence layer stores them as fixed-width ISO 8601 strings so that string
comparison in SQL matches chronological order, which the recency window and
retention sweeps rely on.
"""

from datetime import datetime, timezone
from typing import Optional

DB_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Example:
        >>> utc_now().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Timezone-naive values are treated as UTC; aware values are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime for logs and display (second precision, 'Z' suffix).

    Example:
        >>> format_timestamp(datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc))
        '2025-11-04T12:00:00Z'
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_db_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Format a datetime for database storage.

    Args:
        dt: Datetime to format (naive values are treated as UTC)

    Returns:
        Fixed-width ISO 8601 string with microseconds, or None
    """
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return None
    return dt_utc.strftime(DB_TIMESTAMP_FORMAT)


def parse_db_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp back into an aware UTC datetime.

    Accepts the storage format as well as values written without microseconds.

    Args:
        value: Stored ISO 8601 string

    Returns:
        Timezone-aware datetime in UTC, or None for empty input
    """
    if not value:
        return None

    cleaned = value.rstrip("Z")
    try:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S.%f")
    except ValueError:
        dt = datetime.strptime(cleaned, "%Y-%m-%dT%H:%M:%S")

    return dt.replace(tzinfo=timezone.utc)
