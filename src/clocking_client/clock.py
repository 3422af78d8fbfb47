"""
Clock utilities.

PURPOSE: Parse server timestamps and render them for display.
AI CONTEXT: Pure functions, no state. The server speaks UTC ISO 8601;
everything shown to the user is local time.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, tzinfo

from .config import Config

__all__ = [
    "parse_timestamp",
    "format_local",
    "elapsed_minutes",
    "format_duration",
]

HOUR_MINUTES = 60
DAY_MINUTES = HOUR_MINUTES * 24

# Seconds fraction longer than microseconds (the server may send nanoseconds)
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse a server timestamp into an aware datetime.

    Accepts ISO 8601 strings with a 'Z' suffix or explicit offset, and
    fractional seconds of any precision (truncated to microseconds).
    Naive values are taken to be UTC.

    Args:
        value: ISO 8601 string, or a datetime passed through unchanged
            apart from the naive-to-UTC rule.

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp.

    Example:
        >>> parse_timestamp("2024-05-01T09:00:00.123456789Z")
        datetime.datetime(2024, 5, 1, 9, 0, 0, 123456, tzinfo=datetime.timezone.utc)
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not isinstance(value, str):
            raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
        text = _LONG_FRACTION.sub(r"\1", value.strip())
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_local(
    value: str | datetime,
    fmt: str | None = None,
    tz: tzinfo | None = None,
) -> str:
    """
    Render a timestamp for display.

    Args:
        value: Server timestamp string or datetime.
        fmt: strftime format. Defaults to Config.TIME_FORMAT.
        tz: Target timezone. Defaults to the machine's local zone.

    Returns:
        Formatted string, e.g. '2024-05-01 Wed 11:00'.

    Raises:
        ValueError: If value cannot be parsed.
    """
    moment = parse_timestamp(value).astimezone(tz)
    return moment.strftime(fmt or Config.TIME_FORMAT)


def elapsed_minutes(start: str | datetime, now: datetime | None = None) -> int:
    """Whole minutes between start and now (never negative)."""
    current = now or datetime.now(UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    minutes = int((current - parse_timestamp(start)).total_seconds() // 60)
    return max(minutes, 0)


def format_duration(total_minutes: int) -> str:
    """
    Format a duration in minutes as 'H:MM', or 'D:HH:MM' past one day.

    Example:
        >>> format_duration(45)
        '0:45'
        >>> format_duration(125)
        '2:05'
        >>> format_duration(1505)
        '1:01:05'
    """
    if total_minutes < HOUR_MINUTES:
        return f"0:{total_minutes:02d}"
    if total_minutes < DAY_MINUTES:
        hours, minutes = divmod(total_minutes, HOUR_MINUTES)
        return f"{hours}:{minutes:02d}"
    days, remains = divmod(total_minutes, DAY_MINUTES)
    hours, minutes = divmod(remains, HOUR_MINUTES)
    return f"{days}:{hours:02d}:{minutes:02d}"
