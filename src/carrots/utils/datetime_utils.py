"""Datetime utilities for rendering release dates.

Upstream publish dates are ISO 8601 UTC strings; pages show them as an
absolute date plus a relative "N units ago" phrase.
"""

from datetime import UTC, datetime

_UNITS: tuple[tuple[str, int], ...] = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def get_current_datetime_utc() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(UTC)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when malformed.

    Naive timestamps are assumed to be UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_absolute(value: str | None) -> str:
    """Format a timestamp as e.g. "12 Mar 2024"; empty when malformed."""
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return ""
    return f"{parsed.day} {parsed:%b %Y}"


def format_relative(value: str | None, now: datetime | None = None) -> str:
    """Format a timestamp relative to now.

    Examples:
        >>> from datetime import datetime, UTC
        >>> format_relative("2024-01-01T00:00:00Z",
        ...                 datetime(2024, 1, 3, tzinfo=UTC))
        '2 days ago'

    """
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return ""
    now = now or get_current_datetime_utc()
    seconds = int((now - parsed).total_seconds())
    if seconds < 60:
        return "just now"
    for unit, length in _UNITS:
        count = seconds // length
        if count >= 1:
            suffix = "" if count == 1 else "s"
            return f"{count} {unit}{suffix} ago"
    return "just now"
