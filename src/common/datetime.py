"""Datetime utilities."""

from datetime import datetime, timezone

from dateutil.parser import parse as parse_date


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: str | None) -> datetime | None:
    """Parse a timestamp attribute scraped from a page.

    Returns None for empty or unparseable values instead of raising.
    """
    if not value or not value.strip():
        return None
    try:
        return ensure_utc(parse_date(value.strip()))
    except (ValueError, OverflowError):
        return None
