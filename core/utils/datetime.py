"""Datetime utilities for common operations."""

from datetime import datetime, timezone


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite hands timestamps back without tzinfo; everything we store is UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def days_since(dt: datetime, reference: datetime | None = None) -> int:
    """
    Whole days elapsed between ``dt`` and ``reference`` (default: now).

    Args:
        dt: Earlier datetime
        reference: Later datetime

    Returns:
        Number of full days, never negative
    """
    reference = ensure_utc(reference) if reference else now()
    delta = reference - ensure_utc(dt)
    return max(0, delta.days)


def format_posted_ago(dt: datetime, reference: datetime | None = None) -> str:
    """
    Format a posting date the way job cards show it.

    Returns "Today", "Yesterday", "N days ago" under a week,
    "N weeks ago" under 30 days and "N months ago" beyond.
    """
    days = days_since(dt, reference)

    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    if days < 30:
        return f"{days // 7} weeks ago"
    return f"{days // 30} months ago"
