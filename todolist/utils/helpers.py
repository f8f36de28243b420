"""
Helper Functions
================

Common utility functions used across the application.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def epoch_millis(dt: datetime | None = None) -> int:
    """Milliseconds since the Unix epoch (now if *dt* is omitted)."""
    return int((dt or utc_now()).timestamp() * 1000)


def is_blank(value: str | None) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def as_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
