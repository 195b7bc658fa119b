"""
Helper Functions
================

Common utility functions used across the application.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """Format datetime to an ISO 8601 string with millisecond precision."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def from_epoch_ms(value: int | str) -> datetime:
    """Convert epoch milliseconds (App Store ``*_ms`` fields) to UTC datetime."""
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
