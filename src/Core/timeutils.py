# src/Core/timeutils.py

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    All timestamp columns store naive UTC so values read back from SQLite
    and PostgreSQL compare the same way.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def from_epoch(seconds: float) -> datetime:
    """Naive UTC datetime for a unix timestamp."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
