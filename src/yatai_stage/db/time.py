"""Time utilities for database models."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def local_date_key(moment: datetime, timezone: str) -> str:
    """Return the ``YYYY-MM-DD`` calendar date of ``moment`` in ``timezone``."""
    return ensure_utc(moment).astimezone(ZoneInfo(timezone)).date().isoformat()
