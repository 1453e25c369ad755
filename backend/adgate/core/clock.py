"""UTC clock helpers shared by models, repositories and services."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current timezone-aware UTC instant."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Normalise ``value`` to an aware UTC datetime.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns; naive values
    read back from it are labelled as UTC without conversion.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
