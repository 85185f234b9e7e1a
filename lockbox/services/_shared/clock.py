"""UTC time helpers shared by services, stores and the secret service."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MICROSECOND = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Drivers without timezone support (SQLite) hand back naive values; those
    were written as UTC, so the zone is attached rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_epoch_micros(value: datetime) -> int:
    """Whole microseconds elapsed since the Unix epoch."""
    return (ensure_utc(value) - EPOCH) // MICROSECOND


def from_epoch_micros(value: int) -> datetime:
    return EPOCH + timedelta(microseconds=int(value))
