"""Timezone helpers for expiry checks.

Persistence adapters may hand back naive datetimes; everything stored by this
platform is UTC, so naive values are read as UTC before comparing.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_aware(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def is_past(value: datetime | None, now: datetime | None = None) -> bool:
    """True when `value` is set and lies at or before `now`."""
    if value is None:
        return False
    return as_aware(value) <= as_aware(now or utcnow())
