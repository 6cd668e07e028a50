"""Timezone helpers shared by the engine, planner and digest sender."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC; some providers strip
    tzinfo on the way back from storage, so comparisons always go through here.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
