"""Weekly digest calendar — which period to cover and when to run next."""

from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

from herald.utils.time import as_utc, utc_now

DEFAULT_DIGEST_TIMEZONE = "Europe/Sofia"
DEFAULT_DIGEST_WEEKDAY = 4  # Friday
DEFAULT_DIGEST_TIME = "17:30"


def parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def weekly_period(now: datetime | None = None, tz: str = DEFAULT_DIGEST_TIMEZONE) -> tuple[datetime, datetime]:
    """``[now - 7 days, now)`` measured on the wall clock of ``tz``, returned in UTC."""
    local_now = (as_utc(now) or utc_now()).astimezone(ZoneInfo(tz))
    # Subtract on the naive wall clock so a DST switch keeps the local time of day
    local_start = (local_now.replace(tzinfo=None) - timedelta(days=7)).replace(tzinfo=ZoneInfo(tz))
    return as_utc(local_start), as_utc(local_now)


def next_weekly_run(
    now: datetime | None = None,
    weekday: int = DEFAULT_DIGEST_WEEKDAY,
    at: time | str = DEFAULT_DIGEST_TIME,
    tz: str = DEFAULT_DIGEST_TIMEZONE,
) -> datetime:
    """The next ``weekday`` at ``at`` in ``tz`` strictly after ``now``, in UTC."""
    if isinstance(at, str):
        at = parse_time(at)
    zone = ZoneInfo(tz)
    local_now = (as_utc(now) or utc_now()).astimezone(zone)

    days_ahead = (weekday - local_now.weekday()) % 7
    candidate_date = local_now.date() + timedelta(days=days_ahead)
    candidate = datetime.combine(candidate_date, at, tzinfo=zone)
    if candidate <= local_now:
        candidate = datetime.combine(candidate_date + timedelta(days=7), at, tzinfo=zone)
    return as_utc(candidate)
