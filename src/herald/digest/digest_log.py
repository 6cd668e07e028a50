"""DigestSendLog aggregate — one row per (user, digest period) ever attempted.

The log is what keeps a weekly digest from reaching a subscriber twice.
Its ``period_key`` is unique: inserting a second log for the same user and
period fails, no matter how the caller got there.
"""

from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from herald.digest.events import DigestLogged
from herald.domain import herald
from herald.utils.time import as_utc, utc_now


class DigestStatus(Enum):
    SENT = "Sent"
    FAILED = "Failed"


def period_key(user_id, period_start, period_end) -> str:
    """Stable key for a user's digest period, independent of input timezone."""
    start = as_utc(period_start).isoformat()
    end = as_utc(period_end).isoformat()
    return f"{user_id}|{start}|{end}"


@herald.aggregate
class DigestSendLog:
    """Record of a digest delivery attempt for one subscriber and period."""

    user_id: Identifier(required=True)
    period_start: DateTime(required=True)
    period_end: DateTime(required=True)
    period_key: String(required=True, unique=True, max_length=255)
    status: String(choices=DigestStatus, required=True)
    error_message: Text()
    sent_at: DateTime(required=True)

    @classmethod
    def record(cls, user_id, period_start, period_end, succeeded: bool, error_message=None):
        now = utc_now()
        status = DigestStatus.SENT if succeeded else DigestStatus.FAILED

        log = cls(
            user_id=user_id,
            period_start=as_utc(period_start),
            period_end=as_utc(period_end),
            period_key=period_key(user_id, period_start, period_end),
            status=status.value,
            error_message=None if succeeded else error_message,
            sent_at=now,
        )

        log.raise_(
            DigestLogged(
                log_id=str(log.id),
                user_id=str(user_id),
                period_start=log.period_start,
                period_end=log.period_end,
                status=status.value,
                logged_at=now,
            )
        )

        return log
