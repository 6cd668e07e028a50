"""RunDigestForPeriod command + handler — the weekly digest batch.

Every enabled email subscriber receives one digest per period listing the
events the event source reports for it. A subscriber that already has a
send log for the period is skipped; the log is written after every attempt,
successful or not, so failed digests are not retried by a re-run.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime
from protean.utils.globals import current_domain

from herald.digest.composer import DIGEST_SUBJECT, compose_digest_body
from herald.digest.digest_log import DigestSendLog
from herald.domain import herald
from herald.event_source import get_event_source
from herald.exceptions import DuplicateDigestLog
from herald.notification.delivery import deliver
from herald.notification.notification import Notification, NotificationChannel
from herald.preference.queries import enabled_subscribers
from herald.utils.time import as_utc

logger = structlog.get_logger(__name__)


@herald.command(part_of="DigestSendLog")
class RunDigestForPeriod:
    """Send the digest for the half-open period ``[period_start, period_end)``."""

    period_start: DateTime(required=True)
    period_end: DateTime(required=True)


def fetch_events(period_start, period_end) -> list[dict]:
    """Events in the period; an unreachable source means no events."""
    try:
        return get_event_source().list_events_between(period_start, period_end)
    except Exception as exc:
        logger.warning(
            "Event source unavailable, sending empty digest",
            period_start=str(period_start),
            period_end=str(period_end),
            error=str(exc),
        )
        return []


@herald.command_handler(part_of=DigestSendLog)
class RunDigestForPeriodHandler:
    @handle(RunDigestForPeriod)
    def run_digest(self, command: RunDigestForPeriod):
        period_start = as_utc(command.period_start)
        period_end = as_utc(command.period_end)
        if period_start >= period_end:
            raise ValidationError({"period_end": ["Digest period must end after it starts"]})

        notification_repo = current_domain.repository_for(Notification)
        log_repo = current_domain.repository_for(DigestSendLog)

        subscribers = enabled_subscribers(NotificationChannel.EMAIL.value)
        body = compose_digest_body(fetch_events(period_start, period_end), period_start, period_end)

        summary = {"sent": 0, "failed": 0, "skipped": 0}
        for preference in subscribers:
            if log_repo.exists_for_period(preference.user_id, period_start, period_end):
                summary["skipped"] += 1
                continue

            if not preference.has_contact():
                logger.warning("Digest subscriber has no contact", user_id=str(preference.user_id))
                summary["skipped"] += 1
                continue

            notification = Notification.create(
                user_id=preference.user_id,
                subject=DIGEST_SUBJECT,
                body=body,
                channel=preference.channel,
            )
            result = deliver(notification, preference.contact)
            notification.record_delivery(result)
            notification_repo.add(notification)

            succeeded = result.get("status") == "sent"
            summary["sent" if succeeded else "failed"] += 1

            log = DigestSendLog.record(
                preference.user_id,
                period_start,
                period_end,
                succeeded=succeeded,
                error_message=notification.last_error,
            )
            try:
                log_repo.insert(log)
            except DuplicateDigestLog:
                logger.info(
                    "Digest already logged by a concurrent run",
                    user_id=str(preference.user_id),
                    period_start=str(period_start),
                )

        logger.info(
            "Digest run finished",
            period_start=str(period_start),
            period_end=str(period_end),
            **summary,
        )
        return summary
