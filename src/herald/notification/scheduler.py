"""ProcessDueNotifications command + handler — the due-sweep.

Invoked every sweep interval by the timer runner (or on demand) to deliver
scheduled notifications whose ``scheduled_at`` has passed. Each due
notification gets one attempt per sweep; failures are rescheduled by the
retry policy until ``max_attempts`` is reached.

Sweeps in one process never overlap: a second sweep started while one is
running returns immediately. Every candidate is re-read before its attempt
and skipped unless it is still pending and due, so a notification is never
delivered twice for the same slot.
"""

import threading

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime
from protean.utils.globals import current_domain

from herald.domain import herald
from herald.notification.delivery import deliver, require_deliverable_preference
from herald.notification.notification import Notification, NotificationStatus
from herald.notification.retry_policy import RetryPolicy
from herald.utils.time import as_utc, utc_now

logger = structlog.get_logger(__name__)

_sweep_lock = threading.Lock()


@herald.command(part_of="Notification")
class ProcessDueNotifications:
    """Request to deliver every scheduled notification that is due."""

    as_of: DateTime()  # Optional: process as of this time (defaults to now)


def _claim(repo, notification_id, as_of):
    """Re-read a candidate; return it only if it is still pending and due."""
    try:
        notification = repo.get(notification_id)
    except ObjectNotFoundError:
        return None

    if not notification.is_due(as_of):
        return None
    return notification


def _attempt(notification: Notification) -> dict:
    """One delivery attempt, resolving the recipient's current contact."""
    try:
        preference = require_deliverable_preference(notification.user_id)
    except (ObjectNotFoundError, ValidationError) as exc:
        # Counts as a failed attempt
        return {"message_id": None, "status": "failed", "error": _first_message(exc)}

    return deliver(notification, preference.contact)


def _first_message(exc) -> str:
    messages = getattr(exc, "messages", None) or {}
    for errors in messages.values():
        if errors:
            return str(errors[0])
    return str(exc)


@herald.command_handler(part_of=Notification)
class ProcessDueNotificationsHandler:
    @handle(ProcessDueNotifications)
    def process_due(self, command: ProcessDueNotifications):
        if not _sweep_lock.acquire(blocking=False):
            logger.info("Due-sweep already running, skipping")
            return 0

        try:
            return self._sweep(as_utc(command.as_of) or utc_now())
        finally:
            _sweep_lock.release()

    def _sweep(self, as_of):
        repo = current_domain.repository_for(Notification)
        policy = RetryPolicy.from_env()

        # Unbounded: the aggregate's default page size is 100
        pending = repo._dao.query.filter(status=NotificationStatus.PENDING.value).limit(None).all().items
        due = sorted((n for n in pending if n.is_due(as_of)), key=lambda n: as_utc(n.scheduled_at))
        due_ids = [str(n.id) for n in due]

        processed = 0
        for notification_id in due_ids:
            notification = _claim(repo, notification_id, as_of)
            if notification is None:
                continue

            result = _attempt(notification)
            notification.record_scheduled_delivery(result, retry_delay=policy.retry_delay, now=as_of)
            repo.add(notification)
            processed += 1

            logger.debug(
                "Due notification processed",
                notification_id=notification_id,
                status=notification.status,
                attempts=notification.attempts,
            )

        logger.info("Due notifications processed", processed=processed, as_of=str(as_of))
        return processed
