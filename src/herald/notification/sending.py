"""SendNotification / SendReminder commands + handlers — single-shot delivery.

Both validate the recipient's preference, make exactly one delivery attempt
inside the call, and persist the outcome: Succeeded, or Failed with the
error text. Neither path is retried; only the due-sweep retries.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from herald.domain import herald
from herald.notification.delivery import deliver, require_deliverable_preference
from herald.notification.notification import Notification
from herald.notification.retry_policy import RetryPolicy
from herald.utils.time import utc_now


@herald.command(part_of="Notification")
class SendNotification:
    """Deliver a message to a user right now."""

    user_id: Identifier(required=True)
    subject: String(required=True, max_length=500)
    body: Text(required=True)


@herald.command(part_of="Notification")
class SendReminder:
    """Record a reminder the way scheduling does, but deliver it immediately."""

    user_id: Identifier(required=True)
    subject: String(required=True, max_length=500)
    body: Text(required=True)
    scheduled_at: DateTime()  # Defaults to now


def send_once(user_id, subject, body, scheduled_at=None) -> Notification:
    """Validate, create, deliver once and record the outcome; returns the unsaved notification."""
    preference = require_deliverable_preference(user_id)

    notification = Notification.create(
        user_id=user_id,
        subject=subject,
        body=body,
        channel=preference.channel,
        scheduled_at=scheduled_at,
        max_attempts=RetryPolicy.from_env().max_attempts,
    )
    result = deliver(notification, preference.contact)
    notification.record_delivery(result)
    return notification


@herald.command_handler(part_of=Notification)
class SendNotificationHandler:
    @handle(SendNotification)
    def send_notification(self, command: SendNotification):
        notification = send_once(command.user_id, command.subject, command.body)
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)

    @handle(SendReminder)
    def send_reminder(self, command: SendReminder):
        notification = send_once(
            command.user_id,
            command.subject,
            command.body,
            scheduled_at=command.scheduled_at or utc_now(),
        )
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)
