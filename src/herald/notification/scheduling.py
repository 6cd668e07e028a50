"""ScheduleNotification command + handler — queue a notification for the due-sweep."""

from protean import handle
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from herald.domain import herald
from herald.notification.delivery import require_deliverable_preference
from herald.notification.notification import Notification
from herald.notification.retry_policy import RetryPolicy


@herald.command(part_of="Notification")
class ScheduleNotification:
    """Deliver a message to a user at ``scheduled_at`` (or on the first sweep after it)."""

    user_id: Identifier(required=True)
    subject: String(required=True, max_length=500)
    body: Text(required=True)
    scheduled_at: DateTime(required=True)


def schedule_notification(user_id, subject, body, scheduled_at) -> Notification:
    """Validate the recipient and persist a PENDING notification. No delivery happens here."""
    preference = require_deliverable_preference(user_id)

    notification = Notification.create(
        user_id=user_id,
        subject=subject,
        body=body,
        channel=preference.channel,
        scheduled_at=scheduled_at,
        max_attempts=RetryPolicy.from_env().max_attempts,
    )
    current_domain.repository_for(Notification).add(notification)
    return notification


@herald.command_handler(part_of=Notification)
class ScheduleNotificationHandler:
    @handle(ScheduleNotification)
    def schedule(self, command: ScheduleNotification):
        notification = schedule_notification(
            command.user_id,
            command.subject,
            command.body,
            command.scheduled_at,
        )
        return str(notification.id)
