"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from herald.domain import herald


@herald.event(part_of="Notification")
class NotificationCreated:
    """A notification was recorded, either for immediate send or scheduled."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    channel: String(required=True)
    subject: String(max_length=500)
    scheduled_at: DateTime()
    created_at: DateTime(required=True)


@herald.event(part_of="Notification")
class NotificationSucceeded:
    """The channel accepted the notification."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    channel: String(required=True)
    attempts: Integer(required=True)
    sent_at: DateTime(required=True)


@herald.event(part_of="Notification")
class NotificationFailed:
    """Delivery was abandoned; no further attempts will be made."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    channel: String(required=True)
    reason: Text(required=True)
    attempts: Integer(required=True)
    failed_at: DateTime(required=True)


@herald.event(part_of="Notification")
class NotificationRescheduled:
    """A scheduled attempt failed and the notification was pushed back."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    reason: Text(required=True)
    attempts: Integer(required=True)
    max_attempts: Integer(required=True)
    scheduled_at: DateTime(required=True)


@herald.event(part_of="Notification")
class NotificationDeleted:
    """The notification was hidden from the user's history."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    deleted_at: DateTime(required=True)
