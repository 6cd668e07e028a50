"""Delivery helpers shared by every send path.

Resolves the recipient's preference into a deliverable address and pushes a
notification through its channel adapter. Adapters report failure as data;
an adapter that raises is folded into the same failure result so that a
delivery error never escapes a send operation.
"""

import structlog

from herald.channel import get_channel
from herald.exceptions import InvalidContact, PreferenceDisabled
from herald.notification.notification import Notification
from herald.preference.preference import NotificationPreference
from herald.preference.queries import get_preference

logger = structlog.get_logger(__name__)


def require_deliverable_preference(user_id) -> NotificationPreference:
    """Return the user's preference if it can be delivered to.

    Raises:
        PreferenceNotFound: the user has no preference.
        PreferenceDisabled: the user opted out.
        InvalidContact: the contact address is blank.
    """
    preference = get_preference(user_id)

    if not preference.enabled:
        raise PreferenceDisabled({"user_id": [f"Notifications are disabled for user {user_id}"]})

    if not preference.has_contact():
        raise InvalidContact({"contact": [f"User {user_id} has no contact address"]})

    return preference


def deliver(notification: Notification, to: str) -> dict:
    """Send ``notification`` to ``to`` through its channel; never raises."""
    try:
        adapter = get_channel(notification.channel)
        result = adapter.send(
            to=to,
            subject=notification.subject,
            body=notification.body,
        )
    except Exception as exc:
        logger.error(
            "Notification delivery raised",
            notification_id=str(notification.id),
            channel=notification.channel,
            error=str(exc),
        )
        return {"message_id": None, "status": "failed", "error": str(exc) or exc.__class__.__name__}

    if result.get("status") != "sent":
        logger.warning(
            "Notification delivery failed",
            notification_id=str(notification.id),
            channel=notification.channel,
            error=result.get("error"),
        )
    return result
