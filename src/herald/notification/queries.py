"""Read-side helpers for notifications."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from herald.exceptions import NotificationNotFound
from herald.notification.notification import Notification
from herald.utils.time import as_utc


def get_notification(notification_id) -> Notification:
    """Return a notification by id, deleted or not; raises NotificationNotFound."""
    repo = current_domain.repository_for(Notification)
    try:
        return repo.get(str(notification_id))
    except ObjectNotFoundError as exc:
        raise NotificationNotFound({"notification_id": [f"Notification {notification_id} not found"]}) from exc


def list_notifications_for_user(user_id) -> list[Notification]:
    """The user's visible notifications, newest first."""
    repo = current_domain.repository_for(Notification)
    notifications = repo._dao.query.filter(user_id=str(user_id), deleted=False).limit(None).all().items
    return sorted(notifications, key=lambda n: as_utc(n.created_at), reverse=True)
