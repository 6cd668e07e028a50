"""ClearNotifications command + handler — hide a user's notification history."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from herald.domain import herald
from herald.notification.notification import Notification


@herald.command(part_of="Notification")
class ClearNotifications:
    """Soft-delete every visible notification of a user."""

    user_id: Identifier(required=True)


@herald.command_handler(part_of=Notification)
class ClearNotificationsHandler:
    @handle(ClearNotifications)
    def clear(self, command: ClearNotifications):
        repo = current_domain.repository_for(Notification)
        visible = repo._dao.query.filter(user_id=str(command.user_id), deleted=False).limit(None).all().items

        for notification in visible:
            notification.soft_delete()
            repo.add(notification)

        return len(visible)
