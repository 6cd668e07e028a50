"""Read-side helpers for notification preferences."""

from protean.utils.globals import current_domain

from herald.exceptions import PreferenceNotFound
from herald.notification.notification import NotificationChannel
from herald.preference.preference import NotificationPreference


def find_preference(user_id):
    """Return the user's preference, or None when there is none."""
    repo = current_domain.repository_for(NotificationPreference)
    prefs = repo._dao.query.filter(user_id=str(user_id)).all().items
    return prefs[0] if prefs else None


def get_preference(user_id) -> NotificationPreference:
    """Return the user's preference or raise PreferenceNotFound."""
    preference = find_preference(user_id)
    if preference is None:
        raise PreferenceNotFound({"user_id": [f"No notification preference for user {user_id}"]})
    return preference


def enabled_subscribers(channel=NotificationChannel.EMAIL.value) -> list[NotificationPreference]:
    """All preferences that are switched on for ``channel``."""
    repo = current_domain.repository_for(NotificationPreference)
    return repo._dao.query.filter(enabled=True, channel=channel).limit(None).all().items
