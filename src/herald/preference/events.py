"""Domain events for the NotificationPreference aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from herald.domain import herald


@herald.event(part_of="NotificationPreference")
class PreferenceCreated:
    """A user's notification preference was recorded for the first time."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    channel: String(required=True)
    enabled: Boolean(required=True)
    created_at: DateTime(required=True)


@herald.event(part_of="NotificationPreference")
class PreferenceUpdated:
    """The channel, contact address or enabled flag was replaced by an upsert."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    channel: String(required=True)
    enabled: Boolean(required=True)
    updated_at: DateTime(required=True)


@herald.event(part_of="NotificationPreference")
class PreferenceToggled:
    """Notifications were switched on or off for a user."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    enabled: Boolean(required=True)
    updated_at: DateTime(required=True)
