"""NotificationPreference aggregate — a user's opt-in and contact channel.

One preference per user. It is created or replaced by an upsert and toggled
on and off afterwards; it is never deleted.
"""

from protean.fields import Boolean, DateTime, Identifier, String

from herald.domain import herald
from herald.notification.notification import NotificationChannel
from herald.preference.events import PreferenceCreated, PreferenceToggled, PreferenceUpdated
from herald.utils.time import utc_now


def _normalize_contact(contact):
    return contact.strip() if contact else contact


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@herald.aggregate
class NotificationPreference:
    """Whether a user receives notifications, over which channel, and where."""

    # User link
    user_id: Identifier(required=True, unique=True)

    # Channel
    channel: String(choices=NotificationChannel, default=NotificationChannel.EMAIL.value)
    contact: String(max_length=320)  # Email address for the Email channel

    enabled: Boolean(default=True)

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id, contact, enabled=True, channel=NotificationChannel.EMAIL.value):
        now = utc_now()

        preference = cls(
            user_id=user_id,
            channel=channel,
            contact=_normalize_contact(contact),
            enabled=enabled,
            created_at=now,
            updated_at=now,
        )

        preference.raise_(
            PreferenceCreated(
                preference_id=str(preference.id),
                user_id=str(user_id),
                channel=channel,
                enabled=enabled,
                created_at=now,
            )
        )

        return preference

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update(self, contact, enabled, channel=NotificationChannel.EMAIL.value):
        """Replace channel, contact and enabled flag in one go (upsert on an existing user)."""
        now = utc_now()
        self.channel = channel
        self.contact = _normalize_contact(contact)
        self.enabled = enabled
        self.updated_at = now

        self.raise_(
            PreferenceUpdated(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                channel=self.channel,
                enabled=self.enabled,
                updated_at=now,
            )
        )

    def set_enabled(self, enabled):
        now = utc_now()
        self.enabled = enabled
        self.updated_at = now

        self.raise_(
            PreferenceToggled(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                enabled=enabled,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    def has_contact(self) -> bool:
        return bool(self.contact and self.contact.strip())
