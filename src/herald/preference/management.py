"""Preference management commands + handlers — upsert and enable/disable."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from herald.domain import herald
from herald.notification.notification import NotificationChannel
from herald.preference.preference import NotificationPreference
from herald.preference.queries import find_preference, get_preference


@herald.command(part_of="NotificationPreference")
class UpsertPreference:
    """Create the user's preference, or replace it when one exists."""

    user_id: Identifier(required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.EMAIL.value)
    contact: String(required=True, max_length=320)
    enabled: Boolean(default=True)


@herald.command(part_of="NotificationPreference")
class SetPreferenceEnabled:
    """Switch a user's notifications on or off."""

    user_id: Identifier(required=True)
    enabled: Boolean(required=True)


@herald.command_handler(part_of=NotificationPreference)
class ManagePreferencesHandler:
    @handle(UpsertPreference)
    def upsert_preference(self, command: UpsertPreference):
        repo = current_domain.repository_for(NotificationPreference)
        preference = find_preference(command.user_id)
        if preference is None:
            preference = NotificationPreference.create(
                user_id=command.user_id,
                contact=command.contact,
                enabled=command.enabled,
                channel=command.channel,
            )
        else:
            preference.update(
                contact=command.contact,
                enabled=command.enabled,
                channel=command.channel,
            )
        repo.add(preference)
        return str(preference.id)

    @handle(SetPreferenceEnabled)
    def set_enabled(self, command: SetPreferenceEnabled):
        repo = current_domain.repository_for(NotificationPreference)
        preference = get_preference(command.user_id)
        preference.set_enabled(command.enabled)
        repo.add(preference)
        return str(preference.id)
