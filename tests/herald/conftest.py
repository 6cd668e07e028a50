"""Shared helpers for herald tests."""

import pytest
from herald.channel import get_channel
from herald.event_source import get_event_source
from herald.notification.notification import Notification, NotificationChannel
from herald.preference.preference import NotificationPreference
from protean import current_domain


@pytest.fixture()
def email():
    """The fake email adapter the engine delivers through."""
    return get_channel(NotificationChannel.EMAIL.value)


@pytest.fixture()
def event_source():
    """The fake event source the digest reads from."""
    return get_event_source()


@pytest.fixture()
def make_preference():
    def _make(user_id="user-1", contact="user-1@example.com", enabled=True):
        pref = NotificationPreference.create(user_id=user_id, contact=contact, enabled=enabled)
        current_domain.repository_for(NotificationPreference).add(pref)
        return pref

    return _make


@pytest.fixture()
def make_notification():
    def _make(user_id="user-1", subject="Hello", body="Hi there", **overrides):
        n = Notification.create(user_id=user_id, subject=subject, body=body, **overrides)
        current_domain.repository_for(Notification).add(n)
        return str(n.id)

    return _make
