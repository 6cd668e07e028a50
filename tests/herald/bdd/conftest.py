"""Shared BDD fixtures and step definitions for herald."""

from datetime import UTC, datetime, timedelta

import pytest
from herald.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRescheduled,
    NotificationSucceeded,
)
from herald.notification.notification import Notification
from pytest_bdd import given, parsers, then

_NOTIFICATION_EVENT_CLASSES = {
    "NotificationCreated": NotificationCreated,
    "NotificationSucceeded": NotificationSucceeded,
    "NotificationFailed": NotificationFailed,
    "NotificationRescheduled": NotificationRescheduled,
}


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def clock():
    """The moment scenario steps treat as "now"."""
    return {"now": datetime.now(UTC)}


# ---------------------------------------------------------------------------
# Given steps: notifications
# ---------------------------------------------------------------------------
@given("a pending notification", target_fixture="notification")
def pending_notification():
    n = Notification.create(user_id="user-bdd", subject="Hello", body="Hi there")
    n._events.clear()
    return n


@given("a notification scheduled in the past", target_fixture="notification")
def scheduled_notification(clock):
    n = Notification.create(
        user_id="user-bdd",
        subject="Reminder",
        body="Starts soon",
        scheduled_at=clock["now"] - timedelta(minutes=1),
    )
    n._events.clear()
    return n


# ---------------------------------------------------------------------------
# Then steps: notification status & events
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the notification status is "{status}"'))
def notification_status_is(notification, status):
    assert notification.status == status


@then(parsers.cfparse("the notification has {count:d} attempt(s)"))
def notification_attempts(notification, count):
    assert notification.attempts == count


@then(parsers.cfparse('the last error is "{reason}"'))
def last_error_is(notification, reason):
    assert notification.last_error == reason


@then(parsers.cfparse("a {event_type} event is raised"))
def notification_event_raised(notification, event_type):
    event_cls = _NOTIFICATION_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in notification._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in notification._events]}"
