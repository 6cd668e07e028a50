"""Application tests for ProcessDueNotifications — the due-sweep."""

from datetime import UTC, datetime, timedelta

import pytest
from herald.notification import scheduler
from herald.notification.notification import Notification, NotificationStatus
from herald.notification.scheduler import ProcessDueNotifications
from herald.preference.management import SetPreferenceEnabled
from herald.utils.time import as_utc
from protean import current_domain


def _sweep(as_of=None):
    return current_domain.process(ProcessDueNotifications(as_of=as_of), asynchronous=False)


def _get(nid):
    return current_domain.repository_for(Notification).get(nid)


@pytest.fixture(autouse=True)
def subscriber(make_preference):
    return make_preference(user_id="user-due", contact="due@example.com")


class TestProcessDueNotifications:
    def test_delivers_due_notifications(self, make_notification, email):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))

        assert _sweep(now) == 1

        n = _get(nid)
        assert n.status == NotificationStatus.SUCCEEDED.value
        assert n.attempts == 1
        assert n.last_error is None
        assert email.sent_emails[0]["to"] == "due@example.com"

    def test_skips_future_notifications(self, make_notification, email):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now + timedelta(days=1))

        assert _sweep(now) == 0
        assert _get(nid).status == NotificationStatus.PENDING.value
        assert email.attempts == []

    def test_skips_immediate_notifications(self, make_notification, email):
        make_notification(user_id="user-due")
        assert _sweep() == 0
        assert email.attempts == []

    def test_skips_terminal_notifications(self, make_notification, email):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        n = _get(nid)
        n.mark_succeeded()
        current_domain.repository_for(Notification).add(n)

        assert _sweep(now) == 0
        assert email.attempts == []

    def test_failure_reschedules(self, make_notification, email):
        now = datetime.now(UTC)
        first_due = now - timedelta(minutes=1)
        nid = make_notification(user_id="user-due", scheduled_at=first_due)
        email.configure(should_succeed=False, failure_reason="Greylisted")

        _sweep(now)

        n = _get(nid)
        assert n.status == NotificationStatus.PENDING.value
        assert n.attempts == 1
        assert n.last_error == "Greylisted"
        assert as_utc(n.scheduled_at) == now + timedelta(minutes=2)
        assert as_utc(n.scheduled_at) > first_due

    def test_rescheduled_notification_waits_for_retry_delay(self, make_notification, email):
        now = datetime.now(UTC)
        make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        email.configure(should_succeed=False)

        _sweep(now)
        assert _sweep(now + timedelta(minutes=1)) == 0
        assert len(email.attempts) == 1

    def test_third_failure_is_terminal(self, make_notification, email):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        email.configure(should_succeed=False, failure_reason="Relay down")

        for sweep_at in (now, now + timedelta(minutes=2), now + timedelta(minutes=4)):
            _sweep(sweep_at)

        n = _get(nid)
        assert n.status == NotificationStatus.FAILED.value
        assert n.attempts == 3
        assert n.last_error == "Relay down"

        assert _sweep(now + timedelta(minutes=10)) == 0
        assert len(email.attempts) == 3

    def test_recovers_after_transient_failure(self, make_notification, email):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        email.configure(fail_times=1)

        _sweep(now)
        _sweep(now + timedelta(minutes=2))

        n = _get(nid)
        assert n.status == NotificationStatus.SUCCEEDED.value
        assert n.attempts == 2
        assert n.last_error is None

    def test_outcomes_are_independent(self, make_notification, make_preference, email):
        make_preference(user_id="user-gone", contact="gone@example.com")
        current_domain.process(SetPreferenceEnabled(user_id="user-gone", enabled=False), asynchronous=False)
        now = datetime.now(UTC)
        ok = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=2))
        blocked = make_notification(user_id="user-gone", scheduled_at=now - timedelta(minutes=1))

        assert _sweep(now) == 2

        assert _get(ok).status == NotificationStatus.SUCCEEDED.value
        blocked_n = _get(blocked)
        assert blocked_n.status == NotificationStatus.PENDING.value
        assert blocked_n.attempts == 1
        assert "disabled" in blocked_n.last_error

    def test_env_retry_delay(self, make_notification, email, monkeypatch):
        monkeypatch.setenv("HERALD_RETRY_DELAY_SECONDS", "30")
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        email.configure(should_succeed=False)

        _sweep(now)

        assert as_utc(_get(nid).scheduled_at) == now + timedelta(seconds=30)

    def test_due_notification_behind_a_full_page_of_future_ones(self, make_notification, email):
        now = datetime.now(UTC)
        for _ in range(100):
            make_notification(user_id="user-due", scheduled_at=now + timedelta(days=1))
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))

        assert _sweep(now) == 1
        assert _get(nid).status == NotificationStatus.SUCCEEDED.value

    def test_sweeps_more_than_one_page_of_due_notifications(self, make_notification, email):
        now = datetime.now(UTC)
        for i in range(130):
            make_notification(user_id="user-due", scheduled_at=now - timedelta(seconds=i + 1))

        assert _sweep(now) == 130
        assert len(email.sent_emails) == 130

    def test_defaults_to_now(self, make_notification, email):
        make_notification(user_id="user-due", scheduled_at=datetime.now(UTC) - timedelta(seconds=5))
        assert _sweep() == 1


class TestSweepSerialization:
    def test_overlapping_sweep_returns_immediately(self, make_notification, email):
        make_notification(user_id="user-due", scheduled_at=datetime.now(UTC) - timedelta(minutes=1))

        assert scheduler._sweep_lock.acquire(blocking=False)
        try:
            assert _sweep() == 0
        finally:
            scheduler._sweep_lock.release()

        assert email.attempts == []
        assert _sweep() == 1

    def test_claim_skips_notifications_no_longer_due(self, make_notification):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        repo = current_domain.repository_for(Notification)

        n = repo.get(nid)
        n.mark_succeeded()
        repo.add(n)

        assert scheduler._claim(repo, nid, now) is None

    def test_claim_returns_due_notification(self, make_notification):
        now = datetime.now(UTC)
        nid = make_notification(user_id="user-due", scheduled_at=now - timedelta(minutes=1))
        repo = current_domain.repository_for(Notification)

        assert str(scheduler._claim(repo, nid, now).id) == nid

    def test_claim_missing_notification(self):
        repo = current_domain.repository_for(Notification)
        assert scheduler._claim(repo, "does-not-exist", datetime.now(UTC)) is None
