"""Tests for delivery channel and event source adapters."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
import requests
import resend
from herald.channel import get_channel, reset_channels
from herald.channel.fake_email import FakeEmailAdapter
from herald.channel.resend_email import ResendEmailAdapter
from herald.event_source import get_event_source, reset_event_source
from herald.event_source.fake import FakeEventSource
from herald.event_source.rest import HttpEventSource
from herald.notification.notification import NotificationChannel

START = datetime(2026, 10, 9, tzinfo=UTC)
END = datetime(2026, 10, 16, tzinfo=UTC)


class TestFakeEmailAdapter:
    def setup_method(self):
        self.adapter = FakeEmailAdapter()

    def test_send_records_email(self):
        result = self.adapter.send(to="test@example.com", subject="Hi", body="Hello!")
        assert result["status"] == "sent"
        assert result["message_id"] is not None
        assert len(self.adapter.sent_emails) == 1
        assert self.adapter.sent_emails[0]["to"] == "test@example.com"

    def test_send_failure(self):
        self.adapter.configure(should_succeed=False, failure_reason="Mailbox unavailable")
        result = self.adapter.send(to="a@b.com", subject="Hi", body="Hello")
        assert result["status"] == "failed"
        assert result["error"] == "Mailbox unavailable"
        assert len(self.adapter.sent_emails) == 0
        assert len(self.adapter.attempts) == 1

    def test_fail_times_then_recover(self):
        self.adapter.configure(fail_times=2)
        statuses = [self.adapter.send(to="a@b.com", subject="Hi", body="Hello")["status"] for _ in range(3)]
        assert statuses == ["failed", "failed", "sent"]

    def test_reset(self):
        self.adapter.send(to="a@b.com", subject="Hi", body="Hello")
        self.adapter.configure(should_succeed=False)
        self.adapter.reset()
        assert len(self.adapter.sent_emails) == 0
        assert self.adapter.should_succeed is True


class TestResendEmailAdapter:
    def test_send(self):
        adapter = ResendEmailAdapter(api_key="re_test", from_email="herald@example.com", from_name="Herald")
        with patch("herald.channel.resend_email.resend.Emails.send", return_value={"id": "email_123"}) as send:
            result = adapter.send(to="ana@example.com", subject="Hi", body="Hello")

        assert result == {"message_id": "email_123", "status": "sent"}
        send.assert_called_once_with(
            {
                "from": "Herald <herald@example.com>",
                "to": "ana@example.com",
                "subject": "Hi",
                "text": "Hello",
            }
        )

    def test_sets_api_key(self):
        adapter = ResendEmailAdapter(api_key="re_test", from_email="herald@example.com")
        with patch("herald.channel.resend_email.resend.Emails.send", return_value={"id": "email_1"}):
            adapter.send(to="ana@example.com", subject="Hi", body="Hello")
        assert resend.api_key == "re_test"

    def test_sender_without_name(self):
        adapter = ResendEmailAdapter(api_key=None, from_email="herald@example.com")
        assert adapter.sender == "herald@example.com"

    def test_api_error_is_a_failed_result(self):
        adapter = ResendEmailAdapter(api_key="re_test", from_email="herald@example.com")
        with patch(
            "herald.channel.resend_email.resend.Emails.send",
            side_effect=Exception("API rate limit exceeded"),
        ):
            result = adapter.send(to="ana@example.com", subject="Hi", body="Hello")

        assert result["status"] == "failed"
        assert result["message_id"] is None
        assert "rate limit" in result["error"]

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RESEND_API_KEY", "re_env")
        monkeypatch.setenv("NOTIFICATION_FROM_EMAIL", "digest@example.com")
        monkeypatch.delenv("NOTIFICATION_FROM_NAME", raising=False)
        adapter = ResendEmailAdapter.from_env()
        assert adapter.api_key == "re_env"
        assert adapter.from_email == "digest@example.com"
        assert adapter.from_name is None


class TestChannelRegistry:
    def setup_method(self):
        reset_channels()

    def teardown_method(self):
        reset_channels()

    def test_email_defaults_to_fake(self, monkeypatch):
        monkeypatch.delenv("EMAIL_ADAPTER", raising=False)
        assert isinstance(get_channel(NotificationChannel.EMAIL.value), FakeEmailAdapter)

    def test_singleton(self):
        assert get_channel(NotificationChannel.EMAIL.value) is get_channel(NotificationChannel.EMAIL.value)

    def test_resend_adapter(self, monkeypatch):
        monkeypatch.setenv("EMAIL_ADAPTER", "resend")
        assert isinstance(get_channel(NotificationChannel.EMAIL.value), ResendEmailAdapter)

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("EMAIL_ADAPTER", "carrier-pigeon")
        with pytest.raises(ValueError):
            get_channel(NotificationChannel.EMAIL.value)

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            get_channel("Telegram")


class TestFakeEventSource:
    def test_lists_events(self):
        source = FakeEventSource()
        source.add_event("Jazz night", "2026-10-17T20:00", location="Sofia Live Club", price=25)
        events = source.list_events_between(START, END)
        assert events[0]["title"] == "Jazz night"
        assert source.requests == [(START, END)]

    def test_failure(self):
        source = FakeEventSource()
        source.should_fail = True
        with pytest.raises(ConnectionError):
            source.list_events_between(START, END)


class _FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class TestHttpEventSource:
    def test_maps_events(self):
        session = _FakeSession(
            _FakeResponse(
                payload=[
                    {"title": "Jazz night", "dateTime": "2026-10-17T20:00", "location": "Sofia", "price": 25},
                ]
            )
        )
        source = HttpEventSource(base_url="http://events.local/api/v1/events", session=session)
        events = source.list_events_between(START, END)

        assert events == [{"title": "Jazz night", "datetime": "2026-10-17T20:00", "location": "Sofia", "price": 25}]
        assert session.calls[0]["params"] == {"from": START.isoformat(), "to": END.isoformat()}

    def test_error_status_means_no_events(self):
        source = HttpEventSource(session=_FakeSession(_FakeResponse(status_code=503)))
        assert source.list_events_between(START, END) == []

    def test_transport_error_means_no_events(self):
        source = HttpEventSource(session=_FakeSession(error=requests.ConnectionError("refused")))
        assert source.list_events_between(START, END) == []

    def test_invalid_payload_means_no_events(self):
        source = HttpEventSource(session=_FakeSession(_FakeResponse(payload={"events": []})))
        assert source.list_events_between(START, END) == []

    def test_invalid_json_means_no_events(self):
        source = HttpEventSource(session=_FakeSession(_FakeResponse(payload=ValueError("bad json"))))
        assert source.list_events_between(START, END) == []


class TestEventSourceRegistry:
    def setup_method(self):
        reset_event_source()

    def teardown_method(self):
        reset_event_source()

    def test_defaults_to_fake(self, monkeypatch):
        monkeypatch.delenv("EVENT_SOURCE_ADAPTER", raising=False)
        assert isinstance(get_event_source(), FakeEventSource)

    def test_http(self, monkeypatch):
        monkeypatch.setenv("EVENT_SOURCE_ADAPTER", "http")
        monkeypatch.setenv("EVENT_SOURCE_URL", "http://events.local/api/v1/events")
        source = get_event_source()
        assert isinstance(source, HttpEventSource)
        assert source.base_url == "http://events.local/api/v1/events"
