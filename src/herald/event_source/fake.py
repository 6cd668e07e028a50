"""Fake event source — serves events from memory for testing."""

from datetime import datetime

from herald.event_source.port import EventSourcePort


class FakeEventSource(EventSourcePort):
    """Event source backed by an in-memory list."""

    def __init__(self):
        self.events: list[dict] = []
        self.requests: list[tuple[datetime, datetime]] = []
        self.should_fail = False

    def add_event(self, title: str, when: str, location: str | None = None, price: float | None = None):
        self.events.append({"title": title, "datetime": when, "location": location, "price": price})

    def list_events_between(self, start: datetime, end: datetime) -> list[dict]:
        self.requests.append((start, end))
        if self.should_fail:
            raise ConnectionError("Event service unavailable")
        return list(self.events)

    def reset(self):
        self.events.clear()
        self.requests.clear()
        self.should_fail = False
