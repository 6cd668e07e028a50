"""Event source registry — where digest content comes from.

Uses the fake in-memory source by default. ``EVENT_SOURCE_ADAPTER=http``
selects the HTTP client for the upstream event service.
"""

import os

_event_source_instance = None


def get_event_source():
    """Return the configured event source (singleton)."""
    global _event_source_instance
    if _event_source_instance is None:
        adapter = os.environ.get("EVENT_SOURCE_ADAPTER", "fake")
        if adapter == "fake":
            from herald.event_source.fake import FakeEventSource

            _event_source_instance = FakeEventSource()
        elif adapter == "http":
            from herald.event_source.rest import HttpEventSource

            _event_source_instance = HttpEventSource.from_env()
        else:
            raise ValueError(f"Unknown event source adapter: {adapter}")
    return _event_source_instance


def reset_event_source():
    """Reset the event source singleton (useful for testing)."""
    global _event_source_instance
    _event_source_instance = None
