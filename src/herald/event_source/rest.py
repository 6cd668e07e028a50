"""HTTP event source — queries the event service's listing endpoint."""

import os
from datetime import datetime

import requests
import structlog

from herald.event_source.port import EventSourcePort

logger = structlog.get_logger(__name__)

DEFAULT_EVENT_SOURCE_URL = "http://localhost:8080/api/v1/events"


class HttpEventSource(EventSourcePort):
    """``GET {base_url}?from=<iso>&to=<iso>`` returning a JSON list of events.

    Non-2xx responses and transport errors yield an empty list; a digest
    without upstream data is still sent, saying there is nothing new.
    """

    def __init__(self, base_url: str = DEFAULT_EVENT_SOURCE_URL, timeout: float = 8.0, session=None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> "HttpEventSource":
        return cls(
            base_url=os.environ.get("EVENT_SOURCE_URL", DEFAULT_EVENT_SOURCE_URL),
            timeout=float(os.environ.get("EVENT_SOURCE_TIMEOUT_SECONDS", "8")),
        )

    def list_events_between(self, start: datetime, end: datetime) -> list[dict]:
        params = {"from": start.isoformat(), "to": end.isoformat()}
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Event source unreachable", url=self.base_url, error=str(exc))
            return []

        if not response.ok:
            logger.warning("Event source returned an error", url=self.base_url, status_code=response.status_code)
            return []

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Event source returned invalid JSON", url=self.base_url)
            return []

        if not isinstance(payload, list):
            logger.warning("Event source returned a non-list payload", url=self.base_url)
            return []

        return [
            {
                "title": item.get("title"),
                "datetime": item.get("dateTime") or item.get("datetime"),
                "location": item.get("location"),
                "price": item.get("price"),
            }
            for item in payload
        ]
