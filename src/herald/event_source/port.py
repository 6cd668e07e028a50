"""Event source port — upstream catalogue of events used to compose digests."""

from abc import ABC, abstractmethod
from datetime import datetime


class EventSourcePort(ABC):
    """Abstract interface for the upstream event service."""

    @abstractmethod
    def list_events_between(self, start: datetime, end: datetime) -> list[dict]:
        """List events whose date falls in ``[start, end)``.

        Returns:
            list of dicts with keys: title, datetime, location (optional), price (optional)
        """
        ...
