"""Retry policy for scheduled deliveries — fixed attempts, fixed delay."""

import os
from dataclasses import dataclass
from datetime import timedelta

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = timedelta(minutes=2)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a scheduled notification is tried, and how far apart.

    Immediate and reminder sends make exactly one attempt regardless of the
    policy; only the due-sweep consults it.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_delay: timedelta = DEFAULT_RETRY_DELAY

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.retry_delay <= timedelta(0):
            raise ValueError("retry_delay must be positive")

    @classmethod
    def from_env(cls) -> "RetryPolicy":
        """Read ``HERALD_MAX_ATTEMPTS`` / ``HERALD_RETRY_DELAY_SECONDS``."""
        return cls(
            max_attempts=int(os.environ.get("HERALD_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)),
            retry_delay=timedelta(
                seconds=int(
                    os.environ.get(
                        "HERALD_RETRY_DELAY_SECONDS",
                        int(DEFAULT_RETRY_DELAY.total_seconds()),
                    )
                )
            ),
        )
