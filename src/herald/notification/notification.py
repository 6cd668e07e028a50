"""Notification aggregate — one logical message and its delivery lifecycle.

A notification is created by the immediate-send, schedule, reminder and
digest paths and is only ever mutated by delivery attempts. Deletion is
logical, so history stays queryable by id.

State Machine (3 states):
    PENDING → SUCCEEDED                       (delivery accepted)
    PENDING → FAILED                          (immediate failure, or retries exhausted)
    PENDING → PENDING                         (scheduled failure, pushed back by the retry delay)
    SUCCEEDED, FAILED                         (terminal)

``scheduled_at`` is null for immediate sends; only notifications with a
``scheduled_at`` are ever picked up by the due-sweep.
"""

from datetime import datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from herald.domain import herald
from herald.notification.events import (
    NotificationCreated,
    NotificationDeleted,
    NotificationFailed,
    NotificationRescheduled,
    NotificationSucceeded,
)
from herald.notification.retry_policy import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY
from herald.utils.time import as_utc, utc_now

UNKNOWN_DELIVERY_ERROR = "Unknown delivery error"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationChannel(Enum):
    EMAIL = "Email"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    NotificationStatus.PENDING: {
        NotificationStatus.PENDING,  # Via reschedule
        NotificationStatus.SUCCEEDED,
        NotificationStatus.FAILED,
    },
    NotificationStatus.SUCCEEDED: set(),  # Terminal
    NotificationStatus.FAILED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@herald.aggregate
class Notification:
    """A single message addressed to a user, tracked until it succeeds or is abandoned."""

    # Recipient
    user_id: Identifier(required=True)
    channel: String(choices=NotificationChannel, default=NotificationChannel.EMAIL.value)

    # Content
    subject: String(required=True, max_length=500)
    body: Text(required=True)

    # Status
    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)

    # Scheduling
    scheduled_at: DateTime()  # Null means immediate, never polled

    # Delivery tracking
    attempts: Integer(default=0, min_value=0)
    max_attempts: Integer(default=DEFAULT_MAX_ATTEMPTS, min_value=1)
    last_error: Text()
    sent_at: DateTime()

    # Soft delete
    deleted: Boolean(default=False)

    # Timestamps
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def attempts_never_exceed_limit(self):
        if self.attempts is not None and self.max_attempts is not None and self.attempts > self.max_attempts:
            raise ValidationError({"attempts": [f"Cannot exceed {self.max_attempts} delivery attempts"]})

    @invariant.post
    def succeeded_notifications_carry_no_error(self):
        if self.status == NotificationStatus.SUCCEEDED.value and self.last_error:
            raise ValidationError({"last_error": ["A succeeded notification cannot carry an error"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        subject,
        body,
        channel=NotificationChannel.EMAIL.value,
        scheduled_at=None,
        max_attempts=DEFAULT_MAX_ATTEMPTS,
    ):
        """Create a new notification in PENDING status with no attempts made."""
        now = utc_now()

        notification = cls(
            user_id=user_id,
            channel=channel,
            subject=subject,
            body=body,
            status=NotificationStatus.PENDING.value,
            scheduled_at=scheduled_at,
            attempts=0,
            max_attempts=max_attempts,
            deleted=False,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                channel=channel,
                subject=subject,
                scheduled_at=scheduled_at,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[NotificationStatus(self.status)]

    def is_due(self, as_of: datetime) -> bool:
        """True when the notification is pending, scheduled, and its time has come."""
        if NotificationStatus(self.status) != NotificationStatus.PENDING:
            return False
        if self.scheduled_at is None:
            return False
        return as_utc(self.scheduled_at) <= as_utc(as_of)

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_succeeded(self, sent_at=None):
        """Record a delivery attempt the channel accepted."""
        self._assert_can_transition(NotificationStatus.SUCCEEDED)

        now = sent_at or utc_now()
        with atomic_change(self):
            self.attempts = self.attempts + 1
            self.last_error = None
            self.status = NotificationStatus.SUCCEEDED.value
            self.sent_at = now
            self.updated_at = now

        self.raise_(
            NotificationSucceeded(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                channel=self.channel,
                attempts=self.attempts,
                sent_at=now,
            )
        )

    def mark_failed(self, reason, failed_at=None):
        """Record a failed attempt and abandon delivery."""
        self._assert_can_transition(NotificationStatus.FAILED)

        now = failed_at or utc_now()
        reason = reason or UNKNOWN_DELIVERY_ERROR
        with atomic_change(self):
            self.attempts = self.attempts + 1
            self.status = NotificationStatus.FAILED.value
            self.last_error = reason
            self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                channel=self.channel,
                reason=reason,
                attempts=self.attempts,
                failed_at=now,
            )
        )

    def record_failed_attempt(self, reason, retry_delay: timedelta = DEFAULT_RETRY_DELAY, now=None):
        """Record a failed scheduled attempt.

        Reschedules ``retry_delay`` after ``now`` while attempts remain;
        fails the notification once ``max_attempts`` is reached.
        """
        if self.attempts + 1 >= self.max_attempts:
            self.mark_failed(reason, failed_at=now)
            return

        self._assert_can_transition(NotificationStatus.PENDING)

        now = now or utc_now()
        reason = reason or UNKNOWN_DELIVERY_ERROR
        next_attempt_at = as_utc(now) + retry_delay
        with atomic_change(self):
            self.attempts = self.attempts + 1
            self.last_error = reason
            self.scheduled_at = next_attempt_at
            self.updated_at = now

        self.raise_(
            NotificationRescheduled(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                reason=reason,
                attempts=self.attempts,
                max_attempts=self.max_attempts,
                scheduled_at=next_attempt_at,
            )
        )

    def record_delivery(self, result: dict, now=None):
        """Apply a single-shot delivery result (immediate, reminder and digest paths)."""
        if result.get("status") == "sent":
            self.mark_succeeded(sent_at=now)
        else:
            self.mark_failed(result.get("error"), failed_at=now)

    def record_scheduled_delivery(self, result: dict, retry_delay: timedelta = DEFAULT_RETRY_DELAY, now=None):
        """Apply a due-sweep delivery result, retrying on failure."""
        if result.get("status") == "sent":
            self.mark_succeeded(sent_at=now)
        else:
            self.record_failed_attempt(result.get("error"), retry_delay=retry_delay, now=now)

    # -------------------------------------------------------------------
    # Soft delete
    # -------------------------------------------------------------------
    def soft_delete(self):
        """Hide the notification from the user's history; no-op when already hidden."""
        if self.deleted:
            return

        now = utc_now()
        self.deleted = True
        self.updated_at = now

        self.raise_(
            NotificationDeleted(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                deleted_at=now,
            )
        )
