"""Event reminder planner — turn an event start into reminder notifications.

``plan_reminder_times`` is pure: each offset (minutes before the event)
yields one fire time, and fire times that are not strictly in the future are
dropped. ``ScheduleEventReminders`` schedules one notification per surviving
fire time, in offset order.
"""

import json
from datetime import datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from herald.domain import herald
from herald.notification.notification import Notification
from herald.notification.scheduling import schedule_notification
from herald.utils.time import as_utc, utc_now

logger = structlog.get_logger(__name__)

# One day and two hours before the event
DEFAULT_OFFSETS_MINUTES = [1440, 120]


def plan_reminder_times(event_start: datetime, offsets_minutes=None, now: datetime | None = None) -> list[datetime]:
    """Fire times for ``event_start``, one per offset, future ones only.

    Empty or missing offsets fall back to ``DEFAULT_OFFSETS_MINUTES``.
    Duplicate offsets are kept. Negative offsets are rejected.
    """
    offsets = list(offsets_minutes) if offsets_minutes else list(DEFAULT_OFFSETS_MINUTES)

    for offset in offsets:
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise ValidationError({"offsets_minutes": [f"Offset {offset!r} is not a whole number of minutes"]})
        if offset < 0:
            raise ValidationError({"offsets_minutes": [f"Offset {offset} cannot be negative"]})

    start = as_utc(event_start)
    now = as_utc(now) or utc_now()

    fire_times = []
    for offset in offsets:
        fire_at = start - timedelta(minutes=offset)
        if fire_at > now:
            fire_times.append(fire_at)
    return fire_times


def _parse_offsets(raw) -> list[int] | None:
    if not raw:
        return None
    try:
        offsets = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError({"offsets_minutes": ["Offsets must be a JSON list of minutes"]}) from exc
    if not isinstance(offsets, list):
        raise ValidationError({"offsets_minutes": ["Offsets must be a JSON list of minutes"]})
    return offsets


@herald.command(part_of="Notification")
class ScheduleEventReminders:
    """Schedule reminders for an upcoming event."""

    user_id: Identifier(required=True)
    subject: String(required=True, max_length=500)
    body: Text(required=True)
    event_start: DateTime(required=True)
    offsets_minutes: Text()  # JSON list of minutes before the event


@herald.command_handler(part_of=Notification)
class ScheduleEventRemindersHandler:
    @handle(ScheduleEventReminders)
    def schedule_reminders(self, command: ScheduleEventReminders):
        fire_times = plan_reminder_times(
            command.event_start,
            _parse_offsets(command.offsets_minutes),
        )

        notification_ids = []
        for fire_at in fire_times:
            notification = schedule_notification(
                command.user_id,
                command.subject,
                command.body,
                fire_at,
            )
            notification_ids.append(str(notification.id))

        logger.info(
            "Event reminders scheduled",
            user_id=str(command.user_id),
            event_start=str(command.event_start),
            scheduled=len(notification_ids),
        )
        return notification_ids
