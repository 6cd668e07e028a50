"""FastAPI routes for the herald engine.

Thin adapters that translate HTTP requests into domain commands and
queries. Domain errors are mapped to HTTP status codes here.
"""

import asyncio
import json
from functools import wraps

from fastapi import APIRouter, HTTPException
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from herald.api.schemas import (
    DigestRunResponse,
    EventReminderRequest,
    NotificationIdsResponse,
    NotificationListResponse,
    NotificationResponse,
    PreferenceResponse,
    ProcessDueRequest,
    ProcessDueResponse,
    RunDigestRequest,
    ScheduleNotificationRequest,
    SendNotificationRequest,
    SendReminderRequest,
    StatusResponse,
    UpsertPreferenceRequest,
)
from herald.digest.runner import RunDigestForPeriod
from herald.exceptions import PreferenceDisabled
from herald.notification.clearing import ClearNotifications
from herald.notification.notification import Notification
from herald.notification.queries import get_notification, list_notifications_for_user
from herald.notification.scheduler import ProcessDueNotifications
from herald.notification.scheduling import ScheduleNotification
from herald.notification.sending import SendNotification, SendReminder
from herald.preference.management import SetPreferenceEnabled, UpsertPreference
from herald.preference.preference import NotificationPreference
from herald.preference.queries import get_preference
from herald.reminder.planner import ScheduleEventReminders

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _detail(exc):
    return getattr(exc, "messages", None) or str(exc)


async def _process_off_loop(command):
    """Run a command that delivers email in a worker thread, off the event loop."""
    return await asyncio.to_thread(current_domain.process, command, asynchronous=False)


def _maps_domain_errors(endpoint):
    """Translate herald's domain errors into HTTP errors."""

    @wraps(endpoint)
    async def wrapper(*args, **kwargs):
        try:
            return await endpoint(*args, **kwargs)
        except PreferenceDisabled as exc:
            raise HTTPException(status_code=409, detail=_detail(exc)) from exc
        except ObjectNotFoundError as exc:
            raise HTTPException(status_code=404, detail=_detail(exc)) from exc
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=_detail(exc)) from exc

    return wrapper


def _preference_response(pref: NotificationPreference) -> PreferenceResponse:
    return PreferenceResponse(
        preference_id=str(pref.id),
        user_id=str(pref.user_id),
        channel=pref.channel,
        contact=pref.contact,
        enabled=pref.enabled,
        updated_at=pref.updated_at,
    )


def _notification_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        notification_id=str(n.id),
        user_id=str(n.user_id),
        channel=n.channel,
        subject=n.subject,
        body=n.body,
        status=n.status,
        scheduled_at=n.scheduled_at,
        attempts=n.attempts,
        max_attempts=n.max_attempts,
        last_error=n.last_error,
        sent_at=n.sent_at,
        deleted=n.deleted,
        created_at=n.created_at,
        updated_at=n.updated_at,
    )


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
@router.post("/preferences", status_code=201, response_model=PreferenceResponse)
@_maps_domain_errors
async def upsert_preference(body: UpsertPreferenceRequest) -> PreferenceResponse:
    """Create or replace a user's notification preference."""
    command = UpsertPreference(
        user_id=body.user_id,
        channel=body.channel,
        contact=body.contact,
        enabled=body.enabled,
    )
    current_domain.process(command, asynchronous=False)
    return _preference_response(get_preference(body.user_id))


@router.get("/preferences", response_model=PreferenceResponse)
@_maps_domain_errors
async def read_preference(user_id: str) -> PreferenceResponse:
    """Get a user's notification preference."""
    return _preference_response(get_preference(user_id))


@router.put("/preferences", response_model=PreferenceResponse)
@_maps_domain_errors
async def set_preference_enabled(user_id: str, enabled: bool) -> PreferenceResponse:
    """Switch a user's notifications on or off."""
    current_domain.process(SetPreferenceEnabled(user_id=user_id, enabled=enabled), asynchronous=False)
    return _preference_response(get_preference(user_id))


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=NotificationResponse)
@_maps_domain_errors
async def send_notification(body: SendNotificationRequest) -> NotificationResponse:
    """Send a notification immediately."""
    command = SendNotification(user_id=body.user_id, subject=body.subject, body=body.body)
    notification_id = await _process_off_loop(command)
    return _notification_response(get_notification(notification_id))


@router.get("", response_model=NotificationListResponse)
@_maps_domain_errors
async def list_notifications(user_id: str) -> NotificationListResponse:
    """A user's notification history, newest first."""
    entries = [_notification_response(n) for n in list_notifications_for_user(user_id)]
    return NotificationListResponse(entries=entries, total=len(entries))


@router.delete("", response_model=StatusResponse)
@_maps_domain_errors
async def clear_notifications(user_id: str) -> StatusResponse:
    """Hide every notification in a user's history."""
    current_domain.process(ClearNotifications(user_id=user_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Reminders
# ---------------------------------------------------------------------------
@router.post("/reminders/schedule", status_code=201, response_model=NotificationResponse)
@_maps_domain_errors
async def schedule_notification(body: ScheduleNotificationRequest) -> NotificationResponse:
    """Schedule a notification for later delivery."""
    command = ScheduleNotification(
        user_id=body.user_id,
        subject=body.subject,
        body=body.body,
        scheduled_at=body.scheduled_at,
    )
    notification_id = current_domain.process(command, asynchronous=False)
    return _notification_response(get_notification(notification_id))


@router.post("/reminders/event", status_code=201, response_model=NotificationIdsResponse)
@_maps_domain_errors
async def schedule_event_reminders(body: EventReminderRequest) -> NotificationIdsResponse:
    """Schedule reminders ahead of an event."""
    command = ScheduleEventReminders(
        user_id=body.user_id,
        subject=body.subject,
        body=body.body,
        event_start=body.event_start,
        offsets_minutes=json.dumps(body.offsets_minutes) if body.offsets_minutes else None,
    )
    notification_ids = current_domain.process(command, asynchronous=False)
    return NotificationIdsResponse(notification_ids=notification_ids, total=len(notification_ids))


@router.post("/reminders/send", status_code=201, response_model=NotificationResponse)
@_maps_domain_errors
async def send_reminder(body: SendReminderRequest) -> NotificationResponse:
    """Send a reminder right away."""
    command = SendReminder(
        user_id=body.user_id,
        subject=body.subject,
        body=body.body,
        scheduled_at=body.scheduled_at,
    )
    notification_id = await _process_off_loop(command)
    return _notification_response(get_notification(notification_id))


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------
@router.post("/maintenance/process-due", response_model=ProcessDueResponse)
@_maps_domain_errors
async def process_due(body: ProcessDueRequest | None = None) -> ProcessDueResponse:
    """Run the due-sweep now."""
    as_of = body.as_of if body else None
    processed = await _process_off_loop(ProcessDueNotifications(as_of=as_of))
    return ProcessDueResponse(processed=processed)


@router.post("/maintenance/run-digest", response_model=DigestRunResponse)
@_maps_domain_errors
async def run_digest(body: RunDigestRequest) -> DigestRunResponse:
    """Send the digest for a period."""
    command = RunDigestForPeriod(period_start=body.period_start, period_end=body.period_end)
    summary = await _process_off_loop(command)
    return DigestRunResponse(**summary)


# ---------------------------------------------------------------------------
# Single notification (last, so the literal paths above win)
# ---------------------------------------------------------------------------
@router.get("/{notification_id}", response_model=NotificationResponse)
@_maps_domain_errors
async def read_notification(notification_id: str) -> NotificationResponse:
    """Get a notification by id, including hidden ones."""
    return _notification_response(get_notification(notification_id))
