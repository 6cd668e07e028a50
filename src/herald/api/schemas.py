"""Pydantic request/response models for the herald API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class UpsertPreferenceRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    channel: str = Field("Email", examples=["Email"])
    contact: str = Field(..., min_length=1, max_length=320, pattern=r"\S", examples=["ana@example.com"])
    enabled: bool = True


class SendNotificationRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=500, pattern=r"\S")
    body: str = Field(..., min_length=1, pattern=r"\S")


class ScheduleNotificationRequest(SendNotificationRequest):
    scheduled_at: datetime


class SendReminderRequest(SendNotificationRequest):
    scheduled_at: datetime | None = None


class EventReminderRequest(SendNotificationRequest):
    event_start: datetime
    offsets_minutes: list[int] | None = Field(
        None,
        examples=[[1440, 120]],
        description="Minutes before the event; defaults to one day and two hours",
    )


class ProcessDueRequest(BaseModel):
    as_of: datetime | None = None


class RunDigestRequest(BaseModel):
    period_start: datetime
    period_end: datetime


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class PreferenceResponse(BaseModel):
    preference_id: str
    user_id: str
    channel: str
    contact: str | None = None
    enabled: bool
    updated_at: datetime | None = None


class NotificationResponse(BaseModel):
    notification_id: str
    user_id: str
    channel: str
    subject: str
    body: str
    status: str
    scheduled_at: datetime | None = None
    attempts: int
    max_attempts: int
    last_error: str | None = None
    sent_at: datetime | None = None
    deleted: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class NotificationListResponse(BaseModel):
    entries: list[NotificationResponse]
    total: int


class NotificationIdsResponse(BaseModel):
    notification_ids: list[str]
    total: int


class ProcessDueResponse(BaseModel):
    processed: int


class DigestRunResponse(BaseModel):
    sent: int
    failed: int
    skipped: int
