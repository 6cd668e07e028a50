"""Domain events for the DigestSendLog aggregate."""

from protean.fields import DateTime, Identifier, String

from herald.domain import herald


@herald.event(part_of="DigestSendLog")
class DigestLogged:
    """A digest attempt for a subscriber and period was recorded."""

    __version__ = 1

    log_id: Identifier(required=True)
    user_id: Identifier(required=True)
    period_start: DateTime(required=True)
    period_end: DateTime(required=True)
    status: String(required=True)
    logged_at: DateTime(required=True)
