"""Resend email adapter — delivers through the Resend API."""

import os

import resend
import structlog

from herald.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


class ResendEmailAdapter(EmailPort):
    """Send plain-text email through Resend.

    API errors are reported as a failed result instead of raised; the engine
    records them on the notification.
    """

    def __init__(self, api_key: str | None, from_email: str, from_name: str | None = None):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name

    @classmethod
    def from_env(cls) -> "ResendEmailAdapter":
        """Build the adapter from ``RESEND_API_KEY`` and ``NOTIFICATION_FROM_*``."""
        return cls(
            api_key=os.environ.get("RESEND_API_KEY"),
            from_email=os.environ.get("NOTIFICATION_FROM_EMAIL", "notifications@herald.local"),
            from_name=os.environ.get("NOTIFICATION_FROM_NAME") or None,
        )

    @property
    def sender(self) -> str:
        if self.from_name:
            return f"{self.from_name} <{self.from_email}>"
        return self.from_email

    def send(self, to: str, subject: str, body: str) -> dict:
        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(
                {
                    "from": self.sender,
                    "to": to,
                    "subject": subject,
                    "text": body,
                }
            )
        except Exception as exc:
            logger.warning("Resend delivery failed", to=to, error=str(exc))
            return {"message_id": None, "status": "failed", "error": str(exc)}

        return {"message_id": response.get("id"), "status": "sent"}
