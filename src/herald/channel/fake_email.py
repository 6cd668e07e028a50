"""Fake email adapter — records sent emails for testing."""

from uuid import uuid4

from herald.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions.

    ``fail_times`` makes the next N sends fail and then recovers, which is
    how retry scenarios are driven.
    """

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.attempts: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.fail_times = 0

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        fail_times: int = 0,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.fail_times = fail_times

    def send(self, to: str, subject: str, body: str) -> dict:
        self.attempts.append({"to": to, "subject": subject, "body": body})

        if not self.should_succeed or self.fail_times > 0:
            if self.fail_times > 0:
                self.fail_times -= 1
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
            }
        )

        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear recorded traffic and restore the succeeding default."""
        self.sent_emails.clear()
        self.attempts.clear()
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.fail_times = 0
