"""Repository for the DigestSendLog aggregate."""

from protean.exceptions import ValidationError

from herald.digest.digest_log import DigestSendLog, period_key
from herald.domain import herald
from herald.exceptions import DuplicateDigestLog


@herald.repository(part_of=DigestSendLog)
class DigestSendLogRepository:
    """Dedup store for digest sends.

    ``exists_for_period`` is a cheap pre-check. ``insert`` is the authority:
    it refuses a second log for the same user and period.
    """

    def exists_for_period(self, user_id, period_start, period_end) -> bool:
        key = period_key(user_id, period_start, period_end)
        return bool(self._dao.query.filter(period_key=key).all().items)

    def insert(self, log: DigestSendLog) -> DigestSendLog:
        if self._dao.query.filter(period_key=log.period_key).all().items:
            raise DuplicateDigestLog({"period_key": [f"Digest already logged for {log.period_key}"]})

        try:
            return self.add(log)
        except ValidationError as exc:
            # Unique constraint on period_key
            raise DuplicateDigestLog(exc.messages) from exc
