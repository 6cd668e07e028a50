"""Herald bounded context — notification delivery and retry engine.

Delivers immediate, scheduled and reminder notifications to users over a
pluggable channel, retries scheduled deliveries on a fixed policy, and sends
one weekly digest per subscriber per period with a durable dedup log.
"""

from protean.domain import Domain

from herald.utils.logging import configure_logging, get_logger

configure_logging()

herald = Domain(name="herald")

logger = get_logger(__name__)
