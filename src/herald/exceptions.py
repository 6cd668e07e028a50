"""Error kinds surfaced by the herald engine.

All of them carry a ``{field: [messages]}`` dict like the rest of Protean's
exceptions, so the API layer can render them uniformly.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class PreferenceNotFound(ObjectNotFoundError):
    """The user has no notification preference on record."""


class PreferenceDisabled(ValidationError):
    """The user's notification preference exists but is switched off."""


class InvalidContact(ValidationError):
    """The user's preference has an empty contact address."""


class NotificationNotFound(ObjectNotFoundError):
    """No notification exists with the requested identity."""


class DuplicateDigestLog(ValidationError):
    """A digest send log already exists for the user and period."""
