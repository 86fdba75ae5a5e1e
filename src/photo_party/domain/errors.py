"""Domain error taxonomy.

Every error carries a stable ``kind`` and the HTTP status the API layer
renders it with.
"""


class PhotoPartyError(Exception):
    """Base class for expected domain failures."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PhotoPartyError):
    """Missing or malformed input."""

    kind = "validation"
    status_code = 400


class QuotaExceededError(ValidationError):
    """An upload batch would exceed the per-owner photo quota."""

    kind = "quota_exceeded"


class ConflictError(PhotoPartyError):
    """A unique key is already taken."""

    kind = "conflict"
    status_code = 409


class NotFoundError(PhotoPartyError):
    """A referenced entity does not exist."""

    kind = "not_found"
    status_code = 404


class ForbiddenError(PhotoPartyError):
    """The caller is known but not allowed to perform the action."""

    kind = "forbidden"
    status_code = 403


class GoneError(PhotoPartyError):
    """The record exists but its stored bytes are no longer available."""

    kind = "gone"
    status_code = 410


class StorageError(PhotoPartyError):
    """The backing store failed."""

    kind = "storage"
    status_code = 500
