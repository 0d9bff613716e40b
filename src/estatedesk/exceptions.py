"""Custom exception hierarchy for EstateDesk.

Each error carries the HTTP status and the machine-readable error code that the
API layer renders into the ``{success: false, message, error}`` envelope.
"""


class EstateDeskError(Exception):
    """Base exception for all EstateDesk errors."""

    status_code = 500
    error_code = "internal"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message


class BadRequestError(EstateDeskError):
    """Raised when required identifiers or fields are missing or invalid."""

    status_code = 400
    error_code = "bad_request"


class NotFoundError(EstateDeskError):
    """Raised when a referenced record or document index does not exist."""

    status_code = 404
    error_code = "not_found"


class ForbiddenError(EstateDeskError):
    """Raised when the authorization gate rejects an action."""

    status_code = 403
    error_code = "forbidden"


class InternalError(EstateDeskError):
    """Raised when the store fails unexpectedly."""
