"""Error kinds shared by services, dependencies and the HTTP layer."""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    EMAIL_TAKEN = "email_taken"
    NOT_FOUND = "not_found"
    EMAIL_NOT_FOUND = "email_not_found"
    INVALID_OR_EXPIRED = "invalid_or_expired"
    DELIVERY_FAILED = "delivery_failed"
    RATE_LIMITED = "rate_limited"
    INTERNAL = "internal_error"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.EMAIL_TAKEN: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.EMAIL_NOT_FOUND: 404,
    ErrorKind.INVALID_OR_EXPIRED: 400,
    ErrorKind.DELIVERY_FAILED: 500,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INTERNAL: 500,
}


class AuthError(Exception):
    """Request failure with a known kind. Rendered as JSON by the app's exception handler."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        return {"success": False, "code": self.kind.value, "detail": self.message}


class DeliveryError(Exception):
    """Raised by the notification service when a message could not be sent."""
