from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

GENERIC_ERROR_MESSAGE = "An error occurred. Please try again."

# Raw provider messages carry this marker and are not fit to show users.
PROVIDER_MESSAGE_MARKER = "Firebase"


class ErrorKind(str, Enum):
    """Closed set of auth/store failure kinds, keyed by provider error code."""

    INVALID_CREDENTIAL = "auth/invalid-credential"
    WRONG_PASSWORD = "auth/wrong-password"
    USER_NOT_FOUND = "auth/user-not-found"
    EMAIL_ALREADY_IN_USE = "auth/email-already-in-use"
    WEAK_PASSWORD = "auth/weak-password"
    INVALID_EMAIL = "auth/invalid-email"
    USER_DISABLED = "auth/user-disabled"
    TOO_MANY_REQUESTS = "auth/too-many-requests"
    NETWORK_REQUEST_FAILED = "auth/network-request-failed"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "ErrorKind":
        """Return the kind for a provider code; unrecognized codes are UNKNOWN."""
        try:
            return cls(code or "")
        except ValueError:
            return cls.UNKNOWN


_INVALID_CREDENTIALS = "Invalid email or password"

ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.INVALID_CREDENTIAL: _INVALID_CREDENTIALS,
    ErrorKind.WRONG_PASSWORD: _INVALID_CREDENTIALS,
    ErrorKind.USER_NOT_FOUND: _INVALID_CREDENTIALS,
    ErrorKind.EMAIL_ALREADY_IN_USE: "This email is already registered. Please sign in instead.",
    ErrorKind.WEAK_PASSWORD: "Password is too weak. Please use a stronger password.",
    ErrorKind.INVALID_EMAIL: "Invalid email address. Please check and try again.",
    ErrorKind.USER_DISABLED: "This account has been disabled. Please contact support.",
    ErrorKind.TOO_MANY_REQUESTS: "Too many failed attempts. Please try again later.",
    ErrorKind.NETWORK_REQUEST_FAILED: "Network error. Please check your connection and try again.",
}

HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.WRONG_PASSWORD: 401,
    ErrorKind.USER_NOT_FOUND: 401,
    ErrorKind.EMAIL_ALREADY_IN_USE: 409,
    ErrorKind.WEAK_PASSWORD: 400,
    ErrorKind.INVALID_EMAIL: 400,
    ErrorKind.USER_DISABLED: 403,
    ErrorKind.TOO_MANY_REQUESTS: 429,
    ErrorKind.NETWORK_REQUEST_FAILED: 503,
    ErrorKind.UNKNOWN: 500,
}


# PUBLIC_INTERFACE
class ServiceError(Exception):
    """
    Failure raised by the auth provider or the store adapters.

    ``kind`` is the discriminant; ``message`` is the optional raw payload
    (never shown to users directly, see :func:`get_error_message`).
    """

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    @property
    def user_message(self) -> str:
        return describe_error(self.kind, self.message)


# PUBLIC_INTERFACE
def describe_error(kind: ErrorKind, message: Optional[str] = None) -> str:
    """
    Map an error kind and raw message to text suitable for end users.

    Known kinds have fixed wording. For anything else the raw message is
    passed through, unless it is empty or comes from the provider itself, in
    which case the generic message is used.
    """
    known = ERROR_MESSAGES.get(kind)
    if known is not None:
        return known
    raw = message or ""
    if PROVIDER_MESSAGE_MARKER in raw:
        return GENERIC_ERROR_MESSAGE
    return raw or GENERIC_ERROR_MESSAGE


# PUBLIC_INTERFACE
def get_error_message(code: Optional[str], message: Optional[str] = None) -> str:
    """Return the user-facing message for a provider error code and raw message."""
    return describe_error(ErrorKind.from_code(code), message)
