# src/cryptofiend/connection/exceptions.py

from enum import IntEnum
from typing import Optional


class VenueErrorCode(IntEnum):
    """
    Frequently encountered subset of the venue's documented error codes.
    """
    UNKNOWN = -1000
    TOO_MANY_REQUESTS = -1003
    INVALID_TIMESTAMP = -1021  # local clock out of sync with the venue
    INVALID_SIGNATURE = -1022
    CANCEL_REJECTED = -2011
    NO_SUCH_ORDER = -2013


class VenueAPIError(Exception):
    """Base exception for all venue API related errors."""
    pass

class NoCredentialsError(VenueAPIError):
    """Raised when an authenticated call is attempted without an API key and secret."""
    pass

class TransportError(VenueAPIError):
    """Raised when the HTTP request itself fails (connection, DNS, TLS, timeout)."""
    pass

class DecodeError(VenueAPIError):
    """Base class for response bodies that could not be parsed."""
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

class MalformedResponseError(DecodeError):
    """Raised when a successful response body cannot be decoded."""
    pass

class MalformedErrorResponseError(DecodeError):
    """Raised when an error response does not carry a readable {code, msg} envelope."""
    pass

class VenueError(VenueAPIError):
    """
    Raised when the venue rejects a request. ``code`` and ``message`` are the
    venue's own values, passed through untouched.
    """
    def __init__(self, code: int, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{code}] {message}")

    @property
    def is_clock_skew(self) -> bool:
        return self.code == VenueErrorCode.INVALID_TIMESTAMP
