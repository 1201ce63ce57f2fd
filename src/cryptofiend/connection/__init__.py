from .exceptions import (
    DecodeError,
    MalformedErrorResponseError,
    MalformedResponseError,
    NoCredentialsError,
    TransportError,
    VenueAPIError,
    VenueError,
    VenueErrorCode,
)
from .rate_limiter import RateLimiter
from .rest_client import VenueRESTClient, sign_payload

__all__ = [
    "DecodeError",
    "MalformedErrorResponseError",
    "MalformedResponseError",
    "NoCredentialsError",
    "RateLimiter",
    "TransportError",
    "VenueAPIError",
    "VenueError",
    "VenueErrorCode",
    "VenueRESTClient",
    "sign_payload",
]
