from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

API_KEY_ENV = "CRYPTOFIEND_API_KEY"
API_SECRET_ENV = "CRYPTOFIEND_API_SECRET"


class CredentialStatus(Enum):
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    INCOMPLETE = "incomplete"


@dataclass
class CredentialResult:
    api_key: Optional[str]
    api_secret: Optional[str]
    status: CredentialStatus
    source: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self.status is CredentialStatus.LOADED

    def __repr__(self) -> str:
        # Intentionally omit secrets to avoid leaking them via logs.
        return (
            "CredentialResult("
            f"status={self.status!r}, "
            f"source={self.source!r}, "
            f"error={self.error!r})"
        )

    __str__ = __repr__


def load_credentials() -> CredentialResult:
    """
    Reads the venue API key and secret from the environment.

    Both variables must be set together; a lone key or secret is reported as
    INCOMPLETE rather than silently used for public-only access.
    """
    api_key = os.getenv(API_KEY_ENV) or None
    api_secret = os.getenv(API_SECRET_ENV) or None

    if bool(api_key) ^ bool(api_secret):
        message = f"Both {API_KEY_ENV} and {API_SECRET_ENV} must be set together."
        logger.warning(message, extra={"event": "credentials_incomplete", "source": "environment"})
        return CredentialResult(None, None, CredentialStatus.INCOMPLETE, source="environment", error=message)

    if api_key and api_secret:
        logger.info("Loaded API keys from environment variables.", extra={"event": "credentials_loaded"})
        return CredentialResult(api_key, api_secret, CredentialStatus.LOADED, source="environment")

    return CredentialResult(None, None, CredentialStatus.NOT_FOUND, source="none")
