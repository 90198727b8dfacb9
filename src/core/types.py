"""
Core types and protocols used across modules.

This module provides base types, enums, and protocol definitions that are
shared across the core library to ensure consistency and type safety.
"""

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from core.auth.credential_cache import Credential


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed on a later attempt
                   (e.g., network timeouts, throttling, 5xx responses)
        AUTH: Credential failures requiring a refresh
              (e.g., provider unavailable, expired security token)
        PERMANENT: Failures that won't succeed on retry
                   (e.g., unserializable event, missing cluster id)
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class CredentialProvider(Protocol):
    """
    Protocol for credential providers.

    Implementations read an access key pair plus security token from some
    external source (addon token file, environment, static value).
    """

    def fetch(self) -> "Credential":
        """
        Fetch a fresh credential.

        Returns:
            Credential with its expiration string

        Raises:
            CredentialError: If the credential cannot be obtained
        """
        ...


__all__ = [
    "ErrorCategory",
    "CredentialProvider",
]
