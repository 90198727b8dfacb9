"""
Thread-safe credential cache with expiration tracking.

This module holds the single access key credential a sink is currently using
and decides when it has to be refreshed. Credentials carry their own
expiration string (as handed out by the provider); the cache never trusts a
credential it cannot parse.

Freshness Policy:
    A credential is usable while its expiration is still in the future AND
    more than CREDENTIAL_REFRESH_MARGIN_MINS remain. Inside the margin it is
    reported stale so a new client is built before the token can expire
    mid-request.

Thread Safety:
    All cache operations are protected by a lock to ensure thread-safe access.

Example:
    >>> cache = CredentialCache()
    >>> cache.set(provider.fetch())
    >>> credential = cache.get()
    >>> if credential is None:
    ...     # Missing or stale, fetch a new one
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# Credentials are refreshed once fewer than this many minutes remain
CREDENTIAL_REFRESH_MARGIN_MINS = 10

# Layout used by the addon token config ("2006-01-02T15:04:05Z")
EXPIRATION_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def parse_expiration(value: str) -> datetime:
    """
    Parse a credential expiration string into an aware UTC datetime.

    Accepts the token config layout (``2024-01-01T00:00:00Z``) and falls back
    to ISO 8601 with an explicit offset. Naive values are taken as UTC.

    Raises:
        ValueError: If the value is not a string or cannot be parsed
    """
    if not isinstance(value, str):
        raise ValueError(f"expiration must be a string, got {type(value).__name__}")

    try:
        return datetime.strptime(value, EXPIRATION_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Credential:
    """
    Access key credential issued by a provider.

    Attributes:
        access_key_id: Access key id
        access_key_secret: Access key secret (never logged)
        security_token: STS security token, empty for plain key pairs
        expiration: Expiration string as issued; None for non-expiring keys
    """

    access_key_id: str
    access_key_secret: str = field(repr=False)
    security_token: str = field(default="", repr=False)
    expiration: Optional[str] = None

    def expires_at(self) -> Optional[datetime]:
        """Parsed expiration, or None for non-expiring credentials."""
        if self.expiration is None:
            return None
        return parse_expiration(self.expiration)

    def is_valid(
        self,
        margin_mins: int = CREDENTIAL_REFRESH_MARGIN_MINS,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Check if the credential can still be used for a new request.

        Fails closed: an expiration that cannot be parsed makes the credential
        invalid. The parse error is logged, never raised.

        Args:
            margin_mins: Minutes before expiry to consider the credential stale.
            now: Current time override (UTC), mainly for tests.

        Returns:
            True if more than margin_mins of lifetime remain.
        """
        try:
            expires_at = self.expires_at()
        except ValueError as e:
            logger.error(
                "Failed to parse credential expiration, forcing refresh",
                extra={"error": str(e), "access_key_id": self.access_key_id},
            )
            return False

        if expires_at is None:
            return True

        now = now or datetime.now(timezone.utc)

        if expires_at <= now:
            logger.error(
                "Credential has expired",
                extra={"expires_at": expires_at.isoformat(), "access_key_id": self.access_key_id},
            )
            return False

        if expires_at - timedelta(minutes=margin_mins) <= now:
            logger.warning(
                f"Credential expires within {margin_mins} minutes, should refresh it",
                extra={"expires_at": expires_at.isoformat(), "access_key_id": self.access_key_id},
            )
            return False

        return True


class CredentialCache:
    """
    Thread-safe holder for one credential.

    Replacement is wholesale: ``set`` swaps the whole credential, nothing is
    ever updated in place.
    """

    def __init__(self, margin_mins: int = CREDENTIAL_REFRESH_MARGIN_MINS):
        self._credential: Optional[Credential] = None
        self._margin_mins = margin_mins
        self._lock = threading.Lock()

    @property
    def margin_mins(self) -> int:
        return self._margin_mins

    def get(self) -> Optional[Credential]:
        """Return the cached credential if present and fresh, else None."""
        with self._lock:
            credential = self._credential
        if credential is not None and credential.is_valid(self._margin_mins):
            return credential
        return None

    def set(self, credential: Credential) -> None:
        with self._lock:
            self._credential = credential

    def clear(self) -> None:
        with self._lock:
            self._credential = None

    def remaining(self) -> Optional[timedelta]:
        """
        Remaining lifetime of the cached credential for diagnostics.

        Returns None if nothing is cached, the credential never expires, or
        its expiration cannot be parsed.
        """
        with self._lock:
            credential = self._credential
        if credential is None:
            return None
        try:
            expires_at = credential.expires_at()
        except ValueError:
            return None
        if expires_at is None:
            return None
        return expires_at - datetime.now(timezone.utc)


__all__ = [
    "Credential",
    "CredentialCache",
    "CREDENTIAL_REFRESH_MARGIN_MINS",
    "EXPIRATION_FORMAT",
    "parse_expiration",
]
