"""
EventBridge client lifecycle.

The manager owns one (client, credential) pair. A client is reused while its
credential is fresh; once the credential is stale or missing, a new
credential is fetched and a new client is built and swapped in together with
it. Read, validate and replace run under one lock.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, Optional

from alibabacloud_eventbridge import models as event_bridge_models
from alibabacloud_eventbridge.client import Client as EventBridgeClient

from config.config import DEFAULT_ENDPOINT_DOMAIN
from core.auth.credential_cache import Credential, CredentialCache
from core.errors.exceptions import CredentialError, DispatchError, SinkError
from core.types import CredentialProvider
from kube_eventer.metrics import record_credential_refresh
from kube_eventer.sinks.eventbridge.subject import SinkIdentity

logger = logging.getLogger(__name__)

EVENTBRIDGE_ENDPOINT_TEMPLATE = "{account_id}.eventbridge.{region}-vpc.{domain}"

# Builds a transport client bound to (credential, endpoint)
ClientFactory = Callable[[Credential, str], Any]


def eventbridge_endpoint(identity: SinkIdentity, domain: str = DEFAULT_ENDPOINT_DOMAIN) -> str:
    """VPC endpoint for the account and region."""
    return EVENTBRIDGE_ENDPOINT_TEMPLATE.format(
        account_id=identity.account_id, region=identity.region, domain=domain
    )


def create_eventbridge_client(credential: Credential, endpoint: str) -> EventBridgeClient:
    """Build an SDK client from a credential."""
    config = event_bridge_models.Config()
    config.access_key_id = credential.access_key_id
    config.access_key_secret = credential.access_key_secret
    if credential.security_token:
        config.security_token = credential.security_token
    config.endpoint = endpoint
    return EventBridgeClient(config)


class EventBridgeClientManager:
    """
    Lazily builds and refreshes the EventBridge client.

    Args:
        credential_provider: Source of fresh credentials
        endpoint: EventBridge endpoint host
        client_factory: Builds a client from (credential, endpoint)
        credential_cache: Freshness tracker, one per manager
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        endpoint: str,
        client_factory: ClientFactory = create_eventbridge_client,
        credential_cache: Optional[CredentialCache] = None,
    ):
        self.credential_provider = credential_provider
        self.endpoint = endpoint
        self.client_factory = client_factory
        self._cache = credential_cache or CredentialCache()
        self._client: Any = None
        self._lock = threading.Lock()

    @property
    def credential_cache(self) -> CredentialCache:
        return self._cache

    def get_client(self) -> Any:
        """
        Return a client bound to a fresh credential.

        Raises:
            CredentialError: If the provider cannot supply a credential
            DispatchError: If the client cannot be constructed
        """
        with self._lock:
            if self._client is not None and self._cache.get() is not None:
                return self._client
            return self._refresh()

    def _refresh(self) -> Any:
        try:
            credential = self.credential_provider.fetch()
        except SinkError:
            record_credential_refresh(success=False)
            raise
        except Exception as e:
            record_credential_refresh(success=False)
            raise CredentialError("failed to fetch credential", cause=e) from e

        try:
            client = self.client_factory(credential, self.endpoint)
        except Exception as e:
            record_credential_refresh(success=False)
            raise DispatchError(
                "failed to create EventBridge client",
                cause=e,
                context={"endpoint": self.endpoint},
            ) from e

        self._client = client
        self._cache.set(credential)
        record_credential_refresh(success=True)

        logger.info(
            "Created EventBridge client",
            extra={
                "endpoint": self.endpoint,
                "access_key_id": credential.access_key_id,
                "expires_at": credential.expiration,
            },
        )
        return client

    def invalidate(self) -> None:
        """Drop the cached client so the next call refetches credentials."""
        with self._lock:
            self._client = None
            self._cache.clear()
        logger.info("Invalidated EventBridge client", extra={"endpoint": self.endpoint})


__all__ = [
    "EventBridgeClientManager",
    "ClientFactory",
    "create_eventbridge_client",
    "eventbridge_endpoint",
    "EVENTBRIDGE_ENDPOINT_TEMPLATE",
]
