"""EventBridge event sink."""

import logging
from collections.abc import Sequence
from typing import Optional

from config.config import SinkConfig
from core.auth.credentials import get_default_provider
from core.errors.exceptions import ConfigurationError
from core.logging.context import set_log_context
from core.metadata.resolver import MetadataResolver
from core.types import CredentialProvider
from kube_eventer.events import DomainEvent, EventBatch
from kube_eventer.sinks.eventbridge.client import (
    ClientFactory,
    EventBridgeClientManager,
    create_eventbridge_client,
    eventbridge_endpoint,
)
from kube_eventer.sinks.eventbridge.exporter import BatchExporter, ExportResult
from kube_eventer.sinks.eventbridge.subject import ResourceGuesser, SinkIdentity
from kube_eventer.sinks.eventbridge.transport import EventBridgeTransport
from kube_eventer.sinks.eventbridge.translator import EventTranslator

logger = logging.getLogger(__name__)

EVENTBRIDGE_SINK_NAME = "EventBridgeSink"


class EventBridgeSink:
    """
    Forwards Kubernetes events to an EventBridge bus.

    ``export_events`` is synchronous: it returns only after every chunk of
    the batch has been attempted, so the collector can hand over the next
    batch right away.
    """

    name = EVENTBRIDGE_SINK_NAME

    def __init__(
        self,
        identity: SinkIdentity,
        exporter: BatchExporter,
        client_manager: EventBridgeClientManager,
    ):
        self.identity = identity
        self.exporter = exporter
        self.client_manager = client_manager

    @classmethod
    def from_config(
        cls,
        config: SinkConfig,
        credential_provider: Optional[CredentialProvider] = None,
        resolver: Optional[MetadataResolver] = None,
        client_factory: ClientFactory = create_eventbridge_client,
        guess_resource: Optional[ResourceGuesser] = None,
    ) -> "EventBridgeSink":
        """
        Wire a sink from configuration.

        Region and account id come from the config when set, otherwise from
        instance metadata.

        Raises:
            ConfigurationError: If the cluster id is missing or the region
                or account id cannot be resolved
        """
        config.validate()

        resolver = resolver or MetadataResolver(
            base_url=config.metadata_url, timeout=config.metadata_timeout_seconds
        )
        try:
            region = config.region or resolver.region()
            account_id = config.account_id or resolver.account_id()
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError("failed to resolve region or account id", cause=e) from e

        identity = SinkIdentity(cluster_id=config.cluster_id, region=region, account_id=account_id)
        endpoint = eventbridge_endpoint(identity, config.endpoint_domain)

        client_manager = EventBridgeClientManager(
            credential_provider=credential_provider
            or get_default_provider(config.token_config_path),
            endpoint=endpoint,
            client_factory=client_factory,
        )
        transport = EventBridgeTransport(client_manager)
        translator = EventTranslator(identity, config.bus_name, guess_resource)
        exporter = BatchExporter(
            translator,
            transport.dispatch,
            max_batch_size=config.max_batch_size,
            sink_name=cls.name,
        )

        set_log_context(sink=cls.name, cluster_id=identity.cluster_id)
        logger.info(
            "Created EventBridge sink",
            extra={
                "region": identity.region,
                "account_id": identity.account_id,
                "endpoint": endpoint,
                "bus_name": config.bus_name,
            },
        )
        return cls(identity, exporter, client_manager)

    def export(self, events: Sequence[DomainEvent]) -> ExportResult:
        return self.exporter.export(events)

    def export_events(self, batch: EventBatch) -> ExportResult:
        """Export one collector batch; never raises."""
        return self.exporter.export(batch.events)

    def stop(self) -> None:
        # No background task
        pass


def new_eventbridge_sink(
    uri: str,
    base_config: Optional[SinkConfig] = None,
    **kwargs,
) -> EventBridgeSink:
    """
    Build a sink from a URI like ``eventbridge:?clusterId=c1234``.

    Keyword arguments are passed to ``EventBridgeSink.from_config``.

    Raises:
        ConfigurationError: If clusterId is missing or identity resolution fails
    """
    config = SinkConfig.from_uri(uri, base=base_config)
    return EventBridgeSink.from_config(config, **kwargs)


__all__ = ["EventBridgeSink", "new_eventbridge_sink", "EVENTBRIDGE_SINK_NAME"]
