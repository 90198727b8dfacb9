"""EventBridge sink: translation, chunked export and client lifecycle."""

from kube_eventer.sinks.eventbridge.client import (
    EventBridgeClientManager,
    create_eventbridge_client,
    eventbridge_endpoint,
)
from kube_eventer.sinks.eventbridge.envelope import CloudEventEnvelope, new_envelope
from kube_eventer.sinks.eventbridge.exporter import BatchExporter, ExportResult
from kube_eventer.sinks.eventbridge.sink import (
    EVENTBRIDGE_SINK_NAME,
    EventBridgeSink,
    new_eventbridge_sink,
)
from kube_eventer.sinks.eventbridge.subject import (
    SinkIdentity,
    api_version_segment,
    build_subject,
    guess_kind_to_resource,
    mapped_resource_guesser,
)
from kube_eventer.sinks.eventbridge.translator import EventTranslator
from kube_eventer.sinks.eventbridge.transport import EventBridgeTransport

__all__ = [
    "BatchExporter",
    "CloudEventEnvelope",
    "EVENTBRIDGE_SINK_NAME",
    "EventBridgeClientManager",
    "EventBridgeSink",
    "EventBridgeTransport",
    "EventTranslator",
    "ExportResult",
    "SinkIdentity",
    "api_version_segment",
    "build_subject",
    "create_eventbridge_client",
    "eventbridge_endpoint",
    "guess_kind_to_resource",
    "mapped_resource_guesser",
    "new_envelope",
    "new_eventbridge_sink",
]
