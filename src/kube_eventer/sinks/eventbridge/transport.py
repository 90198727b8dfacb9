"""EventBridge PutEvents transport.

Converts envelopes to SDK CloudEvents and sends one chunk per call with the
SDK's automatic retry switched on. Retry and backoff are the SDK's business.
"""

import logging

from alibabacloud_eventbridge import models as event_bridge_models
from alibabacloud_tea_util import models as util_models

from core.errors.exceptions import DispatchError, SinkError, classify_exception, is_auth_error
from kube_eventer.sinks.eventbridge.client import EventBridgeClientManager
from kube_eventer.sinks.eventbridge.envelope import CloudEventEnvelope

logger = logging.getLogger(__name__)


def to_sdk_event(envelope: CloudEventEnvelope) -> event_bridge_models.CloudEvent:
    event = event_bridge_models.CloudEvent()
    event.id = envelope.id
    event.source = envelope.source
    event.type = envelope.type
    event.subject = envelope.subject
    event.time = envelope.time
    event.specversion = envelope.specversion
    event.datacontenttype = envelope.datacontenttype
    event.data = envelope.data
    event.extensions = dict(envelope.extensions)
    return event


class EventBridgeTransport:
    """
    Sends chunks through the managed EventBridge client.

    Args:
        client_manager: Supplies a client bound to a fresh credential
        auto_retry: Enable the SDK's own retry policy
    """

    def __init__(self, client_manager: EventBridgeClientManager, auto_retry: bool = True):
        self.client_manager = client_manager
        self.auto_retry = auto_retry

    def _runtime_options(self) -> util_models.RuntimeOptions:
        runtime = util_models.RuntimeOptions()
        runtime.autoretry = self.auto_retry
        return runtime

    def dispatch(self, envelopes: list[CloudEventEnvelope]) -> None:
        """
        Send one chunk.

        An empty chunk returns without touching the client.

        Raises:
            CredentialError: If no credential could be obtained
            DispatchError: If the SDK call fails or rejects entries
        """
        if not envelopes:
            logger.debug("Skipping empty chunk")
            return

        client = self.client_manager.get_client()
        events = [to_sdk_event(envelope) for envelope in envelopes]

        try:
            response = client.put_events_with_options(events, self._runtime_options())
        except SinkError:
            raise
        except Exception as e:
            category = classify_exception(e)
            if is_auth_error(e):
                self.client_manager.invalidate()
            raise DispatchError(
                f"PutEvents failed for {len(events)} events",
                cause=e,
                context={"event_count": len(events), "endpoint": self.client_manager.endpoint},
                category=category,
            ) from e

        failed = getattr(response, "failed_entry_count", None)
        if isinstance(failed, int) and failed > 0:
            raise DispatchError(
                f"PutEvents rejected {failed} of {len(events)} events",
                context={
                    "failed_entry_count": failed,
                    "event_count": len(events),
                    "request_id": getattr(response, "request_id", None),
                },
            )

        logger.debug(
            "Put events to EventBridge",
            extra={"event_count": len(events), "endpoint": self.client_manager.endpoint},
        )


__all__ = ["EventBridgeTransport", "to_sdk_event"]
