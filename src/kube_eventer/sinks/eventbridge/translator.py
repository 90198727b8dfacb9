"""Kubernetes event to cloud event translation."""

import json
import logging
from typing import Optional

from core.errors.exceptions import SerializationError, TranslationError
from core.utils.json_serializers import strict_json_serializer
from kube_eventer.events import DomainEvent
from kube_eventer.sinks.eventbridge.envelope import CloudEventEnvelope, new_envelope
from kube_eventer.sinks.eventbridge.subject import (
    ResourceGuesser,
    SinkIdentity,
    build_subject,
    guess_kind_to_resource,
)

logger = logging.getLogger(__name__)


def serialize_event(event: DomainEvent) -> bytes:
    """
    Encode the full event as compact UTF-8 JSON.

    Raises:
        SerializationError: If the payload holds a value with no JSON form,
            a NaN/Infinity float, or a circular reference
    """
    try:
        return json.dumps(
            event.to_dict(),
            default=strict_json_serializer,
            allow_nan=False,
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"failed to serialize event {event.namespace}/{event.name}",
            cause=e,
            context={"event_kind": event.kind, "event_name": event.name},
        ) from e


class EventTranslator:
    """
    Builds one CloudEventEnvelope per DomainEvent.

    Args:
        identity: Cluster, region and account the subject is rooted at
        bus_name: Destination event bus written to the envelope extensions
        guess_resource: Kind to resource guesser, defaults to the
            pluralization heuristic
    """

    def __init__(
        self,
        identity: SinkIdentity,
        bus_name: str,
        guess_resource: Optional[ResourceGuesser] = None,
    ):
        self.identity = identity
        self.bus_name = bus_name
        self.guess_resource = guess_resource or guess_kind_to_resource

    def subject_for(self, event: DomainEvent) -> str:
        try:
            return build_subject(
                self.identity,
                api_version=event.api_version,
                kind=event.kind,
                namespace=event.namespace,
                name=event.name,
                guess_resource=self.guess_resource,
            )
        except Exception as e:
            raise TranslationError(
                f"failed to build subject for event {event.namespace}/{event.name}",
                cause=e,
                context={"event_kind": event.kind, "event_name": event.name},
            ) from e

    def translate(self, event: DomainEvent) -> CloudEventEnvelope:
        """
        Translate one event.

        Raises:
            TranslationError: If the subject cannot be derived
            SerializationError: If the payload cannot be encoded
        """
        subject = self.subject_for(event)
        data = serialize_event(event)
        envelope = new_envelope(subject=subject, data=data, bus_name=self.bus_name)

        logger.debug(
            "Translated event",
            extra={"subject": subject, "event_kind": event.kind, "event_name": event.name},
        )
        return envelope


__all__ = ["EventTranslator", "serialize_event"]
