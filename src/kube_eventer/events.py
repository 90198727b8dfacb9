"""
Kubernetes event schemas handed to sinks by the event collector.

Contains Pydantic models for the raw events a sink receives. Sinks only
read them; they are never modified after construction.
"""

from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field


class DomainEvent(BaseModel):
    """A Kubernetes event as handed over by the collector.

    Attributes:
        name: Event object name (metadata.name)
        kind: Object kind, usually "Event"
        namespace: Object namespace (metadata.namespace), empty if cluster scoped
        api_version: Object apiVersion, e.g. "v1" or "events.k8s.io/v1"
        payload: The full object as received (reason, message, involvedObject, ...)

    Example:
        >>> event = DomainEvent.from_kube({
        ...     "apiVersion": "v1",
        ...     "kind": "Event",
        ...     "metadata": {"name": "nginx.17a2", "namespace": "default"},
        ...     "reason": "BackOff",
        ... })
        >>> event.name
        'nginx.17a2'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(default="", description="Object name")
    kind: str = Field(default="", description="Object kind")
    namespace: str = Field(default="", description="Object namespace")
    api_version: str = Field(default="", alias="apiVersion", description="Object apiVersion")
    payload: dict[str, Any] = Field(default_factory=dict, description="Full source object")

    @classmethod
    def from_kube(cls, obj: Mapping[str, Any]) -> "DomainEvent":
        """Build from a raw Kubernetes object mapping.

        Missing identity fields become empty strings; the whole object is
        kept as the payload.
        """
        metadata = obj.get("metadata") or {}
        return cls(
            name=str(metadata.get("name") or ""),
            kind=str(obj.get("kind") or ""),
            namespace=str(metadata.get("namespace") or ""),
            api_version=str(obj.get("apiVersion") or ""),
            payload=dict(obj),
        )

    def to_dict(self) -> dict[str, Any]:
        """Full record for serialization: payload with identity fields applied."""
        body = dict(self.payload)
        metadata = body.get("metadata")
        metadata = dict(metadata) if isinstance(metadata, Mapping) else {}
        metadata["name"] = self.name
        metadata["namespace"] = self.namespace

        body["apiVersion"] = self.api_version
        body["kind"] = self.kind
        body["metadata"] = metadata
        return body


class EventBatch(BaseModel):
    """One batch of events collected in a single scrape."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    events: list[DomainEvent] = Field(default_factory=list)


__all__ = ["DomainEvent", "EventBatch"]
