"""Transport-agnostic cloud event envelope."""

import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

ALIYUN_CONTAINER_SERVICE_SOURCE = "acs.cs"
DEFAULT_EVENT_TYPE = "cs:k8s:K8s-event-via-npd"
DEFAULT_CONTENT_TYPE = "application/json"
CLOUD_EVENTS_SPEC_VERSION = "1.0"

# Extension key EventBridge reads the destination bus from
EVENT_BUS_NAME_EXTENSION = "aliyuneventbusname"

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class CloudEventEnvelope(BaseModel):
    """One CloudEvents record ready for dispatch. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    type: str
    subject: str
    time: str
    datacontenttype: str = DEFAULT_CONTENT_TYPE
    specversion: str = CLOUD_EVENTS_SPEC_VERSION
    data: bytes = b""
    extensions: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("extensions")
    @classmethod
    def freeze_extensions(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Read-only copy, so a built envelope cannot be retargeted."""
        return MappingProxyType(dict(v))

    @field_serializer("extensions")
    def serialize_extensions(self, extensions: Mapping[str, str]) -> dict[str, str]:
        return dict(extensions)

    @property
    def bus_name(self) -> Optional[str]:
        return self.extensions.get(EVENT_BUS_NAME_EXTENSION)


def rfc3339_now() -> str:
    return datetime.now(timezone.utc).strftime(RFC3339_FORMAT)


def new_envelope(subject: str, data: bytes, bus_name: str) -> CloudEventEnvelope:
    """Envelope with a fresh id and the current dispatch time."""
    return CloudEventEnvelope(
        id=str(uuid.uuid4()),
        source=ALIYUN_CONTAINER_SERVICE_SOURCE,
        type=DEFAULT_EVENT_TYPE,
        subject=subject,
        time=rfc3339_now(),
        datacontenttype=DEFAULT_CONTENT_TYPE,
        specversion=CLOUD_EVENTS_SPEC_VERSION,
        data=data,
        extensions={EVENT_BUS_NAME_EXTENSION: bus_name},
    )


__all__ = [
    "CloudEventEnvelope",
    "new_envelope",
    "ALIYUN_CONTAINER_SERVICE_SOURCE",
    "DEFAULT_EVENT_TYPE",
    "DEFAULT_CONTENT_TYPE",
    "EVENT_BUS_NAME_EXTENSION",
]
