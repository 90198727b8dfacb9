"""Event sinks."""

from kube_eventer.sinks.base import EventSink
from kube_eventer.sinks.factory import SINK_REGISTRY, build_sink

__all__ = ["EventSink", "SINK_REGISTRY", "build_sink"]
