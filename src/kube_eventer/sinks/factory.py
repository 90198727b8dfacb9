"""Sink construction from ``--sink`` URIs."""

import logging
from collections.abc import Callable
from urllib.parse import urlparse

from core.errors.exceptions import ConfigurationError
from kube_eventer.sinks.base import EventSink
from kube_eventer.sinks.eventbridge.sink import new_eventbridge_sink

logger = logging.getLogger(__name__)

SinkBuilder = Callable[..., EventSink]

SINK_REGISTRY: dict[str, SinkBuilder] = {
    "eventbridge": new_eventbridge_sink,
}


def build_sink(uri: str, **kwargs) -> EventSink:
    """
    Build the sink named by the URI scheme.

    Keyword arguments are passed to the sink builder.

    Raises:
        ConfigurationError: If the scheme is unknown or the sink rejects its config
    """
    scheme = urlparse(uri).scheme
    builder = SINK_REGISTRY.get(scheme)
    if builder is None:
        raise ConfigurationError(
            f"Unknown sink '{scheme}'. Available: {', '.join(sorted(SINK_REGISTRY))}"
        )

    logger.info(f"Building sink: {scheme}")
    return builder(uri, **kwargs)


__all__ = ["build_sink", "SINK_REGISTRY"]
