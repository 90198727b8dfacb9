"""Sink protocol shared by all event sinks."""

from typing import Any, Protocol

from kube_eventer.events import EventBatch


class EventSink(Protocol):
    """
    Destination for collected event batches.

    ``export_events`` must be synchronous and finish only after the batch
    has been written (or given up on). The collector pushes the next batch
    only to sinks that finished the previous one.
    """

    name: str

    def export_events(self, batch: EventBatch) -> Any:
        ...

    def stop(self) -> None:
        ...


__all__ = ["EventSink"]
