"""
Chunked export of event batches.

Events are translated one by one and sent in contiguous chunks of at most
``max_batch_size``. A bad event is dropped from its chunk; a failed chunk is
logged and the next one is attempted. ``export`` itself never raises: losing
some events must not stop the collector.
"""

import logging
import math
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from core.errors.exceptions import classify_exception
from core.logging.context_managers import LogContext
from kube_eventer.events import DomainEvent
from kube_eventer.metrics import record_chunk, record_chunk_skipped, record_events
from kube_eventer.sinks.eventbridge.envelope import CloudEventEnvelope
from kube_eventer.sinks.eventbridge.translator import EventTranslator

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 16

# Sends one chunk; raises on failure
Dispatcher = Callable[[list[CloudEventEnvelope]], None]


@dataclass
class ExportResult:
    """Counters for one export call."""

    events_received: int = 0
    events_translated: int = 0
    events_dropped: int = 0
    chunks_total: int = 0
    chunks_failed: int = 0
    # Chunks left empty by translation failures; nothing was sent
    chunks_skipped: int = 0

    @property
    def chunks_sent(self) -> int:
        return self.chunks_total - self.chunks_failed - self.chunks_skipped


def chunked(events: Sequence[DomainEvent], size: int) -> list[Sequence[DomainEvent]]:
    """Split into contiguous slices of at most ``size``, order preserved."""
    count = math.ceil(len(events) / size)
    return [events[i * size : (i + 1) * size] for i in range(count)]


class BatchExporter:
    """
    Translates and dispatches batches chunk by chunk.

    Args:
        translator: Builds envelopes from events
        dispatch: Sends one chunk of envelopes, raising on failure
        max_batch_size: Upper bound on events per chunk
        sink_name: Label for logs and metrics
    """

    def __init__(
        self,
        translator: EventTranslator,
        dispatch: Dispatcher,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        sink_name: str = "EventBridgeSink",
    ):
        if max_batch_size < 1:
            raise ValueError(f"max_batch_size must be >= 1, got {max_batch_size}")
        self.translator = translator
        self.dispatch = dispatch
        self.max_batch_size = max_batch_size
        self.sink_name = sink_name

    def _translate_chunk(
        self, chunk: Sequence[DomainEvent], result: ExportResult
    ) -> list[CloudEventEnvelope]:
        envelopes = []
        for event in chunk:
            try:
                envelopes.append(self.translator.translate(event))
            except Exception as e:
                result.events_dropped += 1
                logger.error(
                    f"failed to convert event {event.namespace}/{event.name} to cloudevents",
                    extra={
                        "event_kind": event.kind,
                        "event_name": event.name,
                        "event_namespace": event.namespace,
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "error_category": classify_exception(e).value,
                    },
                )
        result.events_translated += len(envelopes)
        return envelopes

    def _dispatch_chunk(
        self,
        envelopes: list[CloudEventEnvelope],
        index: int,
        chunk_count: int,
        result: ExportResult,
    ) -> None:
        start_time = time.perf_counter()
        success = False
        try:
            self.dispatch(envelopes)
            success = True
        except Exception as e:
            result.chunks_failed += 1
            logger.error(
                "failed to put events to eventbridge",
                extra={
                    "chunk_index": index,
                    "chunk_count": chunk_count,
                    "event_count": len(envelopes),
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "error_category": classify_exception(e).value,
                },
                exc_info=True,
            )
        finally:
            if success and not envelopes:
                result.chunks_skipped += 1
                record_chunk_skipped(self.sink_name)
            else:
                record_chunk(self.sink_name, success, time.perf_counter() - start_time)

    def export(self, events: Sequence[DomainEvent]) -> ExportResult:
        """
        Export one batch. Blocks until every chunk has been attempted.

        Never raises; failures are logged and counted in the result.
        """
        result = ExportResult(events_received=len(events))
        if not events:
            return result

        with LogContext(batch_id=uuid.uuid4().hex):
            self._export_chunks(events, result)
        return result

    def _export_chunks(self, events: Sequence[DomainEvent], result: ExportResult) -> None:
        start_time = time.perf_counter()

        chunks = chunked(events, self.max_batch_size)
        result.chunks_total = len(chunks)

        for index, chunk in enumerate(chunks):
            envelopes = self._translate_chunk(chunk, result)
            self._dispatch_chunk(envelopes, index, len(chunks), result)

        record_events(self.sink_name, result.events_translated, result.events_dropped)

        log = logger.warning if result.events_dropped or result.chunks_failed else logger.info
        log(
            "Exported event batch",
            extra={
                "event_count": result.events_received,
                "events_translated": result.events_translated,
                "events_dropped": result.events_dropped,
                "chunk_count": result.chunks_total,
                "chunks_failed": result.chunks_failed,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
            },
        )


__all__ = ["BatchExporter", "ExportResult", "chunked", "DEFAULT_MAX_BATCH_SIZE"]
