"""
Prometheus metrics for sink monitoring.

Focused on essential metrics:
- Events translated and dropped
- Chunks sent, failed and skipped (empty)
- Credential refreshes
- Dispatch latency
"""

from prometheus_client import Counter, Histogram

events_total = Counter(
    "kube_eventer_events_total",
    "Events handled by a sink, by outcome",
    labelnames=["sink", "status"],
)

chunks_total = Counter(
    "kube_eventer_chunks_total",
    "Chunks dispatched by a sink, by outcome",
    labelnames=["sink", "status"],
)

credential_refresh_total = Counter(
    "kube_eventer_credential_refresh_total",
    "Credential refresh attempts, by outcome",
    labelnames=["status"],
)

dispatch_duration_seconds = Histogram(
    "kube_eventer_dispatch_duration_seconds",
    "Time spent dispatching one chunk",
    labelnames=["sink"],
)


def record_events(sink: str, translated: int, dropped: int) -> None:
    if translated:
        events_total.labels(sink=sink, status="translated").inc(translated)
    if dropped:
        events_total.labels(sink=sink, status="dropped").inc(dropped)


def record_chunk(sink: str, success: bool, duration: float) -> None:
    chunks_total.labels(sink=sink, status="sent" if success else "failed").inc()
    dispatch_duration_seconds.labels(sink=sink).observe(duration)


def record_chunk_skipped(sink: str) -> None:
    chunks_total.labels(sink=sink, status="skipped").inc()


def record_credential_refresh(success: bool) -> None:
    credential_refresh_total.labels(status="success" if success else "failure").inc()


__all__ = [
    "events_total",
    "chunks_total",
    "credential_refresh_total",
    "dispatch_duration_seconds",
    "record_events",
    "record_chunk",
    "record_chunk_skipped",
    "record_credential_refresh",
]
