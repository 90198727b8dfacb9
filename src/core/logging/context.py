"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_sink: ContextVar[str] = ContextVar("sink", default="")
_cluster_id: ContextVar[str] = ContextVar("cluster_id", default="")
_batch_id: ContextVar[str] = ContextVar("batch_id", default="")


def set_log_context(
    sink: Optional[str] = None,
    cluster_id: Optional[str] = None,
    batch_id: Optional[str] = None,
) -> None:
    if sink is not None:
        _sink.set(sink)
    if cluster_id is not None:
        _cluster_id.set(cluster_id)
    if batch_id is not None:
        _batch_id.set(batch_id)


def get_log_context() -> Dict[str, str]:
    return {
        "sink": _sink.get(),
        "cluster_id": _cluster_id.get(),
        "batch_id": _batch_id.get(),
    }


def clear_log_context() -> None:
    _sink.set("")
    _cluster_id.set("")
    _batch_id.set("")
