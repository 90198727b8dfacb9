"""Context managers for structured logging."""

from typing import Dict, Optional

from core.logging.context import get_log_context, set_log_context


class LogContext:
    """
    Context manager for temporary log context.

    Fields left as None are untouched on entry; on exit every field is
    restored to what it was before the block.

    Usage:
        with LogContext(batch_id=batch_id):
            # All logs in this block carry batch_id
            export_chunks()
    """

    def __init__(
        self,
        sink: Optional[str] = None,
        cluster_id: Optional[str] = None,
        batch_id: Optional[str] = None,
    ):
        self.new_context = {
            "sink": sink,
            "cluster_id": cluster_id,
            "batch_id": batch_id,
        }
        self.old_context: Dict[str, str] = {}

    def __enter__(self) -> "LogContext":
        self.old_context = get_log_context()
        set_log_context(**self.new_context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Restore old context
        set_log_context(
            sink=self.old_context.get("sink", ""),
            cluster_id=self.old_context.get("cluster_id", ""),
            batch_id=self.old_context.get("batch_id", ""),
        )
        return False


__all__ = ["LogContext"]
