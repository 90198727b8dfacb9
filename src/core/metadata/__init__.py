"""Instance metadata lookup (region, owner account)."""

from core.metadata.resolver import (
    DEFAULT_METADATA_TIMEOUT_SECONDS,
    DEFAULT_METADATA_URL,
    MetadataResolver,
)

__all__ = [
    "MetadataResolver",
    "DEFAULT_METADATA_URL",
    "DEFAULT_METADATA_TIMEOUT_SECONDS",
]
