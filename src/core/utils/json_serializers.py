# Copyright (c) 2024-2026 nickdsmith. All Rights Reserved.
# SPDX-License-Identifier: PROPRIETARY
#
# This file is proprietary and confidential. Unauthorized copying of this file,
# via any medium is strictly prohibited.

"""Shared JSON serialization utilities for type-safe JSON encoding."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any


def _serialize_known_type(obj: Any) -> tuple[bool, Any]:
    """Try to serialize by known type. Returns (handled, result)."""
    if isinstance(obj, (datetime, date)):
        return True, obj.isoformat()
    if isinstance(obj, Decimal):
        return True, float(obj)
    if isinstance(obj, Path):
        return True, str(obj)
    if isinstance(obj, Enum):
        return True, obj.value
    return False, None


def json_serializer(obj: Any) -> Any:
    """
    Lenient JSON serializer for log records.

    - datetime/date → ISO 8601 string
    - Decimal → float
    - Path → string
    - Enums → value
    - Everything else → string (fallback)

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    if hasattr(obj, "__dict__"):
        return obj.__dict__
    return str(obj)


def strict_json_serializer(obj: Any) -> Any:
    """
    Strict JSON serializer for event payloads.

    Encodes the same known types as ``json_serializer`` but refuses to
    stringify anything else, so a payload that cannot be represented
    faithfully fails instead of shipping a lossy repr.

    Raises:
        TypeError: If the object has no JSON representation
    """
    handled, result = _serialize_known_type(obj)
    if handled:
        return result
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


__all__ = ["json_serializer", "strict_json_serializer"]
