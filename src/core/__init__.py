"""
Core library: Reusable, sink-agnostic components.

Modules:
    auth        - Alibaba Cloud credentials and the expiry-aware credential cache
    metadata    - Instance metadata lookup (region, owner account)
    logging     - Structured JSON logging with context propagation
    errors      - Error classification and exception hierarchy
    utils       - JSON serialization helpers

Design Principles:
    - No dependencies on a specific event bus SDK
    - All modules are independently testable
"""

from .types import CredentialProvider, ErrorCategory

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "CredentialProvider",
]
