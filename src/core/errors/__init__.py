"""
Error classification and exception hierarchy.

Provides:
- ErrorCategory enum for classifying errors
- SinkError hierarchy for typed exceptions
- Classification utilities for error handling
"""

from core.errors.exceptions import (
    ConfigurationError,
    CredentialError,
    DispatchError,
    # Enums
    ErrorCategory,
    SerializationError,
    # Base classes
    SinkError,
    TranslationError,
    # Classification utilities
    classify_error_code,
    classify_exception,
    classify_http_status,
    is_auth_error,
    is_transient_error,
)

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "SinkError",
    "ConfigurationError",
    "TranslationError",
    "SerializationError",
    "CredentialError",
    "DispatchError",
    # Classification utilities
    "is_auth_error",
    "is_transient_error",
    "classify_exception",
    "classify_error_code",
    "classify_http_status",
]
