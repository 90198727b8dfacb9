"""
Unified exception hierarchy for the event sinks.

Provides typed exceptions with a category so callers can decide whether to
drop, refresh credentials, or try the next chunk.
"""

import re

from core.types import ErrorCategory


class SinkError(Exception):
    """
    Base exception for all sink errors.

    Attributes:
        message: Human-readable error description
        category: Error classification
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.AUTH,
            ErrorCategory.UNKNOWN,
        )

    @property
    def should_refresh_auth(self) -> bool:
        return self.category == ErrorCategory.AUTH

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Construction-time Errors
# =============================================================================


class ConfigurationError(SinkError):
    """Missing cluster id, unresolved region/account, bad config file."""

    category = ErrorCategory.PERMANENT


# =============================================================================
# Per-event Errors
# =============================================================================


class TranslationError(SinkError):
    """A single event could not be turned into a cloud event."""

    category = ErrorCategory.PERMANENT


class SerializationError(TranslationError):
    """The event payload could not be encoded as JSON."""

    pass


# =============================================================================
# Per-chunk Errors
# =============================================================================


class CredentialError(SinkError):
    """Credential provider fetch failed."""

    category = ErrorCategory.AUTH


class DispatchError(SinkError):
    """
    Transport rejected or failed a chunk.

    The category defaults to TRANSIENT but can be set from the classified
    cause so auth failures are recognisable upstream.
    """

    category = ErrorCategory.TRANSIENT

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
        category: ErrorCategory | None = None,
    ):
        super().__init__(message, cause, context)
        if category is not None:
            self.category = category



# =============================================================================
# Error Classification Utilities
# =============================================================================

# Alibaba Cloud error code prefixes (TeaException.code)
AUTH_ERROR_CODES = (
    "InvalidAccessKeyId",
    "InvalidSecurityToken",
    "SecurityTokenExpired",
    "SignatureDoesNotMatch",
    "IncompleteSignature",
    "Forbidden",
    "NoPermission",
    "Unauthorized",
)

TRANSIENT_ERROR_CODES = (
    "Throttling",
    "ServiceUnavailable",
    "InternalError",
    "RequestTimeout",
    "ServerBusy",
)

# Text fallbacks for exceptions without a code or status.
# Matched on word boundaries so ids like "7A4031C2" never look like a 403.
AUTH_ERROR_MARKERS = frozenset(
    {
        "401",
        "403",
        "unauthorized",
        "invalidaccesskeyid",
        "invalidsecuritytoken",
        "securitytokenexpired",
        "signaturedoesnotmatch",
        "token expired",
        "forbidden",
    }
)

TRANSIENT_ERROR_MARKERS = frozenset(
    {
        "429",
        "500",
        "502",
        "503",
        "504",
        "timeout",
        "timed out",
        "connection",
        "throttl",
        "service unavailable",
        "internalerror",
    }
)


def _marker_pattern(markers: frozenset) -> re.Pattern:
    parts = []
    for marker in sorted(markers):
        # Status codes must stand alone; words may be prefixes ("throttl")
        suffix = r"\b" if marker.isdigit() else ""
        parts.append(rf"\b{re.escape(marker)}{suffix}")
    return re.compile("|".join(parts))


_AUTH_MARKER_RE = _marker_pattern(AUTH_ERROR_MARKERS)
_TRANSIENT_MARKER_RE = _marker_pattern(TRANSIENT_ERROR_MARKERS)


def classify_http_status(status_code: int) -> ErrorCategory:
    """
    Classify HTTP status code into error category.

    EventBridge answers 403 for an expired or revoked STS token, so 403 is
    AUTH here rather than a plain client error.
    """
    if 200 <= status_code < 300:
        return ErrorCategory.UNKNOWN  # Not an error

    if status_code in (401, 403):
        return ErrorCategory.AUTH

    if status_code in (408, 429):
        return ErrorCategory.TRANSIENT  # Timeout / rate limited

    if 400 <= status_code < 500:
        return ErrorCategory.PERMANENT  # Other 4xx

    if status_code >= 500:
        return ErrorCategory.TRANSIENT  # Server errors, may recover

    return ErrorCategory.UNKNOWN


def classify_error_code(code: object) -> ErrorCategory | None:
    """Classify an Alibaba Cloud error code; None if the code is not known."""
    if not isinstance(code, str) or not code:
        return None
    if code.startswith(AUTH_ERROR_CODES):
        return ErrorCategory.AUTH
    if code.startswith(TRANSIENT_ERROR_CODES):
        return ErrorCategory.TRANSIENT
    return None


def _status_code(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(getattr(exc, "response", None), "status_code", None)
    if status is None:
        data = getattr(exc, "data", None)
        if isinstance(data, dict):
            status = data.get("statusCode")
    if isinstance(status, bool):
        return None
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def _structured_category(exc: Exception) -> ErrorCategory | None:
    """
    Category from the SDK error code or HTTP status, if the exception has one.

    TeaException carries ``code`` and ``data["statusCode"]``; requests errors
    carry ``response.status_code``.
    """
    category = classify_error_code(getattr(exc, "code", None))
    if category is not None:
        return category

    status = _status_code(exc)
    if status is None:
        return None
    category = classify_http_status(status)
    return None if category == ErrorCategory.UNKNOWN else category


def _error_text(exc: Exception) -> str:
    return f"{type(exc).__name__} {exc}".lower()


def is_auth_error(exc: Exception) -> bool:
    """
    Check if exception is authentication-related.

    Returns True if this is an auth error that should trigger a credential
    refresh before the next dispatch. Structured codes win over text.
    """
    if isinstance(exc, SinkError):
        return exc.category == ErrorCategory.AUTH

    category = _structured_category(exc)
    if category is not None:
        return category == ErrorCategory.AUTH

    return _AUTH_MARKER_RE.search(_error_text(exc)) is not None


def is_transient_error(exc: Exception) -> bool:
    """Check if exception is transient (may succeed on a later attempt)."""
    if isinstance(exc, SinkError):
        return exc.category == ErrorCategory.TRANSIENT

    category = _structured_category(exc)
    if category is not None:
        return category == ErrorCategory.TRANSIENT

    return _TRANSIENT_MARKER_RE.search(_error_text(exc)) is not None


def classify_exception(exc: Exception) -> ErrorCategory:
    """Classify an exception into error category."""
    # Already classified
    if isinstance(exc, SinkError):
        return exc.category

    category = _structured_category(exc)
    if category is not None:
        return category

    # Auth first: a 403 on a signed request usually means a stale token
    if is_auth_error(exc):
        return ErrorCategory.AUTH

    if is_transient_error(exc):
        return ErrorCategory.TRANSIENT

    if isinstance(exc, (TypeError, ValueError)):
        return ErrorCategory.PERMANENT

    return ErrorCategory.UNKNOWN
