"""
Structured error types for Joinix backend requests.

Every request the client issues against the hosted backend (auth, tables,
storage, RPC) ends in one of three outcomes the caller has to tell apart:

- **Timeout:** the deadline passed before the request finished
- **Transient:** connectivity blips that are expected to clear on retry
- **Terminal:** validation, auth, not-found, or retries exhausted

Classification is structural. Errors carry an ``ErrorCategory`` and a
``retryable`` flag, and foreign exceptions (built-ins, ``httpx``) are mapped by
type and HTTP status. Nothing here inspects error message text.

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                        JoinixError                          │
        │        (category, retryable, retry_after, context, cause)   │
        ├────────────────────────────────────────────────────────────┤
        │                                                            │
        │  TransientError (retryable)      TerminalError             │
        │       │                               │                    │
        │  NetworkError                    AuthError                 │
        │  RateLimitError                  ValidationError           │
        │  RequestTimeoutError             NotFoundError             │
        │       │                          ConfigError               │
        │  TimedOut                                                  │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NetworkError("Connection reset")
    >>> error.retryable
    True
    >>> error.with_context(table="events", http_status=503).context.table
    'events'

    Wrapping a foreign exception:

    >>> try:
    ...     raise KeyError("host_id")
    ... except KeyError as e:
    ...     raise TerminalError("Malformed event row", cause=e)
    Traceback (most recent call last):
    ...
    TerminalError: Malformed event row

Tags:
    error-handling, exception-hierarchy, retry-logic, joinix
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(str, Enum):
    """Error categories used for retry decisions and user-facing messages."""

    NETWORK = "NETWORK"           # Connection reset, DNS, 5xx
    TIMEOUT = "TIMEOUT"           # Deadline exceeded
    AUTH = "AUTH"                 # Session expired, bad credentials
    VALIDATION = "VALIDATION"     # Rejected input, business rules
    NOT_FOUND = "NOT_FOUND"       # Missing row, missing conversation
    CONFIG = "CONFIG"             # Missing or invalid settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        operation: Logical name of the request (e.g. ``"events.join"``)
        table: Backend table that was queried
        rpc: Remote procedure that was called
        url: URL that was being accessed
        http_status: HTTP status code if applicable
        attempt: Attempt number the error was raised on
        metadata: Additional key-value pairs
    """

    operation: str | None = None
    table: str | None = None
    rpc: str | None = None
    url: str | None = None
    http_status: int | None = None
    attempt: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation", "table", "rpc", "url", "http_status", "attempt"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class JoinixError(Exception):
    """
    Base exception for all Joinix request errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can be
    overridden per instance. When ``cause`` is given it is kept on the error
    and chained as ``__cause__``.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: float | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> JoinixError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("No such event").with_context(
                table="events", operation="events.fetch"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.retry_after is not None:
            result["retry_after"] = self.retry_after
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (Retryable)
# =============================================================================


class TransientError(JoinixError):
    """
    Temporary error that may succeed on retry.

    Use for connectivity problems and overloaded upstreams. Do not use for
    rejected input or missing rows: the same call will fail the same way.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class NetworkError(TransientError):
    """Connection, DNS, or upstream 5xx failure."""


class RateLimitError(TransientError):
    """Upstream asked the client to slow down (HTTP 429)."""

    def __init__(self, message: str = "Rate limit exceeded", *, retry_after: float | None = None, **kwargs: Any):
        super().__init__(message, retry_after=retry_after, **kwargs)


class RequestTimeoutError(TransientError, builtins.TimeoutError):
    """Request did not complete before its deadline.

    Also a built-in ``TimeoutError`` so generic handlers still catch it.
    """

    default_category = ErrorCategory.TIMEOUT


class TimedOut(RequestTimeoutError):
    """Raised by the timeout runner when an operation exceeds its deadline.

    Attributes:
        timeout: The deadline that was exceeded, in seconds
        elapsed: How long the runner waited before giving up
        operation: Name of the operation
    """

    def __init__(
        self,
        timeout: float,
        elapsed: float | None = None,
        operation: str = "operation",
    ):
        self.timeout = timeout
        self.elapsed = elapsed
        self.operation = operation

        msg = f"Operation '{operation}' timed out after {timeout}s"
        if elapsed is not None:
            msg += f" (waited {elapsed:.2f}s)"

        super().__init__(msg, context=ErrorContext(operation=operation))


# =============================================================================
# TERMINAL ERRORS (Never retried)
# =============================================================================


class TerminalError(JoinixError):
    """
    Error that will not change outcome on retry.

    The executor also raises it around foreign exceptions once retrying stops,
    keeping the original exception on ``cause``.
    """

    default_category = ErrorCategory.UNKNOWN
    default_retryable = False


class AuthError(TerminalError):
    """Authentication or authorization failure."""

    default_category = ErrorCategory.AUTH


class ValidationError(TerminalError):
    """Input rejected by the backend or by a client-side rule."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field is not None:
            result["field"] = self.field
        return result


class NotFoundError(TerminalError):
    """Requested row, conversation, or user does not exist."""

    default_category = ErrorCategory.NOT_FOUND


class ConfigError(TerminalError):
    """Missing or invalid client configuration."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

_RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})

CONNECTION_MESSAGE = "Please check your connection and try again."


def is_retryable(error: BaseException) -> bool:
    """Check if an error is worth retrying.

    ``JoinixError`` instances answer for themselves. Built-in timeouts and
    connection errors are retryable, as are ``httpx`` transport failures and
    408/429/5xx responses. Everything else is terminal.
    """
    if isinstance(error, JoinixError):
        return error.retryable
    if isinstance(error, (builtins.TimeoutError, ConnectionError)):
        return True
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in _RETRYABLE_STATUS
    return False


def get_retry_after(error: BaseException) -> float | None:
    """Get retry delay from error, if specified."""
    if isinstance(error, JoinixError):
        return error.retry_after
    return None


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, JoinixError):
        return error.category
    if isinstance(error, (builtins.TimeoutError, httpx.TimeoutException)):
        return ErrorCategory.TIMEOUT
    if isinstance(error, (ConnectionError, httpx.TransportError)):
        return ErrorCategory.NETWORK
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return ErrorCategory.AUTH
        if status == 404:
            return ErrorCategory.NOT_FOUND
        if status in _RETRYABLE_STATUS:
            return ErrorCategory.NETWORK
        if 400 <= status < 500:
            return ErrorCategory.VALIDATION
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


def user_message(error: BaseException) -> str:
    """Message to show the user for a failed request.

    Timeouts and connectivity failures collapse to a generic connection
    message; terminal errors surface their own message.
    """
    if isinstance(error, TerminalError) and error.cause is not None:
        if categorize_error(error.cause) in (ErrorCategory.NETWORK, ErrorCategory.TIMEOUT):
            return CONNECTION_MESSAGE
        return error.message
    if categorize_error(error) in (ErrorCategory.NETWORK, ErrorCategory.TIMEOUT):
        return CONNECTION_MESSAGE
    if isinstance(error, JoinixError):
        return error.message
    return str(error) or error.__class__.__name__


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "JoinixError",
    # Transient
    "TransientError",
    "NetworkError",
    "RateLimitError",
    "RequestTimeoutError",
    "TimedOut",
    # Terminal
    "TerminalError",
    "AuthError",
    "ValidationError",
    "NotFoundError",
    "ConfigError",
    # Utilities
    "CONNECTION_MESSAGE",
    "is_retryable",
    "get_retry_after",
    "categorize_error",
    "user_message",
]
