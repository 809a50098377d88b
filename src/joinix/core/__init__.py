"""Joinix core: error taxonomy, structured logging, and settings."""

from joinix.core.errors import (
    AuthError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    JoinixError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    TerminalError,
    TimedOut,
    TransientError,
    ValidationError,
    categorize_error,
    is_retryable,
    user_message,
)
from joinix.core.logging import configure_logging, get_logger
from joinix.core.settings import JoinixSettings, get_settings

__all__ = [
    "AuthError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "JoinixError",
    "NetworkError",
    "NotFoundError",
    "RateLimitError",
    "RequestTimeoutError",
    "TerminalError",
    "TimedOut",
    "TransientError",
    "ValidationError",
    "categorize_error",
    "is_retryable",
    "user_message",
    "configure_logging",
    "get_logger",
    "JoinixSettings",
    "get_settings",
]
