"""Tests for joinix.core.errors module."""

import httpx
import pytest

from joinix.core.errors import (
    CONNECTION_MESSAGE,
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
    get_retry_after,
    is_retryable,
    user_message,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://backend.test/rest/v1/events")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.operation is None
        assert ctx.metadata == {}
        assert ctx.to_dict() == {}

    def test_to_dict_skips_unset_fields(self):
        ctx = ErrorContext(operation="events.join", table="events", metadata={"event_id": "e-1"})
        assert ctx.to_dict() == {"operation": "events.join", "table": "events", "event_id": "e-1"}


class TestJoinixError:
    """Test the base error."""

    def test_defaults(self):
        error = JoinixError("boom")
        assert error.message == "boom"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False
        assert error.retry_after is None
        assert error.cause is None

    def test_overrides(self):
        error = JoinixError("boom", category=ErrorCategory.NETWORK, retryable=True, retry_after=3.0)
        assert error.category == ErrorCategory.NETWORK
        assert error.retryable is True
        assert error.retry_after == 3.0

    def test_cause_is_chained(self):
        original = KeyError("host_id")
        error = TerminalError("Malformed event row", cause=original)
        assert error.cause is original
        assert error.__cause__ is original

    def test_with_context_sets_fields_and_metadata(self):
        error = NotFoundError("No such event").with_context(
            table="events", http_status=404, event_id="e-9"
        )
        assert error.context.table == "events"
        assert error.context.http_status == 404
        assert error.context.metadata == {"event_id": "e-9"}

    def test_to_dict(self):
        error = RateLimitError(retry_after=2.0).with_context(operation="messages.send")
        data = error.to_dict()
        assert data["error_type"] == "RateLimitError"
        assert data["category"] == "NETWORK"
        assert data["retryable"] is True
        assert data["retry_after"] == 2.0
        assert data["context"] == {"operation": "messages.send"}

    def test_validation_error_field(self):
        error = ValidationError("Title is required", field="title")
        assert error.field == "title"
        assert error.to_dict()["field"] == "title"

    def test_repr(self):
        assert repr(AuthError("Session expired")) == "AuthError('Session expired', category=AUTH)"


class TestHierarchy:
    """Test transient/terminal split."""

    @pytest.mark.parametrize("cls", [NetworkError, RateLimitError, RequestTimeoutError])
    def test_transient_errors_are_retryable(self, cls):
        error = cls("x")
        assert isinstance(error, TransientError)
        assert error.retryable is True

    @pytest.mark.parametrize(
        "cls, category",
        [
            (AuthError, ErrorCategory.AUTH),
            (ValidationError, ErrorCategory.VALIDATION),
            (NotFoundError, ErrorCategory.NOT_FOUND),
            (ConfigError, ErrorCategory.CONFIG),
        ],
    )
    def test_terminal_errors(self, cls, category):
        error = cls("x")
        assert isinstance(error, TerminalError)
        assert error.retryable is False
        assert error.category == category

    def test_timed_out(self):
        error = TimedOut(10.0, elapsed=10.01, operation="events.list")
        assert isinstance(error, TimeoutError)
        assert error.category == ErrorCategory.TIMEOUT
        assert error.context.operation == "events.list"
        assert str(error) == "Operation 'events.list' timed out after 10.0s (waited 10.01s)"


class TestIsRetryable:
    """Test structural retry classification."""

    def test_library_errors_answer_for_themselves(self):
        assert is_retryable(NetworkError("x")) is True
        assert is_retryable(AuthError("x")) is False
        assert is_retryable(JoinixError("x", retryable=True)) is True

    def test_builtin_timeouts_and_connection_errors(self):
        assert is_retryable(TimeoutError()) is True
        assert is_retryable(ConnectionResetError()) is True

    def test_httpx_transport_errors(self):
        assert is_retryable(httpx.ConnectError("refused")) is True
        assert is_retryable(httpx.ReadTimeout("slow")) is True

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert is_retryable(_status_error(status)) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_terminal_statuses(self, status):
        assert is_retryable(_status_error(status)) is False

    def test_message_text_is_ignored(self):
        """An error that merely mentions the network is not retried."""
        assert is_retryable(ValueError("network timeout fetch failed")) is False


class TestCategorizeError:
    @pytest.mark.parametrize(
        "error, category",
        [
            (TimeoutError(), ErrorCategory.TIMEOUT),
            (httpx.ReadTimeout("slow"), ErrorCategory.TIMEOUT),
            (ConnectionError(), ErrorCategory.NETWORK),
            (httpx.ConnectError("refused"), ErrorCategory.NETWORK),
            (_status_error(401), ErrorCategory.AUTH),
            (_status_error(404), ErrorCategory.NOT_FOUND),
            (_status_error(503), ErrorCategory.NETWORK),
            (_status_error(422), ErrorCategory.VALIDATION),
            (ValueError("bad"), ErrorCategory.VALIDATION),
            (KeyError("x"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_foreign_errors(self, error, category):
        assert categorize_error(error) == category


class TestGetRetryAfter:
    def test_from_library_error(self):
        assert get_retry_after(RateLimitError(retry_after=30.0)) == 30.0

    def test_foreign_error_has_none(self):
        assert get_retry_after(ConnectionError()) is None


class TestUserMessage:
    """Test user-facing messages."""

    def test_connectivity_collapses_to_connection_message(self):
        assert user_message(NetworkError("socket reset by peer")) == CONNECTION_MESSAGE
        assert user_message(TimedOut(10.0)) == CONNECTION_MESSAGE
        assert user_message(ConnectionError()) == CONNECTION_MESSAGE

    def test_wrapped_connectivity_collapses(self):
        wrapped = TerminalError("failed after 3 attempts", cause=ConnectionError())
        assert user_message(wrapped) == CONNECTION_MESSAGE

    def test_terminal_errors_surface_their_message(self):
        assert user_message(ValidationError("Event is full")) == "Event is full"
        wrapped = TerminalError("Operation 'events.get' failed: 'id'", cause=KeyError("id"))
        assert user_message(wrapped) == "Operation 'events.get' failed: 'id'"

    def test_foreign_error_text(self):
        assert user_message(KeyError()) == "KeyError"
        assert user_message(RuntimeError("nope")) == "nope"
