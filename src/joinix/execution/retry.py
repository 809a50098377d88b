"""Retrying request executor with per-attempt deadlines and exponential backoff.

Every outbound request to the hosted backend gets the same treatment: run it
under a deadline, retry transient failures with exponential backoff, and stop
at once on terminal ones. Call sites pick a ``RetryPolicy``; the executor
holds no state between calls, so one instance can serve many concurrent
requests.

Delay before attempt ``n + 1`` is ``base_backoff * growth_factor ** (n - 1)``
where ``n`` is the 1-indexed attempt that just failed.

Example:
    >>> from joinix.execution.retry import RetryPolicy, RetryingRequestExecutor
    >>>
    >>> executor = RetryingRequestExecutor(
    ...     RetryPolicy(max_attempts=3, base_backoff=0.5, attempt_timeout=10.0)
    ... )
    >>> events = await executor.execute(lambda: client.fetch_events(), "events.fetch")
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import ParamSpec, TypeVar

from joinix.core.errors import (
    ErrorContext,
    JoinixError,
    TerminalError,
    categorize_error,
    get_retry_after,
    is_retryable as default_is_retryable,
)
from joinix.core.logging import LogContext, get_logger
from joinix.execution.timeout import Operation, describe_operation, run_with_timeout

T = TypeVar("T")
P = ParamSpec("P")

logger = get_logger(__name__)

RetryPredicate = Callable[[BaseException], bool]
RetryCallback = Callable[[int, BaseException, float], None]
Sleeper = Callable[[float], Awaitable[object]]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry configuration for one call site.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        base_backoff: Sleep after the first failure, in seconds (>= 0)
        growth_factor: Multiplier applied per further failure (>= 1)
        attempt_timeout: Deadline for each attempt, in seconds (> 0)
        max_retry_after: Longest server-requested delay honoured, in seconds.
            An error carrying ``retry_after`` raises the backoff to
            ``min(retry_after, max_retry_after)`` when that is longer than
            the computed delay. 0 (the default) ignores ``retry_after``.
    """

    max_attempts: int = 3
    base_backoff: float = 0.5
    growth_factor: float = 2.0
    attempt_timeout: float = 10.0
    max_retry_after: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.base_backoff < 0:
            raise ValueError("RetryPolicy.base_backoff must be >= 0")
        if self.growth_factor < 1:
            raise ValueError("RetryPolicy.growth_factor must be >= 1")
        if self.attempt_timeout <= 0:
            raise ValueError("RetryPolicy.attempt_timeout must be > 0")
        if self.max_retry_after < 0:
            raise ValueError("RetryPolicy.max_retry_after must be >= 0")

    def delay_for(self, attempt: int) -> float:
        """Backoff to sleep after ``attempt`` (1-indexed) has failed."""
        if attempt < 1:
            raise ValueError(f"attempt is 1-indexed, got {attempt}")
        return self.base_backoff * (self.growth_factor ** (attempt - 1))

    def delay_after(self, attempt: int, retry_after: float | None = None) -> float:
        """Backoff after ``attempt``, extended by a capped ``retry_after`` hint."""
        delay = self.delay_for(attempt)
        if retry_after is None or self.max_retry_after == 0:
            return delay
        return max(delay, min(retry_after, self.max_retry_after))


@dataclass(frozen=True, slots=True)
class AttemptRecord:
    """One failed attempt and the backoff that followed it."""

    attempt: int
    error: BaseException
    delay: float


class RetryingRequestExecutor:
    """Execute operations with bounded retries and per-attempt deadlines.

    Args:
        policy: Retry policy (default: ``RetryPolicy()``)
        is_retryable: Classifies an error as transient (True) or terminal
        sleep: Awaitable sleep used between attempts (injectable for tests)
        on_retry: Called as ``on_retry(attempt, error, delay)`` before each sleep

    Outcome rules:
        - success on any attempt returns immediately
        - the final error is re-raised unchanged when it is a ``JoinixError``
          (so a run where every attempt timed out ends in ``TimedOut``)
        - any other exception is wrapped in ``TerminalError`` with the
          original on ``cause`` and ``__cause__``
        - ``asyncio.CancelledError`` is never retried
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        is_retryable: RetryPredicate = default_is_retryable,
        sleep: Sleeper = asyncio.sleep,
        on_retry: RetryCallback | None = None,
    ):
        self.policy = policy or RetryPolicy()
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._on_retry = on_retry

    async def execute(self, operation: Operation[T], operation_name: str | None = None) -> T:
        """Run ``operation`` until it succeeds or retrying stops.

        ``operation`` and ``attempt`` are bound to the logging context while
        each attempt runs, so logs emitted by the operation carry them.

        Raises:
            TimedOut: When the final attempt hit its deadline
            JoinixError: The final typed error raised by the operation
            TerminalError: Wrapping any other final exception
        """
        name = operation_name or describe_operation(operation)
        with LogContext(operation=name):
            return await self._attempts(operation, name)

    async def _attempts(self, operation: Operation[T], name: str) -> T:
        policy = self.policy
        history: list[AttemptRecord] = []

        for attempt in range(1, policy.max_attempts + 1):
            with LogContext(attempt=attempt):
                try:
                    result = await run_with_timeout(operation, policy.attempt_timeout, name)
                except Exception as exc:
                    retryable = self._is_retryable(exc)
                    if not retryable or attempt == policy.max_attempts:
                        self._log_stop(attempt, exc, retryable, history)
                        if isinstance(exc, JoinixError):
                            raise
                        raise self._wrap(exc, name, attempt, retryable) from exc

                    delay = policy.delay_after(attempt, get_retry_after(exc))
                    history.append(AttemptRecord(attempt=attempt, error=exc, delay=delay))

                    logger.warning(
                        "retry_attempt_failed",
                        max_attempts=policy.max_attempts,
                        error_type=type(exc).__name__,
                        category=categorize_error(exc).value,
                        delay=delay,
                    )
                    if self._on_retry is not None:
                        self._on_retry(attempt, exc, delay)

                    await self._sleep(delay)
                else:
                    if history:
                        logger.info("retry_succeeded", attempts=attempt)
                    return result

        # max_attempts >= 1 guarantees the loop returns or raises
        raise AssertionError("unreachable")

    def _log_stop(
        self,
        attempt: int,
        exc: BaseException,
        retryable: bool,
        history: list[AttemptRecord],
    ) -> None:
        if retryable:
            logger.error(
                "retry_exhausted",
                attempts=attempt,
                error_type=type(exc).__name__,
                delays=[record.delay for record in history],
            )
        else:
            logger.info(
                "retry_not_attempted",
                error_type=type(exc).__name__,
                category=categorize_error(exc).value,
            )

    @staticmethod
    def _wrap(exc: Exception, name: str, attempt: int, retryable: bool) -> TerminalError:
        if retryable:
            message = f"Operation '{name}' failed after {attempt} attempts: {exc}"
        else:
            message = f"Operation '{name}' failed: {exc}"
        return TerminalError(
            message,
            category=categorize_error(exc),
            context=ErrorContext(operation=name, attempt=attempt),
            cause=exc,
        )


def retrying(
    policy: RetryPolicy | None = None,
    *,
    is_retryable: RetryPredicate = default_is_retryable,
    on_retry: RetryCallback | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator factory adding retry logic to a coroutine function.

    Example:
        >>> @retrying(RetryPolicy(max_attempts=5))
        ... async def send_message(conversation_id, content):
        ...     return await client.insert_message(conversation_id, content)
    """
    executor = RetryingRequestExecutor(policy, is_retryable=is_retryable, on_retry=on_retry)

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await executor.execute(lambda: func(*args, **kwargs), func.__name__)

        return wrapper

    return decorator


__all__ = [
    "AttemptRecord",
    "RetryPolicy",
    "RetryingRequestExecutor",
    "retrying",
]
