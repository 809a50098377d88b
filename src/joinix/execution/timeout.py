"""Deadline enforcement for asynchronous operations.

Races a single operation against a wall-clock deadline. Whichever finishes
first decides the outcome: the operation's result, or ``TimedOut``.

Cancellation on timeout is best-effort. The operation's task is sent a
cancellation signal but the runner does not wait for it to unwind, so an
operation may still finish its side effects after ``TimedOut`` has been
raised. Operations passed here should be idempotent or side-effect free on
the timed-out path.

Examples:
    >>> from joinix.execution.timeout import run_with_timeout
    >>>
    >>> events = await run_with_timeout(lambda: client.fetch_events(), 10.0)

    Decorator form:

    >>> @with_timeout(5.0)
    ... async def fetch_profile(user_id):
    ...     return await client.fetch_profile(user_id)

Tags:
    timeout, deadline, resilience, execution, joinix
"""

from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from joinix.core.errors import TimedOut

T = TypeVar("T")
P = ParamSpec("P")

Operation = Callable[[], Awaitable[T]]


def describe_operation(operation: Callable[..., Any]) -> str:
    """Best-effort readable name for an operation callable."""
    func = getattr(operation, "func", operation)  # functools.partial
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", None) or "operation"


def _consume_outcome(task: asyncio.Future[Any]) -> None:
    # Abandoned tasks must not log "exception was never retrieved".
    if not task.cancelled():
        task.exception()


async def run_with_timeout(
    operation: Operation[T],
    timeout_seconds: float,
    operation_name: str | None = None,
) -> T:
    """Run an operation with a deadline.

    Args:
        operation: Zero-argument callable returning an awaitable
        timeout_seconds: Maximum time to wait, must be positive
        operation_name: Name for error messages (defaults to the callable's name)

    Returns:
        The operation's result

    Raises:
        TimedOut: If the deadline passes before the operation completes
        ValueError: If timeout_seconds <= 0
        Exception: Anything the operation itself raises
    """
    if timeout_seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout_seconds}")

    name = operation_name or describe_operation(operation)
    start = time.monotonic()
    task = asyncio.ensure_future(operation())

    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_seconds)
    except asyncio.CancelledError:
        # Caller was cancelled: take the operation down with it.
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.add_done_callback(_consume_outcome)
    task.cancel()
    raise TimedOut(
        timeout=timeout_seconds,
        elapsed=time.monotonic() - start,
        operation=name,
    )


def with_timeout(
    seconds: float, operation: str | None = None
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator to enforce a deadline on a coroutine function.

    Example:
        >>> @with_timeout(10.0)
        ... async def fetch_events():
        ...     return await client.table("events").select()
    """
    if seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {seconds}")

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        op_name = operation or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await run_with_timeout(
                lambda: func(*args, **kwargs), seconds, op_name
            )

        return wrapper

    return decorator


__all__ = [
    "Operation",
    "describe_operation",
    "run_with_timeout",
    "with_timeout",
]
