"""Two-tier request strategy: a primary operation and a simpler fallback.

Some reads have a fast server-side path (an RPC joining conversations with
their last message and the other participant) and a plain table query that
returns less but always works. ``FallbackStrategy`` runs the primary and,
when it fails, the fallback, instead of nesting try blocks at each call site.

Example:
    >>> strategy = FallbackStrategy(
    ...     primary=lambda: client.rpc("get_user_conversations", user_id=uid),
    ...     fallback=lambda: client.table("conversations").select(user_id=uid),
    ...     name="conversations.list",
    ... )
    >>> rows = await strategy.run(executor)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from joinix.core.errors import categorize_error
from joinix.core.logging import get_logger
from joinix.execution.retry import RetryingRequestExecutor
from joinix.execution.timeout import Operation

T = TypeVar("T")

logger = get_logger(__name__)


def _any_exception(error: BaseException) -> bool:
    return True


@dataclass(frozen=True)
class FallbackStrategy(Generic[T]):
    """Primary operation with a fallback, run in sequence.

    Attributes:
        primary: Preferred operation
        fallback: Operation run only after the primary fails
        should_fallback: Decides whether a primary error engages the fallback;
            errors it rejects propagate unchanged
        name: Name used in logs and error messages
    """

    primary: Operation[T]
    fallback: Operation[T]
    should_fallback: Callable[[BaseException], bool] = _any_exception
    name: str = "operation"

    async def run(self, executor: RetryingRequestExecutor | None = None) -> T:
        """Run primary, then fallback on failure.

        With an executor, each tier gets its own retry budget. A fallback
        failure propagates with the primary error as ``__context__``.
        """
        try:
            return await self._invoke(self.primary, executor, f"{self.name}.primary")
        except Exception as primary_error:
            if not self.should_fallback(primary_error):
                raise
            logger.warning(
                "fallback_engaged",
                operation=self.name,
                error_type=type(primary_error).__name__,
                category=categorize_error(primary_error).value,
            )
            return await self._invoke(self.fallback, executor, f"{self.name}.fallback")

    @staticmethod
    async def _invoke(
        operation: Operation[T],
        executor: RetryingRequestExecutor | None,
        name: str,
    ) -> T:
        if executor is None:
            return await operation()
        return await executor.execute(operation, name)


__all__ = ["FallbackStrategy"]
