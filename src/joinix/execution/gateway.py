"""Request gateway with per-call-site retry policies.

The gateway replaces a process-wide backend client. Call sites hand it
operations that close over whatever client they were given, and it runs
them through a ``RetryingRequestExecutor`` built from the policy registered
for that call site's name. Tests swap in a gateway with a fake ``sleep`` or
different policies without touching module globals.

Example:
    >>> gateway = RequestGateway(
    ...     policies={
    ...         "messages.send": RetryPolicy(max_attempts=5, base_backoff=0.25),
    ...         "auth.sign_in": RetryPolicy(max_attempts=1),
    ...     },
    ... )
    >>> await gateway.call("messages.send", lambda: client.send(conv_id, text))
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from types import MappingProxyType
from typing import TypeVar

from joinix.core.errors import is_retryable as default_is_retryable
from joinix.core.settings import get_settings
from joinix.execution.fallback import FallbackStrategy
from joinix.execution.retry import (
    RetryCallback,
    RetryingRequestExecutor,
    RetryPolicy,
    RetryPredicate,
    Sleeper,
)
from joinix.execution.timeout import Operation

T = TypeVar("T")


class RequestGateway:
    """Runs named operations under their call site's retry policy.

    Args:
        policies: Call-site name to policy
        default_policy: Used for names without an entry (default: from settings)
        is_retryable: Error classifier shared by every call
        sleep: Backoff sleep shared by every call
        on_retry: Retry callback shared by every call
    """

    def __init__(
        self,
        policies: Mapping[str, RetryPolicy] | None = None,
        *,
        default_policy: RetryPolicy | None = None,
        is_retryable: RetryPredicate = default_is_retryable,
        sleep: Sleeper = asyncio.sleep,
        on_retry: RetryCallback | None = None,
    ):
        self._policies = MappingProxyType(dict(policies or {}))
        self.default_policy = default_policy or get_settings().retry_policy()
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._on_retry = on_retry

    @property
    def policies(self) -> Mapping[str, RetryPolicy]:
        return self._policies

    def policy_for(self, name: str) -> RetryPolicy:
        return self._policies.get(name, self.default_policy)

    def executor_for(self, name: str) -> RetryingRequestExecutor:
        return RetryingRequestExecutor(
            self.policy_for(name),
            is_retryable=self._is_retryable,
            sleep=self._sleep,
            on_retry=self._on_retry,
        )

    async def call(self, name: str, operation: Operation[T]) -> T:
        """Run ``operation`` under the policy registered for ``name``."""
        return await self.executor_for(name).execute(operation, name)

    async def call_with_fallback(
        self,
        name: str,
        primary: Operation[T],
        fallback: Operation[T],
    ) -> T:
        """Run ``primary`` and, if it fails, ``fallback``, both with retries."""
        strategy = FallbackStrategy(primary=primary, fallback=fallback, name=name)
        return await strategy.run(self.executor_for(name))


__all__ = ["RequestGateway"]
