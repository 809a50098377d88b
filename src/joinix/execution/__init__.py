"""Joinix Execution — deadlines, retries, and fallbacks for backend requests.

ARCHITECTURE
────────────
::

    RequestGateway (call-site name → RetryPolicy)
      │
      ▼
    RetryingRequestExecutor (attempts, backoff, classification)
      │  one per attempt
      ▼
    run_with_timeout (deadline race, best-effort cancellation)
      │
      ▼
    Operation (caller-supplied, opaque)

    FallbackStrategy runs a primary operation, then a fallback, each
    through the executor.
"""

from joinix.execution.fallback import FallbackStrategy
from joinix.execution.gateway import RequestGateway
from joinix.execution.retry import (
    AttemptRecord,
    RetryingRequestExecutor,
    RetryPolicy,
    retrying,
)
from joinix.execution.timeout import Operation, run_with_timeout, with_timeout

__all__ = [
    "AttemptRecord",
    "FallbackStrategy",
    "Operation",
    "RequestGateway",
    "RetryPolicy",
    "RetryingRequestExecutor",
    "retrying",
    "run_with_timeout",
    "with_timeout",
]
