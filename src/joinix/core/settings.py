"""Client settings for the Joinix request core.

Defaults match what the mobile client hard-codes today: three attempts,
half-second base backoff doubling per attempt, a ten second per-attempt
deadline, and Surrey, BC with a 40 km radius as the default search area.
Every field can be overridden with a ``JOINIX_`` environment variable or a
``.env`` file.

Examples:
    >>> from joinix.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.retry_policy().max_attempts
    3
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from joinix.execution.retry import RetryPolicy


class JoinixSettings(BaseSettings):
    """Settings shared by the request executor, the CLI, and event search.

    Fields
    ──────
    log_level          : Structlog log level
    log_json           : Force JSON (True) or console (False) rendering
    max_attempts       : Attempts per request, including the first
    base_backoff       : Sleep before the second attempt, in seconds
    growth_factor      : Backoff multiplier between attempts
    attempt_timeout    : Deadline for a single attempt, in seconds
    max_retry_after    : Cap on server-requested retry delays (0 ignores them)
    default_location   : Search area label shown before the user picks one
    default_radius_km  : Search radius used before the user picks one
    """

    model_config = SettingsConfigDict(
        env_prefix="JOINIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── Requests ─────────────────────────────────────────────────
    max_attempts: int = Field(default=3, ge=1)
    base_backoff: float = Field(default=0.5, ge=0)
    growth_factor: float = Field(default=2.0, ge=1)
    attempt_timeout: float = Field(default=10.0, gt=0)
    max_retry_after: float = Field(default=0.0, ge=0)

    # ── Search ───────────────────────────────────────────────────
    default_location: str = "Surrey, British Columbia"
    default_radius_km: int = Field(default=40, ge=0)

    def retry_policy(self) -> RetryPolicy:
        """Build the default ``RetryPolicy`` from these settings."""
        from joinix.execution.retry import RetryPolicy

        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_backoff=self.base_backoff,
            growth_factor=self.growth_factor,
            attempt_timeout=self.attempt_timeout,
            max_retry_after=self.max_retry_after,
        )


@lru_cache(maxsize=1)
def get_settings() -> JoinixSettings:
    """Return the process-wide settings, loaded once."""
    return JoinixSettings()
