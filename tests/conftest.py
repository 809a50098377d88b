"""
Shared pytest fixtures for joinix-core tests.

This module provides:
- A recording fake for the executor's backoff sleep
- An event-row factory for search and service tests
- Settings cache isolation
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

# Ensure joinix package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from joinix.core.settings import get_settings  # noqa: E402


class RecordingSleep:
    """Stand-in for ``asyncio.sleep`` that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached process-wide; clear around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def event_row(**overrides: Any) -> dict[str, Any]:
    """A backend ``events`` row with sensible defaults."""
    row: dict[str, Any] = {
        "id": "evt-1",
        "title": "Evening Badminton",
        "description": "Casual doubles",
        "sport_type": "Badminton",
        "location": "Surrey Sport & Leisure Complex",
        "latitude": 49.1913,
        "longitude": -122.8490,
        "date_time": datetime(2026, 10, 20, 18, 30, tzinfo=timezone.utc).isoformat(),
        "duration_minutes": 90,
        "max_players": 4,
        "current_players": 2,
        "skill_level": 5,
        "host_id": "user-1",
        "status": "active",
        "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc).isoformat(),
        "updated_at": datetime(2026, 10, 1, tzinfo=timezone.utc).isoformat(),
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_event_row():
    return event_row
