"""Event rows as returned by the backend ``events`` table."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from joinix.core.errors import ValidationError


class EventStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def skill_level_text(level: int) -> str:
    """Label for a 1-10 skill level; out-of-range levels read as Intermediate."""
    if 1 <= level <= 3:
        return "Beginner"
    if 4 <= level <= 6:
        return "Intermediate"
    if 7 <= level <= 8:
        return "Advanced"
    if 9 <= level <= 10:
        return "Expert"
    return "Intermediate"


class Event(BaseModel):
    """A hosted sports meetup.

    Coordinates are optional: events created from a free-text location have
    none and never match a radius search.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str
    description: str | None = None
    sport_type: str
    location: str
    latitude: float | None = None
    longitude: float | None = None
    date_time: datetime
    duration_minutes: int = Field(ge=0)
    max_players: int = Field(ge=1)
    current_players: int = Field(default=1, ge=0)
    skill_level: int = 5
    host_id: str
    status: EventStatus = EventStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_full(self) -> bool:
        return self.current_players >= self.max_players

    @property
    def spots_remaining(self) -> int:
        return self.max_players - self.current_players

    @property
    def skill_level_text(self) -> str:
        return skill_level_text(self.skill_level)

    def with_player_joined(self) -> Event:
        """Copy with one more player; a full event raises ``ValidationError``."""
        if self.is_full:
            raise ValidationError("Event is full", field="current_players").with_context(
                table="events", event_id=self.id
            )
        return self.model_copy(update={"current_players": self.current_players + 1})

    def with_player_left(self) -> Event:
        """Copy with one fewer player; the last player cannot leave."""
        if self.current_players <= 1:
            raise ValidationError(
                "Cannot leave event with only 1 player", field="current_players"
            ).with_context(table="events", event_id=self.id)
        return self.model_copy(update={"current_players": self.current_players - 1})


class EventDraft(BaseModel):
    """Host-editable fields of an event, as sent on update."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str | None = None
    sport_type: str
    location: str
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    date_time: datetime
    duration_minutes: int = Field(ge=0)
    max_players: int = Field(ge=1)
    skill_level: int = Field(default=5, ge=1, le=10)

    def to_row(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class NewEvent(EventDraft):
    """A draft plus the hosting user, as sent on insert."""

    host_id: str


__all__ = ["Event", "EventDraft", "EventStatus", "NewEvent", "skill_level_text"]
