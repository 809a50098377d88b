"""Event model, explore-screen search filters, and the event service."""

from joinix.events.models import Event, EventDraft, EventStatus, NewEvent, skill_level_text
from joinix.events.search import (
    ALL_SPORTS,
    RADIUS_OPTIONS_KM,
    SPORTS,
    DateFilter,
    EventSearch,
    LocationFilter,
    SportFilter,
)
from joinix.events.service import EventBackend, EventService

__all__ = [
    "ALL_SPORTS",
    "RADIUS_OPTIONS_KM",
    "SPORTS",
    "DateFilter",
    "Event",
    "EventBackend",
    "EventDraft",
    "EventSearch",
    "EventService",
    "EventStatus",
    "LocationFilter",
    "NewEvent",
    "SportFilter",
    "skill_level_text",
]
