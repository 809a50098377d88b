"""Client-side event search: sport, day, location radius, and free text.

The explore screen lets a user narrow the active events by sport, by one of
the next five days, by distance from a chosen place, and by typed text.
``EventSearch`` composes those filters; the radius step goes through
``filter_within_radius`` so distance is always decided by Haversine.

Example:
    >>> search = EventSearch(
    ...     sport=SportFilter("Badminton"),
    ...     location=LocationFilter(center=GeoPoint(49.19, -122.85), radius_km=10),
    ... )
    >>> nearby = search.apply(events, today=date.today())
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from joinix.core.errors import ValidationError
from joinix.events.models import Event, EventStatus
from joinix.geo import GeoPoint, GeoQuery, filter_within_radius

ALL_SPORTS = "All Sports"

SPORTS: tuple[str, ...] = (
    ALL_SPORTS,
    "General (Casual/Any)",
    "Badminton",
    "Basketball",
    "Soccer (Football)",
    "Volleyball",
    "Table Tennis",
    "Tennis",
    "Pickleball",
    "Baseball",
    "Softball",
    "Running",
    "Cycling",
    "Swimming",
    "Climbing (Indoor/Outdoor)",
    "Skating (Ice/Roller)",
    "Skiing/Snowboarding",
    "Golf",
    "Ultimate Frisbee",
    "Flag Football",
    "Martial Arts (e.g., Judo, Taekwondo)",
    "Boxing",
    "Wrestling",
    "Dance Fitness (Zumba, Hip-Hop, etc.)",
    "Yoga/Pilates",
    "CrossFit/HIIT/Bootcamp",
    "Esports/Gaming Tournaments",
    "Dodgeball",
    "Cricket",
    "Rugby",
    "Lacrosse",
    "Hockey (Field/Ice)",
    "Surfing",
    "Archery",
    "Rowing",
    "Bouldering",
    "Kendo/Fencing",
    "Cheerleading",
    "Horseback Riding",
)

DAY_OPTIONS = 5
DEFAULT_LOCATION = "Surrey, British Columbia"
DEFAULT_RADIUS_KM = 40
RADIUS_OPTIONS_KM: tuple[int, ...] = (1, 5, 10, 25, 40, 50)


@dataclass(frozen=True)
class SportFilter:
    """Exact match on ``sport_type``; ``All Sports`` matches everything."""

    sport: str = ALL_SPORTS

    @property
    def active(self) -> bool:
        return self.sport != ALL_SPORTS

    def matches(self, event: Event) -> bool:
        return not self.active or event.sport_type == self.sport


@dataclass(frozen=True)
class DateFilter:
    """One of the next ``DAY_OPTIONS`` days, counted from today.

    Offset 0 is the default selection and leaves dates unfiltered.
    """

    day_offset: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.day_offset < DAY_OPTIONS:
            raise ValidationError(
                f"day_offset must be between 0 and {DAY_OPTIONS - 1}, got {self.day_offset}",
                field="day_offset",
            )

    @property
    def active(self) -> bool:
        return self.day_offset != 0

    def target_day(self, today: date) -> date:
        return today + timedelta(days=self.day_offset)

    def matches(self, event: Event, today: date) -> bool:
        return not self.active or event.date_time.date() == self.target_day(today)


@dataclass(frozen=True)
class LocationFilter:
    """Distance filter around a chosen place.

    Inactive until a center is set; radii are limited to the options the
    picker offers.
    """

    label: str = DEFAULT_LOCATION
    radius_km: int = DEFAULT_RADIUS_KM
    center: GeoPoint | None = None

    def __post_init__(self) -> None:
        if self.radius_km not in RADIUS_OPTIONS_KM:
            raise ValidationError(
                f"radius_km must be one of {RADIUS_OPTIONS_KM}, got {self.radius_km}",
                field="radius_km",
            )

    @property
    def active(self) -> bool:
        return self.center is not None

    def query(self) -> GeoQuery | None:
        if self.center is None:
            return None
        return GeoQuery(center=self.center, radius_km=float(self.radius_km))


@dataclass(frozen=True)
class EventSearch:
    """All explore-screen filters together."""

    sport: SportFilter = field(default_factory=SportFilter)
    day: DateFilter = field(default_factory=DateFilter)
    location: LocationFilter = field(default_factory=LocationFilter)
    text: str = ""

    @property
    def active_filters(self) -> list[str]:
        names = []
        if self.text.strip():
            names.append("text")
        if self.sport.active:
            names.append("sport")
        if self.day.active:
            names.append("day")
        if self.location.active:
            names.append("location")
        return names

    def _matches_text(self, event: Event) -> bool:
        needle = self.text.strip().casefold()
        if not needle:
            return True
        haystack = (event.title, event.location, event.sport_type, event.description or "")
        return any(needle in value.casefold() for value in haystack)

    def apply(self, events: Iterable[Event], today: date) -> tuple[Event, ...]:
        """Active events passing every filter, soonest first."""
        candidates = [
            event
            for event in events
            if event.status is EventStatus.ACTIVE
            and self._matches_text(event)
            and self.sport.matches(event)
            and self.day.matches(event, today)
        ]
        query = self.location.query()
        if query is not None:
            candidates = list(filter_within_radius(candidates, query))
        return tuple(sorted(candidates, key=lambda event: event.date_time))


__all__ = [
    "ALL_SPORTS",
    "DAY_OPTIONS",
    "DEFAULT_LOCATION",
    "DEFAULT_RADIUS_KM",
    "RADIUS_OPTIONS_KM",
    "SPORTS",
    "DateFilter",
    "EventSearch",
    "LocationFilter",
    "SportFilter",
]
