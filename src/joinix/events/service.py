"""Event reads, hosting, and roster changes routed through the request gateway.

``EventService`` owns no client of its own. It is given an ``EventBackend``
(the hosted table API, or a fake in tests) and a ``RequestGateway`` that
decides timeouts and retries per call site.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any, Protocol

from joinix.core.errors import NotFoundError
from joinix.core.logging import LogContext, get_logger
from joinix.events.models import Event, EventDraft, EventStatus, NewEvent
from joinix.events.search import EventSearch
from joinix.execution.gateway import RequestGateway

logger = get_logger(__name__)


class EventBackend(Protocol):
    """Subset of the hosted ``events`` table API the service needs."""

    async def list_events(self, status: str) -> Sequence[dict[str, Any]]: ...

    async def list_hosted_events(self, host_id: str) -> Sequence[dict[str, Any]]: ...

    async def get_event(self, event_id: str) -> dict[str, Any] | None: ...

    async def insert_event(self, values: dict[str, Any]) -> dict[str, Any]: ...

    async def update_event(self, event_id: str, values: dict[str, Any]) -> None: ...


class EventService:
    """Fetch, search, host, join, and leave events."""

    def __init__(self, backend: EventBackend, gateway: RequestGateway):
        self._backend = backend
        self._gateway = gateway

    async def active_events(self) -> list[Event]:
        async def fetch() -> list[Event]:
            rows = await self._backend.list_events(EventStatus.ACTIVE.value)
            return [Event.model_validate(row) for row in rows]

        return await self._gateway.call("events.list", fetch)

    async def search(self, search: EventSearch, today: date) -> tuple[Event, ...]:
        events = await self.active_events()
        matches = search.apply(events, today)
        logger.debug(
            "event_search_applied",
            filters=search.active_filters,
            candidates=len(events),
            matches=len(matches),
        )
        return matches

    async def get_event(self, event_id: str) -> Event:
        async def fetch() -> Event:
            row = await self._backend.get_event(event_id)
            if row is None:
                raise NotFoundError(f"Event {event_id} not found").with_context(
                    table="events", operation="events.get"
                )
            return Event.model_validate(row)

        return await self._gateway.call("events.get", fetch)

    async def hosted_events(self, host_id: str) -> list[Event]:
        """Every event ``host_id`` hosts, any status, soonest first."""

        async def fetch() -> list[Event]:
            rows = await self._backend.list_hosted_events(host_id)
            return sorted((Event.model_validate(row) for row in rows), key=lambda e: e.date_time)

        return await self._gateway.call("events.hosted", fetch)

    async def create(self, new_event: NewEvent) -> Event:
        """Insert a hosted event and return the stored row.

        The backend assigns ``id``, ``current_players`` and ``status``.
        """

        async def insert() -> Event:
            row = await self._backend.insert_event(new_event.to_row())
            return Event.model_validate(row)

        event = await self._gateway.call("events.create", insert)
        logger.info("event_created", event_id=event.id, host_id=event.host_id)
        return event

    async def update(self, event_id: str, draft: EventDraft) -> Event:
        """Overwrite the host-editable fields and return the refreshed event."""
        with LogContext(event_id=event_id):
            values = draft.to_row()
            await self._gateway.call("events.update", lambda: self._backend.update_event(event_id, values))
            logger.info("event_updated", fields=sorted(values))
            return await self.get_event(event_id)

    async def cancel(self, event_id: str) -> None:
        """Mark an event cancelled; it drops out of ``active_events``."""
        with LogContext(event_id=event_id):
            values = {"status": EventStatus.CANCELLED.value}
            await self._gateway.call("events.cancel", lambda: self._backend.update_event(event_id, values))
            logger.info("event_cancelled")

    async def join(self, event_id: str) -> Event:
        """Add the current user to an event; full events raise ``ValidationError``."""
        with LogContext(event_id=event_id):
            updated = (await self.get_event(event_id)).with_player_joined()
            await self._save_players(updated, "events.join")
            return updated

    async def leave(self, event_id: str) -> Event:
        """Remove the current user; the last remaining player cannot leave."""
        with LogContext(event_id=event_id):
            updated = (await self.get_event(event_id)).with_player_left()
            await self._save_players(updated, "events.leave")
            return updated

    async def _save_players(self, event: Event, name: str) -> None:
        values = {"current_players": event.current_players}
        await self._gateway.call(name, lambda: self._backend.update_event(event.id, values))
        logger.info("event_roster_updated", current_players=event.current_players)


__all__ = ["EventBackend", "EventService"]
