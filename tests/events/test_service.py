"""Tests for EventService against an in-memory backend."""

from datetime import date, datetime, timezone

import pytest
import structlog

from joinix.core.errors import NetworkError, NotFoundError, TerminalError, ValidationError
from joinix.events.models import EventDraft, NewEvent
from joinix.events.search import EventSearch, SportFilter
from joinix.events.service import EventService
from joinix.execution.gateway import RequestGateway
from joinix.execution.retry import RetryPolicy


class FakeEventBackend:
    """In-memory ``events`` table that can fail the next few calls."""

    def __init__(self, rows):
        self.rows = {row["id"]: dict(row) for row in rows}
        self.failures: list[BaseException] = []
        self.calls: list[str] = []
        self.contexts: list[dict] = []

    def _maybe_fail(self, name):
        self.calls.append(name)
        self.contexts.append(structlog.contextvars.get_contextvars())
        if self.failures:
            raise self.failures.pop(0)

    async def list_events(self, status):
        self._maybe_fail("list_events")
        return [row for row in self.rows.values() if row["status"] == status]

    async def list_hosted_events(self, host_id):
        self._maybe_fail("list_hosted_events")
        return [row for row in self.rows.values() if row["host_id"] == host_id]

    async def get_event(self, event_id):
        self._maybe_fail("get_event")
        return self.rows.get(event_id)

    async def insert_event(self, values):
        self._maybe_fail("insert_event")
        row = {
            **values,
            "id": f"evt-new-{len(self.rows)}",
            "current_players": 1,
            "status": "active",
        }
        self.rows[row["id"]] = row
        return dict(row)

    async def update_event(self, event_id, values):
        self._maybe_fail("update_event")
        self.rows[event_id].update(values)


@pytest.fixture
def backend(make_event_row):
    return FakeEventBackend(
        [
            make_event_row(id="evt-1", current_players=2, max_players=4),
            make_event_row(id="evt-full", current_players=4, max_players=4),
            make_event_row(id="evt-solo", current_players=1),
            make_event_row(id="evt-tennis", sport_type="Tennis"),
            make_event_row(id="evt-done", status="completed"),
        ]
    )


@pytest.fixture
def service(backend, recording_sleep):
    gateway = RequestGateway(
        default_policy=RetryPolicy(max_attempts=3, base_backoff=0.5),
        sleep=recording_sleep,
    )
    return EventService(backend, gateway)


class TestReads:
    @pytest.mark.asyncio
    async def test_active_events(self, service):
        events = await service.active_events()
        assert {event.id for event in events} == {"evt-1", "evt-full", "evt-solo", "evt-tennis"}

    @pytest.mark.asyncio
    async def test_list_retries_transient_failures(self, service, backend, recording_sleep):
        backend.failures = [NetworkError("reset"), ConnectionError("refused")]

        events = await service.active_events()

        assert len(events) == 4
        assert backend.calls == ["list_events"] * 3
        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_list_gives_up_after_policy(self, service, backend):
        backend.failures = [NetworkError("reset")] * 3

        with pytest.raises(NetworkError):
            await service.active_events()
        assert len(backend.calls) == 3

    @pytest.mark.asyncio
    async def test_search(self, service):
        results = await service.search(EventSearch(sport=SportFilter("Tennis")), date(2026, 10, 19))
        assert [event.id for event in results] == ["evt-tennis"]

    @pytest.mark.asyncio
    async def test_get_event_missing(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            await service.get_event("nope")
        assert exc_info.value.context.table == "events"

    @pytest.mark.asyncio
    async def test_malformed_row_is_terminal(self, service, backend):
        backend.rows["evt-1"]["max_players"] = "lots"

        with pytest.raises(TerminalError):
            await service.active_events()
        assert backend.calls == ["list_events"]


class TestRoster:
    @pytest.mark.asyncio
    async def test_join(self, service, backend):
        event = await service.join("evt-1")

        assert event.current_players == 3
        assert backend.rows["evt-1"]["current_players"] == 3
        assert backend.calls == ["get_event", "update_event"]

    @pytest.mark.asyncio
    async def test_join_full_event(self, service, backend):
        with pytest.raises(ValidationError, match="Event is full"):
            await service.join("evt-full")
        assert backend.calls == ["get_event"]

    @pytest.mark.asyncio
    async def test_leave(self, service, backend):
        event = await service.leave("evt-1")
        assert event.current_players == 1
        assert backend.rows["evt-1"]["current_players"] == 1

    @pytest.mark.asyncio
    async def test_last_player_cannot_leave(self, service, backend):
        with pytest.raises(ValidationError):
            await service.leave("evt-solo")
        assert backend.rows["evt-solo"]["current_players"] == 1

    @pytest.mark.asyncio
    async def test_update_retried(self, service, backend, recording_sleep):
        async def flaky_update(event_id, values, _original=backend.update_event):
            if backend.calls.count("update_event") == 0:
                backend.calls.append("update_event")
                raise NetworkError("reset")
            await _original(event_id, values)

        backend.update_event = flaky_update

        event = await service.join("evt-1")

        assert event.current_players == 3
        assert backend.calls == ["get_event", "update_event", "update_event"]
        assert recording_sleep.delays == [0.5]

    @pytest.mark.asyncio
    async def test_roster_change_binds_event_id(self, service, backend):
        await service.join("evt-1")

        assert [ctx["event_id"] for ctx in backend.contexts] == ["evt-1", "evt-1"]
        assert [ctx["operation"] for ctx in backend.contexts] == ["events.get", "events.join"]
        assert "event_id" not in structlog.contextvars.get_contextvars()


@pytest.fixture
def draft():
    return EventDraft(
        title="Sunday Doubles",
        description="Bring a racket",
        sport_type="Tennis",
        location="Bear Creek Park",
        latitude=49.1526,
        longitude=-122.8378,
        date_time=datetime(2026, 11, 1, 10, 0, tzinfo=timezone.utc),
        duration_minutes=60,
        max_players=4,
        skill_level=6,
    )


class TestHosting:
    """Host-side operations: list hosted, create, update, cancel."""

    @pytest.mark.asyncio
    async def test_hosted_events_soonest_first(self, service, backend, make_event_row):
        for event_id, day in (("h-late", 30), ("h-early", 21)):
            backend.rows[event_id] = make_event_row(
                id=event_id,
                host_id="user-2",
                date_time=datetime(2026, 10, day, tzinfo=timezone.utc).isoformat(),
            )
        backend.rows["h-late"]["status"] = "cancelled"

        events = await service.hosted_events("user-2")

        assert [event.id for event in events] == ["h-early", "h-late"]
        assert backend.calls == ["list_hosted_events"]

    @pytest.mark.asyncio
    async def test_hosted_events_retried(self, service, backend, recording_sleep):
        backend.failures = [NetworkError("reset")]

        events = await service.hosted_events("user-1")

        assert len(events) == 5
        assert recording_sleep.delays == [0.5]

    @pytest.mark.asyncio
    async def test_create(self, service, backend, draft):
        new_event = NewEvent(**draft.model_dump(), host_id="user-2")

        event = await service.create(new_event)

        assert event.title == "Sunday Doubles"
        assert event.host_id == "user-2"
        assert event.current_players == 1
        assert event.date_time == datetime(2026, 11, 1, 10, 0, tzinfo=timezone.utc)
        assert backend.rows[event.id]["sport_type"] == "Tennis"

    @pytest.mark.asyncio
    async def test_create_validation_error_not_retried(self, service, backend, draft):
        backend.failures = [ValidationError("duplicate title")]

        with pytest.raises(ValidationError):
            await service.create(NewEvent(**draft.model_dump(), host_id="user-2"))
        assert backend.calls == ["insert_event"]

    @pytest.mark.asyncio
    async def test_update(self, service, backend, draft):
        event = await service.update("evt-1", draft)

        assert event.title == "Sunday Doubles"
        assert event.skill_level == 6
        assert event.current_players == 2
        assert backend.calls == ["update_event", "get_event"]
        assert backend.contexts[0]["event_id"] == "evt-1"
        assert backend.contexts[0]["operation"] == "events.update"

    @pytest.mark.asyncio
    async def test_cancel_removes_from_active(self, service, backend):
        await service.cancel("evt-1")

        assert backend.rows["evt-1"]["status"] == "cancelled"
        events = await service.active_events()
        assert "evt-1" not in {event.id for event in events}

    @pytest.mark.asyncio
    async def test_cancel_retried(self, service, backend, recording_sleep):
        backend.failures = [ConnectionError("refused"), NetworkError("reset")]

        await service.cancel("evt-1")

        assert backend.calls == ["update_event"] * 3
        assert recording_sleep.delays == [0.5, 1.0]


class TestEventDraft:
    def test_rejects_empty_title(self, draft):
        with pytest.raises(ValueError):
            EventDraft(**{**draft.model_dump(), "title": ""})

    def test_skill_level_bounds(self, draft):
        with pytest.raises(ValueError):
            EventDraft(**{**draft.model_dump(), "skill_level": 11})

    def test_to_row_is_json_ready(self, draft):
        row = draft.to_row()
        assert row["date_time"].startswith("2026-11-01T10:00:00")
        assert "host_id" not in row
