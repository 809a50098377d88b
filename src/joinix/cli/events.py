"""
CLI: ``joinix events`` — run explore-screen searches over an events dump.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import typer
from pydantic import ValidationError as ModelValidationError

from joinix.cli.utils import fail, load_json_list, output_rows, parse_point
from joinix.core.errors import JoinixError, ValidationError
from joinix.core.settings import get_settings
from joinix.events import ALL_SPORTS, DateFilter, Event, EventSearch, LocationFilter, SportFilter

app = typer.Typer(no_args_is_help=True)


@app.command("search")
def search(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of event rows"),
    sport: str = typer.Option(ALL_SPORTS, "--sport", "-s"),
    day: int = typer.Option(0, "--day", "-d", help="Days from today (0 = any day)"),
    center: str | None = typer.Option(None, "--center", "-c", help="Search center as lat,lon"),
    radius: int | None = typer.Option(None, "--radius", "-r", help="Radius in km"),
    text: str = typer.Option("", "--text", "-t"),
    today: str | None = typer.Option(None, "--today", help="Override today (YYYY-MM-DD)"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Active events in FILE matching the given filters, soonest first."""
    settings = get_settings()
    rows = load_json_list(file)
    try:
        events = [Event.model_validate(row) for row in rows]
        event_search = EventSearch(
            sport=SportFilter(sport),
            day=DateFilter(day),
            location=LocationFilter(
                label=settings.default_location,
                radius_km=radius if radius is not None else settings.default_radius_km,
                center=parse_point(center) if center else None,
            ),
            text=text,
        )
        reference_day = date.fromisoformat(today) if today else date.today()
    except ModelValidationError as exc:
        fail(ValidationError(f"Invalid event row: {exc.error_count()} error(s)", cause=exc))
    except JoinixError as exc:
        fail(exc)
    except ValueError as exc:
        fail(ValidationError(str(exc), cause=exc))

    matches = event_search.apply(events, reference_day)
    output_rows(
        [
            {
                "id": e.id,
                "title": e.title,
                "sport": e.sport_type,
                "when": e.date_time.isoformat(),
                "location": e.location,
                "spots": e.spots_remaining,
                "skill": e.skill_level_text,
            }
            for e in matches
        ],
        as_json=json_out,
        title="Events",
    )
