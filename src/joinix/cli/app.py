"""
Root Typer application for the joinix CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from joinix import __version__

app = Typer(
    name="joinix",
    help="Request resilience and geo search tools for the Joinix client.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"joinix-core {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override JOINIX_LOG_LEVEL."),
) -> None:
    """Distance checks, radius queries, and event search."""
    from joinix.core.logging import configure_logging
    from joinix.core.settings import get_settings

    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_json,
        service="joinix-cli",
    )


# ── Sub-command registration ─────────────────────────────────────────────

from joinix.cli.config import app as config_app  # noqa: E402
from joinix.cli.events import app as events_app  # noqa: E402
from joinix.cli.geo import app as geo_app  # noqa: E402

app.add_typer(geo_app, name="geo", help="Distance and radius queries.")
app.add_typer(events_app, name="events", help="Event search over JSON dumps.")
app.add_typer(config_app, name="config", help="Configuration.")
