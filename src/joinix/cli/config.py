"""
CLI: ``joinix config`` — show effective settings.
"""

from __future__ import annotations

import typer

from joinix.cli.utils import output_mapping

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show(json_out: bool = typer.Option(False, "--json")) -> None:
    """Show settings after environment and .env overrides."""
    from joinix.core.settings import get_settings

    output_mapping(get_settings().model_dump(mode="json"), as_json=json_out, title="Settings")
