"""
CLI utility helpers — output formatting and input loading.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from joinix.core.errors import JoinixError, ValidationError
from joinix.geo import GeoPoint

console = Console()
err_console = Console(stderr=True)


# ── Input helpers ────────────────────────────────────────────────────────


def parse_point(text: str) -> GeoPoint:
    """Parse ``lat,lon`` into a ``GeoPoint``, exiting with a usage error on failure."""
    try:
        return GeoPoint.parse(text)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def load_json_list(path: Path) -> list[Any]:
    """Load a JSON array from ``path``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        fail(ValidationError(f"Cannot read {path}: {exc}", cause=exc))
    if not isinstance(data, list):
        fail(ValidationError(f"{path} must contain a JSON array"))
    return data


def fail(error: JoinixError) -> NoReturn:
    """Print an error and exit non-zero."""
    err_console.print(
        f"[bold red]Error[/bold red] ({error.category.value}): {error.message}", soft_wrap=True
    )
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def output_rows(rows: list[Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a list of records as JSON or a Rich table."""
    if as_json:
        payload = [_to_dict(row) for row in rows]
        console.print_json(json.dumps(payload, default=str))
        return

    if not rows:
        console.print("[dim]No items.[/dim]")
        return

    first = _to_dict(rows[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for row in rows:
        d = _to_dict(row)
        table.add_row(*(str(d.get(col, "")) for col in first))
    console.print(table)


def output_mapping(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a single dict as JSON or key-value pairs."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
