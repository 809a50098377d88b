"""
CLI: ``joinix geo`` — distance and radius queries.

Points are written ``lat,lon``. Put ``--`` before a positional point that
starts with a minus sign, or use ``--center=-33.86,151.21`` for options.
"""

from __future__ import annotations

from pathlib import Path

import typer

from joinix.cli.utils import console, load_json_list, output_mapping, output_rows, parse_point
from joinix.geo import GeoQuery, bounding_box, filter_within_radius, haversine_distance_km

app = typer.Typer(no_args_is_help=True)


@app.command("distance")
def distance(
    origin: str = typer.Argument(..., help="First point as lat,lon"),
    destination: str = typer.Argument(..., help="Second point as lat,lon"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Great-circle distance between two points."""
    p1, p2 = parse_point(origin), parse_point(destination)
    km = haversine_distance_km(p1, p2)
    if json_out:
        output_mapping({"origin": origin, "destination": destination, "distance_km": km}, as_json=True)
        return
    console.print(f"{km:.1f} km")


@app.command("box")
def box(
    center: str = typer.Option(..., "--center", "-c", help="Center as lat,lon"),
    radius: float = typer.Option(..., "--radius", "-r", min=0, help="Radius in km"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Bounding box used to pre-filter a radius query."""
    result = bounding_box(parse_point(center), radius)
    output_mapping(result._asdict(), as_json=json_out, title="Bounding box")


@app.command("nearby")
def nearby(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of points"),
    center: str = typer.Option(..., "--center", "-c", help="Center as lat,lon"),
    radius: float = typer.Option(40.0, "--radius", "-r", min=0, help="Radius in km"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Records in FILE within RADIUS km of CENTER, in file order.

    Records need latitude/longitude (or lat/lon) keys; records without them
    are skipped.
    """
    records = load_json_list(file)
    query = GeoQuery(center=parse_point(center), radius_km=radius)
    output_rows(list(filter_within_radius(records, query)), as_json=json_out, title="Nearby")
