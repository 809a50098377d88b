"""Radius filtering: bounding-box pre-filter plus exact Haversine test.

``haversine_distance_km`` is the authoritative distance. The bounding box
only rejects obvious misses cheaply; every surviving point is confirmed
with the exact great-circle distance.

Points can be ``GeoPoint`` values, objects exposing ``latitude`` and
``longitude`` attributes (events, location search results), or mappings
with ``latitude``/``longitude`` or ``lat``/``lon`` keys. A point with a
missing coordinate never matches a radius query.

Examples:
    >>> vancouver = GeoPoint(49.2827, -123.1207)
    >>> surrey = GeoPoint(49.1913, -122.8490)
    >>> round(haversine_distance_km(vancouver, surrey), 1)
    22.2
    >>> filter_within_radius([vancouver, surrey], GeoQuery(vancouver, 10))
    (GeoPoint(latitude=49.2827, longitude=-123.1207),)
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from joinix.geo.models import BoundingBox, GeoPoint, GeoQuery

P = TypeVar("P")

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.0


def coordinates_of(point: Any) -> tuple[float, float] | None:
    """Extract ``(latitude, longitude)`` from a point-like value.

    Returns None when either coordinate is missing or not a finite number.
    """
    if isinstance(point, Mapping):
        lat = point.get("latitude", point.get("lat"))
        lon = point.get("longitude", point.get("lon"))
    else:
        lat = getattr(point, "latitude", None)
        lon = getattr(point, "longitude", None)

    if lat is None or lon is None:
        return None
    try:
        lat, lon = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    return lat, lon


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Box around ``center`` covering ``radius_km``, using 1 deg lat ~ 111 km.

    The longitude delta is ``radius_km / (111 * cos(lat))``; it grows
    without bound as the center approaches a pole. Callers querying near
    the poles must special-case them.
    """
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(center.latitude))
    if cos_lat == 0.0:
        lon_delta = math.inf if radius_km > 0 else 0.0
    else:
        lon_delta = radius_km / (KM_PER_DEGREE_LAT * abs(cos_lat))

    return BoundingBox(
        min_lat=center.latitude - lat_delta,
        max_lat=center.latitude + lat_delta,
        min_lon=center.longitude - lon_delta,
        max_lon=center.longitude + lon_delta,
    )


def _haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    rlat1, rlat2 = math.radians(lat1), math.radians(lat2)
    dlat = rlat2 - rlat1
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlon / 2) ** 2
    # Rounding can leave a slightly outside [0, 1] near antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def haversine_distance_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """Great-circle distance between two points, in kilometers (R = 6371 km)."""
    return _haversine(p1.latitude, p1.longitude, p2.latitude, p2.longitude)


def distance_to(point: Any, center: GeoPoint) -> float | None:
    """Distance from ``center`` to a point-like value, or None without coordinates."""
    coords = coordinates_of(point)
    if coords is None:
        return None
    return _haversine(center.latitude, center.longitude, *coords)


def _prefilter_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """``bounding_box`` made safe for the pre-filter at any latitude.

    A circle that reaches a pole spans every longitude, so the longitude
    bounds open fully. Elsewhere the longitude delta is widened to the
    exact extent of the spherical cap when that exceeds the flat estimate.
    """
    box = bounding_box(center, radius_km)
    lat_delta = box.max_lat - center.latitude
    if abs(center.latitude) + lat_delta >= 90.0:
        return box._replace(min_lon=-180.0, max_lon=180.0)

    cos_lat = math.cos(math.radians(center.latitude))
    ratio = math.sin(radius_km / EARTH_RADIUS_KM) / cos_lat
    exact_delta = math.degrees(math.asin(min(1.0, ratio)))
    lon_delta = max(box.max_lon - center.longitude, exact_delta)
    return box._replace(
        min_lon=center.longitude - lon_delta,
        max_lon=center.longitude + lon_delta,
    )


def filter_within_radius(points: Iterable[P], query: GeoQuery) -> tuple[P, ...]:
    """Points within ``query.radius_km`` of ``query.center``, in input order."""
    box = _prefilter_box(query.center, query.radius_km)
    center = query.center
    matches = []
    for point in points:
        coords = coordinates_of(point)
        if coords is None:
            continue
        lat, lon = coords
        if not box.contains(lat, lon):
            continue
        if _haversine(center.latitude, center.longitude, lat, lon) <= query.radius_km:
            matches.append(point)
    return tuple(matches)


def sort_by_distance(points: Iterable[P], center: GeoPoint) -> list[tuple[P, float]]:
    """Located points paired with their distance, nearest first.

    Points without coordinates are dropped. Ties keep input order.
    """
    located = []
    for point in points:
        distance = distance_to(point, center)
        if distance is not None:
            located.append((point, distance))
    located.sort(key=lambda pair: pair[1])
    return located


__all__ = [
    "EARTH_RADIUS_KM",
    "KM_PER_DEGREE_LAT",
    "bounding_box",
    "coordinates_of",
    "distance_to",
    "filter_within_radius",
    "haversine_distance_km",
    "sort_by_distance",
]
