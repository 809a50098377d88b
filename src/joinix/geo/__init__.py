"""Geographic filtering for location-based event search."""

from joinix.geo.filter import (
    EARTH_RADIUS_KM,
    bounding_box,
    coordinates_of,
    distance_to,
    filter_within_radius,
    haversine_distance_km,
    sort_by_distance,
)
from joinix.geo.models import BoundingBox, GeoPoint, GeoQuery

__all__ = [
    "EARTH_RADIUS_KM",
    "BoundingBox",
    "GeoPoint",
    "GeoQuery",
    "bounding_box",
    "coordinates_of",
    "distance_to",
    "filter_within_radius",
    "haversine_distance_km",
    "sort_by_distance",
]
