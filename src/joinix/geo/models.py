"""Geographic value types: points, radius queries, and bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Latitude/longitude pair in decimal degrees (WGS84)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.latitude) and -90.0 <= self.latitude <= 90.0):
            raise ValueError(f"latitude must be within [-90, 90], got {self.latitude}")
        if not (math.isfinite(self.longitude) and -180.0 <= self.longitude <= 180.0):
            raise ValueError(f"longitude must be within [-180, 180], got {self.longitude}")

    @classmethod
    def parse(cls, text: str) -> GeoPoint:
        """Parse ``"lat,lon"``."""
        try:
            lat, lon = (float(part) for part in text.split(","))
        except ValueError as exc:
            raise ValueError(f"expected 'lat,lon', got {text!r}") from exc
        return cls(lat, lon)


@dataclass(frozen=True, slots=True)
class GeoQuery:
    """All points within ``radius_km`` of ``center``."""

    center: GeoPoint
    radius_km: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.radius_km) or self.radius_km < 0:
            raise ValueError(f"radius_km must be finite and non-negative, got {self.radius_km}")


class BoundingBox(NamedTuple):
    """Latitude/longitude rectangle used as a cheap pre-filter.

    Bounds are stored unwrapped: ``min_lon`` may be below -180 or
    ``max_lon`` above 180 when the box crosses the antimeridian, and the
    longitude bounds diverge for centers at the poles.
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_lon < -180.0 or self.max_lon > 180.0

    def contains(self, latitude: float, longitude: float) -> bool:
        if not self.min_lat <= latitude <= self.max_lat:
            return False
        if self.min_lon <= longitude <= self.max_lon:
            return True
        if self.crosses_antimeridian:
            return any(
                self.min_lon <= shifted <= self.max_lon
                for shifted in (longitude - 360.0, longitude + 360.0)
            )
        return False
