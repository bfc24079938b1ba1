"""Great-circle helpers for GPS distance measurement."""

from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt
from typing import Sequence

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True, slots=True)
class Fix:
    """One position sample reported by a location sensor."""

    lat: float
    lng: float
    timestamp: float | None = None
    accuracy: float | None = None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "lat": self.lat,
            "lng": self.lng,
            "timestamp": self.timestamp,
            "accuracy": self.accuracy,
        }


def haversine_m(a: Fix, b: Fix) -> float:
    """Compute haversine distance between two fixes in meters."""

    lat1_rad = radians(a.lat)
    lat2_rad = radians(b.lat)
    dlat = radians(b.lat - a.lat)
    dlng = radians(b.lng - a.lng)

    h = sin(dlat / 2) ** 2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlng / 2) ** 2
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_M * c


def path_length_m(fixes: Sequence[Fix]) -> float:
    """Walked length of a polyline: sum of legs between consecutive fixes."""

    if len(fixes) < 2:
        return 0.0
    distance = 0.0
    for idx in range(len(fixes) - 1):
        distance += haversine_m(fixes[idx], fixes[idx + 1])
    return distance


__all__ = ["EARTH_RADIUS_M", "Fix", "haversine_m", "path_length_m"]
