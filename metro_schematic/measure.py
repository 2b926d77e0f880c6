"""Great-circle distance measurement along a chain of map points."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .network import LatLng

EARTH_RADIUS_M = 6371000.0


def haversine(a: LatLng, b: LatLng) -> float:
    """Distance in metres between two ``(lat, lng)`` points."""

    lat1, lng1 = math.radians(a[0]), math.radians(a[1])
    lat2, lng2 = math.radians(b[0]), math.radians(b[1])
    sin_dlat = math.sin((lat2 - lat1) / 2.0)
    sin_dlng = math.sin((lng2 - lng1) / 2.0)
    h = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    return 2.0 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(max(1.0 - h, 0.0)))


def format_distance(metres: float) -> str:
    """``734 m`` below a kilometre, ``1.25 km`` below ten, ``12.35 km`` beyond."""

    d = int(math.floor(metres + 0.5))
    if d < 1000:
        return f"{d} m"
    if d < 10000:
        return f"{d / 1000:g} km"
    km = f"{math.floor(d / 10 + 0.5) / 100:.2f}".rstrip("0").rstrip(".")
    return f"{km} km"


def path_length(points: Sequence[LatLng]) -> float:
    return sum(haversine(points[i - 1], points[i]) for i in range(1, len(points)))


class DistanceMeasure:
    """Ordered waypoints with cumulative distance labels."""

    def __init__(self) -> None:
        self.points: List[LatLng] = []

    def add(self, point: LatLng) -> str:
        self.points.append(point)
        return self.labels()[-1]

    def move(self, index: int, point: LatLng) -> None:
        self.points[index] = point

    def remove(self, index: int) -> None:
        del self.points[index]

    def clear(self) -> None:
        self.points.clear()

    @property
    def active(self) -> bool:
        return bool(self.points)

    def total(self) -> float:
        return path_length(self.points)

    def labels(self) -> List[str]:
        if not self.points:
            return []
        labels = ["0"]
        running = 0.0
        for prev, cur in zip(self.points, self.points[1:]):
            running += haversine(prev, cur)
            labels.append(format_distance(running))
        return labels

    def last_label(self) -> Optional[str]:
        labels = self.labels()
        return labels[-1] if labels else None


__all__ = ["EARTH_RADIUS_M", "DistanceMeasure", "format_distance", "haversine", "path_length"]
