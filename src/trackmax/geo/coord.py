# trackmax/geo/coord.py
"""
Coordinates, point-to-point distance and bounding boxes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from haversine import Unit, haversine


@dataclass(frozen=True)
class LatLon:
    lat: float
    lon: float

    def is_valid(self) -> bool:
        return (
            not math.isnan(self.lat)
            and not math.isnan(self.lon)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lon <= 180.0
        )

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lon)


def distance(a: LatLon, b: LatLon) -> float:
    """Great-circle distance in metres."""
    if a == b:
        return 0.0
    return haversine(a.as_tuple(), b.as_tuple(), unit=Unit.METERS)


def interpolate(a: LatLon, b: LatLon, fraction: float) -> LatLon:
    """Linear interpolation in lat/lon; fraction 0 gives `a`, 1 gives `b`."""
    return LatLon(
        a.lat + (b.lat - a.lat) * fraction,
        a.lon + (b.lon - a.lon) * fraction,
    )


@dataclass
class LatLonBBox:
    north: float = math.nan
    south: float = math.nan
    east: float = math.nan
    west: float = math.nan

    def is_valid(self) -> bool:
        return not any(math.isnan(v) for v in (self.north, self.south, self.east, self.west))

    def expand(self, coord: LatLon) -> None:
        if not self.is_valid():
            self.north = self.south = coord.lat
            self.east = self.west = coord.lon
            return
        self.north = max(self.north, coord.lat)
        self.south = min(self.south, coord.lat)
        self.east = max(self.east, coord.lon)
        self.west = min(self.west, coord.lon)

    def contains(self, coord: LatLon) -> bool:
        return (
            self.is_valid()
            and self.south <= coord.lat <= self.north
            and self.west <= coord.lon <= self.east
        )

    @classmethod
    def from_coords(cls, coords: Iterable[LatLon]) -> "LatLonBBox":
        bbox = cls()
        for c in coords:
            bbox.expand(c)
        return bbox
