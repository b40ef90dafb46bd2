# trackmax/dem/elevation.py
"""
Elevation lookup collaborator.

trackmax does not read DEM tiles. Anything with a `get_elevation()` method of
the right shape can be handed to Track.apply_dem_data().
"""

from __future__ import annotations

import enum
from typing import Callable, Protocol

from trackmax.geo.coord import LatLon
from trackmax.measure.measurement import Altitude

# Above this a DEM answer is treated as garbage.
MAX_VALID_ALTITUDE_M = 25000.0


class DemInterpolation(enum.Enum):
    NONE = "none"
    SIMPLE = "simple"
    BEST = "best"


class ElevationSource(Protocol):
    def get_elevation(self, coord: LatLon, interpolation: DemInterpolation) -> Altitude:
        """Altitude at `coord`; an invalid Altitude means no data."""
        ...


class CallableElevationSource:
    """Wrap a plain `fn(lat, lon) -> metres or None` as an ElevationSource."""

    def __init__(self, fn: Callable[[float, float], "float | None"]) -> None:
        self._fn = fn

    def get_elevation(self, coord: LatLon, interpolation: DemInterpolation) -> Altitude:
        metres = self._fn(coord.lat, coord.lon)
        if metres is None or abs(metres) > MAX_VALID_ALTITUDE_M:
            return Altitude.invalid()
        return Altitude(metres)
