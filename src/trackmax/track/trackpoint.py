# trackmax/track/trackpoint.py
"""
A single GPS sample.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Optional

from trackmax.geo.coord import LatLon, interpolate
from trackmax.measure.measurement import Altitude, Speed, Time


class FixMode(enum.Enum):
    NOT_SEEN = "not_seen"
    NO_FIX = "none"
    FIX_2D = "2d"
    FIX_3D = "3d"
    DGPS = "dgps"
    PPS = "pps"


@dataclass(eq=False)
class Trackpoint:
    """
    Position plus whatever else the receiver recorded.

    Identity matters: two points at the same place are still different
    points. `newsegment` marks the first point of a segment. The `_prev`
    and `_next` links belong to the TrackpointList holding the point.
    """

    coord: LatLon
    timestamp: Time = field(default_factory=Time.invalid)
    altitude: Altitude = field(default_factory=Altitude.invalid)
    speed: Speed = field(default_factory=Speed.invalid)
    course: float = math.nan
    name: str = ""
    fix_mode: FixMode = FixMode.NOT_SEEN
    nsats: Optional[int] = None
    hdop: float = math.nan
    vdop: float = math.nan
    pdop: float = math.nan
    newsegment: bool = False

    _prev: Optional["Trackpoint"] = field(default=None, init=False, repr=False)
    _next: Optional["Trackpoint"] = field(default=None, init=False, repr=False)

    @classmethod
    def at(cls, lat: float, lon: float, **kwargs) -> "Trackpoint":
        return cls(LatLon(lat, lon), **kwargs)

    def has_timestamp(self) -> bool:
        return self.timestamp.is_valid()

    def has_altitude(self) -> bool:
        return self.altitude.is_valid()

    @classmethod
    def interpolated(cls, a: "Trackpoint", b: "Trackpoint") -> "Trackpoint":
        """
        A new point halfway between `a` and `b`.

        Altitude, timestamp and speed are averaged when both ends have them.
        Fix quality is not something we can make up, so DOP and satellite
        values are left unset.
        """
        tp = cls(interpolate(a.coord, b.coord, 0.5))
        if a.has_altitude() and b.has_altitude():
            tp.altitude = (a.altitude + b.altitude.convert_to_unit(a.altitude.unit)) / 2
        if a.has_timestamp() and b.has_timestamp():
            tp.timestamp = Time((a.timestamp.internal_value() + b.timestamp.internal_value()) / 2)
        if a.speed.is_valid() and b.speed.is_valid():
            tp.speed = (a.speed + b.speed.convert_to_unit(a.speed.unit)) / 2
        return tp
