# trackmax/analyze/statistics.py
"""
Track summaries for trackmax
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from trackmax.measure.measurement import Altitude, Distance, Speed, Time
from trackmax.track.track import Track


def _value(m) -> float:
    return m.internal_value() if m.is_valid() else math.nan


def analyze_track(track: Track, min_stop_seconds: float = 60):
    """Flat dict of the usual numbers, internal units, NaN where unknown."""
    up, down = track.elevation_gain_loss()
    return {
        "points": len(track),
        "segments": track.segment_count(),
        "distance_m": _value(track.length()),
        "distance_with_gaps_m": _value(track.length(include_gaps=True)),
        "duration_s": _value(track.duration()),
        "moving_duration_s": _value(track.duration(include_segment_gaps=False)),
        "avg_speed_mps": _value(track.average_speed()),
        "moving_avg_speed_mps": _value(track.moving_average_speed(min_stop_seconds)),
        "max_speed_mps": _value(track.max_speed()),
        "min_altitude_m": _value(track.min_altitude()),
        "max_altitude_m": _value(track.max_altitude()),
        "elevation_gain_m": _value(up),
        "elevation_loss_m": _value(down),
    }


@dataclass
class TrackStatistics:
    """Running totals over many tracks."""

    count: int = 0
    points: int = 0
    length: float = 0.0
    duration: float = 0.0
    elevation_gain: float = 0.0
    elevation_loss: float = 0.0
    max_speed: float = math.nan
    min_altitude: float = math.nan
    max_altitude: float = math.nan
    names: list[str] = field(default_factory=list)

    def add_track(self, track: Track) -> None:
        self.count += 1
        self.points += len(track)
        self.names.append(track.name)

        length = track.length()
        if length.is_valid():
            self.length += length.internal_value()
        duration = track.duration(include_segment_gaps=False)
        if duration.is_valid():
            self.duration += duration.internal_value()

        up, down = track.elevation_gain_loss()
        if up.is_valid():
            self.elevation_gain += up.internal_value()
            self.elevation_loss += down.internal_value()

        v = track.max_speed()
        if v.is_valid() and not v.internal_value() <= self.max_speed:
            self.max_speed = v.internal_value()

        lo, hi = track.min_altitude(), track.max_altitude()
        if lo.is_valid() and not lo.internal_value() >= self.min_altitude:
            self.min_altitude = lo.internal_value()
        if hi.is_valid() and not hi.internal_value() <= self.max_altitude:
            self.max_altitude = hi.internal_value()

    def add_track_maybe(self, track: Track, include_hidden: bool = False) -> bool:
        """Add `track` unless it is hidden and hidden tracks are not wanted."""
        if not track.visible and not include_hidden:
            return False
        self.add_track(track)
        return True

    def total_length(self) -> Distance:
        return Distance(self.length) if self.count else Distance.invalid()

    def total_duration(self) -> Time:
        return Time(self.duration) if self.count else Time.invalid()

    def average_speed(self) -> Speed:
        return Speed.from_distance_time(self.total_length(), self.total_duration())

    def altitude_range(self) -> tuple[Altitude, Altitude]:
        return Altitude(self.min_altitude), Altitude(self.max_altitude)
