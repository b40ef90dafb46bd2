# trackmax/track/track.py
"""
Track: a named sequence of trackpoints, its statistics and in-place edits.

Statistics are plain O(N) walks over the points and return Measurements
(invalid when there is nothing to measure). Edits return an EditResult and
never raise on bad data.

Segments are implicit: a point with `newsegment` set starts one. The first
point of a non-empty track is expected to carry the flag.

The bounding box and the maximum speed are cached and recomputed after
every edit that can change them.
"""

from __future__ import annotations

import math
from typing import Iterator, Optional

from trackmax.dem.elevation import DemInterpolation, ElevationSource
from trackmax.errors import EditResult, Status
from trackmax.geo.coord import LatLonBBox, distance
from trackmax.measure.measurement import Altitude, Distance, Speed, Time
from trackmax.measure.units import AltitudeUnit
from trackmax.track.points import TrackpointHandle, TrackpointList
from trackmax.track.trackpoint import FixMode, Trackpoint
from trackmax.util.jobs import JobControl
from trackmax.util.logging import get_logger

logger = get_logger("track")

# 1901-01-01T00:00:00Z
ANONYMIZE_EPOCH = -2177452800


def _dt(a: Trackpoint, b: Trackpoint) -> Optional[float]:
    if not (a.has_timestamp() and b.has_timestamp()):
        return None
    return b.timestamp.internal_value() - a.timestamp.internal_value()


class Track:
    def __init__(self, name: str = "", points=(), is_route: bool = False) -> None:
        self.name = name
        self.comment = ""
        self.description = ""
        self.source = ""
        self.type = ""
        self.color: Optional[str] = None
        self.visible = True
        self.is_route = is_route

        self.points = points if isinstance(points, TrackpointList) else TrackpointList(points)
        if self.points.first is not None:
            self.points.first.newsegment = True
        self.bbox = LatLonBBox()
        self._max_speed = Speed.invalid()
        self._max_speed_point: Optional[Trackpoint] = None
        self._selected: Optional[TrackpointHandle] = None
        self._recalculate()

    def __repr__(self) -> str:
        return f"Track({self.name!r}, {len(self.points)} points)"

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Trackpoint]:
        return iter(self.points)

    # ---- metadata -------------------------------

    def copy_properties(self, other: "Track") -> None:
        """Take over everything from `other` except its points."""
        self.name = other.name
        self.comment = other.comment
        self.description = other.description
        self.source = other.source
        self.type = other.type
        self.color = other.color
        self.visible = other.visible
        self.is_route = other.is_route

    def new_like(self, name: str) -> "Track":
        trk = Track()
        trk.copy_properties(self)
        trk.name = name
        return trk

    # ---- caches ---------------------------------

    def recalculate_bbox(self) -> None:
        self.bbox = LatLonBBox.from_coords(tp.coord for tp in self.points)

    def calculate_max_speed(self) -> None:
        best, best_tp = -1.0, None
        for prev, tp in self._pairs():
            if tp.newsegment:
                continue
            dt = _dt(prev, tp)
            if dt is None or dt <= 0:
                continue
            v = distance(prev.coord, tp.coord) / dt
            if v > best:
                best, best_tp = v, tp
        self._max_speed = Speed(best) if best_tp is not None else Speed.invalid()
        self._max_speed_point = best_tp

    def _recalculate(self) -> None:
        self.recalculate_bbox()
        self.calculate_max_speed()

    # ---- navigation -----------------------------

    def _pairs(self) -> Iterator[tuple[Trackpoint, Trackpoint]]:
        prev = None
        for tp in self.points:
            if prev is not None:
                yield prev, tp
            prev = tp

    def first(self) -> Optional[Trackpoint]:
        return self.points.first

    def last(self) -> Optional[Trackpoint]:
        return self.points.last

    def handle(self, tp: Trackpoint) -> Optional[TrackpointHandle]:
        if tp not in self.points:
            return None
        return self.points.handle(tp)

    def handle_at(self, index: int) -> TrackpointHandle:
        return self.points.handle_at(index)

    def resolve(self, handle: TrackpointHandle) -> Optional[Trackpoint]:
        return self.points.resolve(handle)

    def find(self, tp: Trackpoint) -> Optional[int]:
        return self.points.index_of(tp)

    def select(self, tp: Optional[Trackpoint]) -> None:
        self._selected = self.handle(tp) if tp is not None else None

    def selected_point(self) -> Optional[Trackpoint]:
        if self._selected is None:
            return None
        tp = self.resolve(self._selected)
        if tp is None:
            self._selected = None
        return tp

    def segment_count(self) -> int:
        count = 0
        for i, tp in enumerate(self.points):
            if i == 0 or tp.newsegment:
                count += 1
        return count

    def distances(self) -> list[float]:
        """Metres between consecutive points."""
        return [distance(a.coord, b.coord) for a, b in self._pairs()]

    def speeds(self) -> list[float]:
        """m/s between consecutive points; NaN where time does not move forward."""
        out = []
        for a, b in self._pairs():
            dt = _dt(a, b)
            out.append(distance(a.coord, b.coord) / dt if dt is not None and dt > 0 else math.nan)
        return out

    def tp_by_distance(self, metres: float, next_point: bool = False) -> Optional[Trackpoint]:
        """
        The point at `metres` along the track (gaps included), or the one
        just before it; with `next_point`, the one just after it.
        """
        cum, prev = 0.0, None
        for tp in self.points:
            if prev is not None:
                cum += distance(prev.coord, tp.coord)
            if cum >= metres:
                if next_point or prev is None or cum == metres:
                    return tp
                return prev
            prev = tp
        return None if next_point else prev

    def tp_by_percentage_distance(self, fraction: float) -> Optional[Trackpoint]:
        total = self.length(include_gaps=True).internal_value()
        if math.isnan(total):
            return None
        return self.tp_by_distance(total * fraction)

    def tp_by_percentage_time(self, fraction: float) -> Optional[Trackpoint]:
        first, last = self.points.first, self.points.last
        if first is None or not (first.has_timestamp() and last.has_timestamp()):
            return None
        t0 = first.timestamp.internal_value()
        target = t0 + (last.timestamp.internal_value() - t0) * fraction
        for tp in self.points:
            if tp.has_timestamp() and tp.timestamp.internal_value() >= target:
                return tp
        return last

    def tp_by_max_speed(self) -> Optional[Trackpoint]:
        return self._max_speed_point

    def _tp_by_altitude(self, pick) -> Optional[Trackpoint]:
        best = None
        for tp in self.points:
            if not tp.has_altitude():
                continue
            if best is None or pick(tp.altitude.internal_value(), best.altitude.internal_value()):
                best = tp
        return best

    def tp_by_max_altitude(self) -> Optional[Trackpoint]:
        return self._tp_by_altitude(lambda a, b: a > b)

    def tp_by_min_altitude(self) -> Optional[Trackpoint]:
        return self._tp_by_altitude(lambda a, b: a < b)

    def length_to(self, handle: TrackpointHandle) -> Distance:
        """Distance from the first point to the handle's point, gaps included."""
        tp = self.resolve(handle)
        if tp is None:
            return Distance.invalid()
        cum, prev = 0.0, None
        for cur in self.points:
            if prev is not None:
                cum += distance(prev.coord, cur.coord)
            if cur is tp:
                return Distance(cum)
            prev = cur
        return Distance.invalid()

    def distance_percent(self, handle: TrackpointHandle) -> float:
        """Fraction (0..1) of the total length covered at the handle's point; NaN if undefined."""
        return self.length_to(handle) / self.length(include_gaps=True)

    def time_percent(self, handle: TrackpointHandle) -> float:
        first, last = self.points.first, self.points.last
        tp = self.resolve(handle)
        if tp is None:
            return math.nan
        return (tp.timestamp - first.timestamp) / (last.timestamp - first.timestamp)

    # ---- statistics -----------------------------

    def length(self, include_gaps: bool = False) -> Distance:
        """Sum of point-to-point distances; without gaps, segment jumps are skipped."""
        if not self.points:
            return Distance.invalid()
        total = 0.0
        for prev, tp in self._pairs():
            if tp.newsegment and not include_gaps:
                continue
            total += distance(prev.coord, tp.coord)
        return Distance(total)

    def length_including_gaps(self) -> Distance:
        return self.length(include_gaps=True)

    def duration(self, include_segment_gaps: bool = True) -> Time:
        """
        Wall clock (last minus first timestamp) or, without segment gaps,
        the sum of forward time steps inside segments.
        """
        if self.is_route or not self.points:
            return Time.invalid()
        if include_segment_gaps:
            first, last = self.points.first, self.points.last
            dt = _dt(first, last)
            return Time(dt) if dt is not None else Time.invalid()
        total, seen = 0.0, False
        for prev, tp in self._pairs():
            if tp.newsegment:
                continue
            dt = _dt(prev, tp)
            if dt is None:
                continue
            seen = True
            if dt > 0:
                total += dt
        return Time(total) if seen else Time.invalid()

    def average_speed(self) -> Speed:
        if self.is_route:
            return Speed.invalid()
        return Speed.from_distance_time(self.length(), self.duration(include_segment_gaps=False))

    def moving_average_speed(self, stop_length_seconds: float) -> Speed:
        """Average speed leaving out every step longer than `stop_length_seconds`."""
        if self.is_route:
            return Speed.invalid()
        dist = secs = 0.0
        for prev, tp in self._pairs():
            if tp.newsegment:
                continue
            dt = _dt(prev, tp)
            if dt is None or dt <= 0 or dt > stop_length_seconds:
                continue
            dist += distance(prev.coord, tp.coord)
            secs += dt
        return Speed(dist / secs) if secs > 0 else Speed.invalid()

    def max_speed(self) -> Speed:
        if self.is_route:
            return Speed.invalid()
        return self._max_speed

    def min_altitude(self) -> Altitude:
        tp = self.tp_by_min_altitude()
        return Altitude(tp.altitude.internal_value()) if tp is not None else Altitude.invalid()

    def max_altitude(self) -> Altitude:
        tp = self.tp_by_max_altitude()
        return Altitude(tp.altitude.internal_value()) if tp is not None else Altitude.invalid()

    def elevation_gain_loss(self) -> tuple[Altitude, Altitude]:
        """(total up, total down); down is zero or negative."""
        up = down = 0.0
        last = None
        for tp in self.points:
            if not tp.has_altitude():
                continue
            alt = tp.altitude.internal_value()
            if last is not None:
                delta = alt - last
                if delta > 0:
                    up += delta
                else:
                    down += delta
            last = alt
        if last is None:
            return Altitude.invalid(), Altitude.invalid()
        return Altitude(up), Altitude(down)

    def dup_point_count(self) -> int:
        return sum(1 for a, b in self._pairs() if a.coord == b.coord)

    def same_time_point_count(self) -> int:
        return sum(1 for a, b in self._pairs() if _dt(a, b) == 0)

    # ---- edits ----------------------------------

    def add_trackpoint(self, tp: Trackpoint, recalculate: bool = True) -> EditResult:
        if not self.points:
            tp.newsegment = True
        self.points.append(tp)
        if recalculate:
            self._recalculate()
        return EditResult(Status.OK, 1)

    def insert_interpolated(self, handle: TrackpointHandle, before: bool) -> EditResult:
        """Insert a point halfway to the neighbour before or after the handle's point."""
        tp = self.resolve(handle)
        if tp is None:
            return EditResult(Status.INVALID_ARGUMENT)
        other = self.points.prev_of(tp) if before else self.points.next_of(tp)
        if other is None:
            return EditResult(Status.INVALID_ARGUMENT)
        new_tp = Trackpoint.interpolated(tp, other)
        if before:
            # The new point now opens tp's segment
            new_tp.newsegment, tp.newsegment = tp.newsegment, False
            self.points.insert_before(tp, new_tp)
        else:
            self.points.insert_after(tp, new_tp)
        self._recalculate()
        return EditResult(Status.OK, 1)

    def _delete(self, tp: Trackpoint) -> Optional[Trackpoint]:
        nxt = self.points.remove(tp)
        if tp.newsegment and nxt is not None:
            nxt.newsegment = True
        return nxt

    def delete_trackpoint(self, handle: TrackpointHandle) -> EditResult:
        tp = self.resolve(handle)
        if tp is None:
            return EditResult(Status.INVALID_ARGUMENT)
        self._delete(tp)
        self._recalculate()
        return EditResult(Status.OK, 1)

    def _remove_adjacent(self, same) -> int:
        removed = 0
        prev = self.points.first
        tp = self.points.next_of(prev) if prev is not None else None
        while tp is not None:
            if same(prev, tp):
                tp = self._delete(tp)
                removed += 1
            else:
                prev, tp = tp, self.points.next_of(tp)
        return removed

    def remove_dup_points(self) -> EditResult:
        """Drop every point at the same position as the point before it."""
        if not self.points:
            return EditResult(Status.INVALID_ARGUMENT)
        removed = self._remove_adjacent(lambda a, b: a.coord == b.coord)
        self._recalculate()
        if removed:
            logger.info("Removed %d duplicate points from %r", removed, self.name)
        return EditResult(Status.OK, removed)

    def remove_same_time_points(self) -> EditResult:
        """Drop every point with the same timestamp as the point before it."""
        if not self.points:
            return EditResult(Status.INVALID_ARGUMENT)
        removed = self._remove_adjacent(lambda a, b: _dt(a, b) == 0)
        self._recalculate()
        if removed:
            logger.info("Removed %d same-time points from %r", removed, self.name)
        return EditResult(Status.OK, removed)

    def merge_segments(self) -> EditResult:
        cleared = 0
        for i, tp in enumerate(self.points):
            if i == 0:
                tp.newsegment = True
            elif tp.newsegment:
                tp.newsegment = False
                cleared += 1
        self._recalculate()
        return EditResult(Status.OK, cleared)

    def reverse(self) -> EditResult:
        """
        Reverse point order.

        The new first point starts a segment. Every other point starts a
        segment exactly when its new predecessor started one before, so a
        boundary between two points stays between the same two points.
        """
        if not self.points:
            return EditResult(Status.INVALID_ARGUMENT)
        old_flags = [tp.newsegment for tp in self.points]
        self.points.reverse()
        n = len(old_flags)
        for j, tp in enumerate(self.points):
            tp.newsegment = True if j == 0 else old_flags[n - j]
        self._recalculate()
        return EditResult(Status.OK, n)

    def interpolate_times(self) -> EditResult:
        """
        Re-time the interior points in proportion to distance travelled,
        keeping the first and last timestamps. Points that end up sharing a
        second with their predecessor are removed afterwards.
        """
        first, last = self.points.first, self.points.last
        if len(self.points) < 2 or not (first.has_timestamp() and last.has_timestamp()):
            return EditResult(Status.INVALID_ARGUMENT)
        t0 = first.timestamp.internal_value()
        span = last.timestamp.internal_value() - t0
        total = self.length(include_gaps=True).internal_value()
        if span < 0 or not total > 0:
            return EditResult(Status.INVALID_ARGUMENT)

        cum, count = 0.0, 0
        prev = first
        tp = self.points.next_of(first)
        while tp is not None and tp is not last:
            cum += distance(prev.coord, tp.coord)
            # truncate, so only a point with no distance left can reach the last second
            tp.timestamp = Time(math.floor(t0 + span * cum / total + 1e-6))
            count += 1
            prev, tp = tp, self.points.next_of(tp)

        self.remove_same_time_points()
        return EditResult(Status.OK, count)

    def anonymize_times(self) -> EditResult:
        """Shift all timestamps so the first valid one lands on 1901-01-01."""
        start = next((tp.timestamp.internal_value() for tp in self.points if tp.has_timestamp()), None)
        if start is None:
            return EditResult(Status.INVALID_ARGUMENT)
        offset = ANONYMIZE_EPOCH - start
        count = 0
        for tp in self.points:
            if tp.has_timestamp():
                tp.timestamp = Time(tp.timestamp.internal_value() + offset)
                count += 1
        return EditResult(Status.OK, count)

    def apply_dem_data(
        self,
        source: ElevationSource,
        only_missing: bool = False,
        interpolation: DemInterpolation = DemInterpolation.BEST,
        job: Optional[JobControl] = None,
    ) -> EditResult:
        """
        Overwrite altitudes with DEM values (or only fill the missing ones).

        Points the DEM has no value for keep what they had. With a JobControl
        this reports progress per point and stops early on request, keeping
        whatever was already applied.
        """
        if not self.points:
            return EditResult(Status.INVALID_ARGUMENT)
        job = job or JobControl()
        done = changed = 0
        for tp in self.points:
            if not (only_missing and tp.has_altitude()):
                alt = source.get_elevation(tp.coord, interpolation)
                if alt.is_valid():
                    tp.altitude = alt.convert_to_unit(AltitudeUnit.METRES)
                    changed += 1
            done += 1
            job.report(done)
            if job.should_stop():
                logger.info("DEM apply on %r stopped after %d of %d points", self.name, done, len(self.points))
                return EditResult(Status.CANCELLED, changed)
        return EditResult(Status.OK, changed)

    def apply_dem_data_last_trackpoint(
        self,
        source: ElevationSource,
        interpolation: DemInterpolation = DemInterpolation.BEST,
    ) -> EditResult:
        tp = self.points.last
        if tp is None:
            return EditResult(Status.INVALID_ARGUMENT)
        alt = source.get_elevation(tp.coord, interpolation)
        if not alt.is_valid():
            return EditResult(Status.NOTHING_TO_DO)
        tp.altitude = alt.convert_to_unit(AltitudeUnit.METRES)
        return EditResult(Status.OK, 1)

    def smooth_missing_elevation_data(self, flat: bool = False) -> EditResult:
        """
        Fill runs of missing altitude that have a known altitude on both
        sides: flat at the altitude before the run, or linearly by distance.
        """
        pts = list(self.points)
        filled = 0
        i = 0
        while i < len(pts):
            if pts[i].has_altitude():
                i += 1
                continue
            start = i
            while i < len(pts) and not pts[i].has_altitude():
                i += 1
            if start == 0 or i == len(pts):
                continue
            before, after = pts[start - 1], pts[i]
            a0 = before.altitude.internal_value()
            a1 = after.altitude.internal_value()
            steps = [0.0]
            for k in range(start, i + 1):
                steps.append(steps[-1] + distance(pts[k - 1].coord, pts[k].coord))
            run_len = steps[-1]
            for n, k in enumerate(range(start, i), start=1):
                if flat or run_len <= 0:
                    alt = a0
                else:
                    alt = a0 + (a1 - a0) * steps[n] / run_len
                pts[k].altitude = Altitude(alt)
                filled += 1
        return EditResult(Status.OK, filled)

    def to_routepoints(self) -> EditResult:
        """Strip timing and fix data and turn the track into a route."""
        count = 0
        for tp in self.points:
            tp.timestamp = Time.invalid()
            tp.speed = Speed.invalid()
            tp.course = math.nan
            tp.fix_mode = FixMode.NOT_SEEN
            tp.nsats = None
            tp.hdop = tp.vdop = tp.pdop = math.nan
            count += 1
        self.is_route = True
        self._recalculate()
        return EditResult(Status.OK, count)
