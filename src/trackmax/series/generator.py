# trackmax/series/generator.py
"""
Derived-series generation.

All six domain pairs share one loop. A single walk over the track collects
cumulative distance, glitch-corrected relative time and altitude; a small
SeriesKind then says which of those is x, how y is derived from them, and
what the track must satisfy for the series to make sense.

Timestamp glitches (missing, or not later than the last good one) keep the
previous x and give NaN for anything that needs time to move forward.
Failed preconditions return a status and no series at all.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from trackmax.errors import Status
from trackmax.measure.units import DisplayUnits, Domain
from trackmax.series.series import DerivedSeries, SeriesResult
from trackmax.geo.coord import distance
from trackmax.track.track import Track
from trackmax.track.trackpoint import Trackpoint
from trackmax.util.logging import get_logger

logger = get_logger("series")


@dataclass
class _Walk:
    points: list[Trackpoint]
    dist: list[float]       # metres from the first point, gaps included
    time: list[float]       # seconds since the first point
    glitch: list[bool]
    alt: list[float]        # metres, NaN when missing
    duration: Optional[float]

    def __len__(self) -> int:
        return len(self.points)

    def has_altitude(self) -> bool:
        return any(not math.isnan(a) for a in self.alt)


def _walk(track: Track) -> _Walk:
    points, dist, time, glitch, alt = [], [], [], [], []
    first = track.first()
    t0 = first.timestamp.internal_value() if first is not None and first.has_timestamp() else None
    last_good = None
    cum = 0.0
    prev = None
    for tp in track.points:
        if prev is not None:
            cum += distance(prev.coord, tp.coord)
        points.append(tp)
        dist.append(cum)
        alt.append(tp.altitude.internal_value())

        ts = tp.timestamp.internal_value() if tp.has_timestamp() else None
        if t0 is not None and ts is not None and (last_good is None or ts > last_good):
            time.append(ts - t0)
            glitch.append(False)
            last_good = ts
        else:
            time.append(time[-1] if time else 0.0)
            glitch.append(True)
        prev = tp

    duration = None
    last = track.last()
    if t0 is not None and last.has_timestamp():
        duration = last.timestamp.internal_value() - t0

    n_glitch = sum(glitch[1:])
    if n_glitch:
        logger.debug("Track %r: %d timestamp glitches", track.name, n_glitch)
    return _Walk(points, dist, time, glitch, alt, duration)


# ---- y derivations -----------------------------

def _speeds(w: _Walk) -> list[float]:
    """Differentiate distance over time between good timestamps."""
    n = len(w)
    y = [math.nan] * n
    prev = 0
    for i in range(1, n):
        if w.glitch[i]:
            continue
        dt = w.time[i] - w.time[prev]
        if dt > 0:
            y[i] = (w.dist[i] - w.dist[prev]) / dt
        prev = i
    if n > 1 and not w.glitch[0]:
        y[0] = y[1]
    return y


def _gradients(w: _Walk) -> list[float]:
    """Forward difference in percent; the last value repeats the one before."""
    n = len(w)
    y = [math.nan] * n
    for i in range(n - 1):
        dd = w.dist[i + 1] - w.dist[i]
        if dd > 0:
            y[i] = 100.0 * (w.alt[i + 1] - w.alt[i]) / dd
    if n > 1:
        y[-1] = y[-2]
    return y


# ---- preconditions ------------------------------

def _check_distance_over_time(w: _Walk) -> Status:
    if len(w) < 1 or w.duration is None or w.duration < 0:
        return Status.INVALID_ARGUMENT
    return Status.OK


def _check_timed(w: _Walk) -> Status:
    if len(w) < 2 or w.duration is None or w.duration <= 0:
        return Status.INVALID_ARGUMENT
    return Status.OK


def _check_altitude_over_time(w: _Walk) -> Status:
    status = _check_timed(w)
    if status.ok and not w.has_altitude():
        return Status.INVALID_ARGUMENT
    return status


def _check_speed_over_distance(w: _Walk) -> Status:
    status = _check_timed(w)
    if status.ok and not w.dist[-1] > 0:
        return Status.INVALID_ARGUMENT
    return status


def _check_over_distance(w: _Walk) -> Status:
    if len(w) < 2 or not w.dist[-1] > 0 or not w.has_altitude():
        return Status.INVALID_ARGUMENT
    return Status.OK


@dataclass(frozen=True)
class SeriesKind:
    x_domain: Domain
    y_domain: Domain
    x_values: Callable[[_Walk], list[float]]
    y_values: Callable[[_Walk], list[float]]
    check: Callable[[_Walk], Status]


def _x_time(w: _Walk) -> list[float]:
    return list(w.time)


def _x_dist(w: _Walk) -> list[float]:
    return list(w.dist)


SERIES_KINDS: dict[tuple[Domain, Domain], SeriesKind] = {
    (Domain.TIME, Domain.DISTANCE): SeriesKind(
        Domain.TIME, Domain.DISTANCE, _x_time, _x_dist, _check_distance_over_time),
    (Domain.DISTANCE, Domain.ALTITUDE): SeriesKind(
        Domain.DISTANCE, Domain.ALTITUDE, _x_dist, lambda w: list(w.alt), _check_over_distance),
    (Domain.DISTANCE, Domain.GRADIENT): SeriesKind(
        Domain.DISTANCE, Domain.GRADIENT, _x_dist, _gradients, _check_over_distance),
    (Domain.TIME, Domain.SPEED): SeriesKind(
        Domain.TIME, Domain.SPEED, _x_time, _speeds, _check_timed),
    (Domain.TIME, Domain.ALTITUDE): SeriesKind(
        Domain.TIME, Domain.ALTITUDE, _x_time, lambda w: list(w.alt), _check_altitude_over_time),
    (Domain.DISTANCE, Domain.SPEED): SeriesKind(
        Domain.DISTANCE, Domain.SPEED, _x_dist, _speeds, _check_speed_over_distance),
}


def _to_display(values: list[float], unit) -> list[float]:
    return [unit.from_internal(v) for v in values]


def generate_series(
    track: Track,
    x_domain: Domain,
    y_domain: Domain,
    units: Optional[DisplayUnits] = None,
) -> SeriesResult:
    """y over x for `track`, converted to `units`."""
    kind = SERIES_KINDS.get((x_domain, y_domain))
    if kind is None or not track.points:
        return SeriesResult(Status.INVALID_ARGUMENT)
    units = units or DisplayUnits()

    w = _walk(track)
    status = kind.check(w)
    if not status.ok:
        logger.debug("Cannot generate %s over %s for %r", y_domain.value, x_domain.value, track.name)
        return SeriesResult(status)

    x_unit = units.unit_for(x_domain)
    y_unit = units.unit_for(y_domain)
    series = DerivedSeries(
        x_domain,
        y_domain,
        x_unit,
        y_unit,
        x=_to_display(kind.x_values(w), x_unit),
        y=_to_display(kind.y_values(w), y_unit),
        points=list(w.points),
    )
    return SeriesResult(Status.OK, series)


def distance_over_time(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.TIME, Domain.DISTANCE, units)


def altitude_over_distance(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.DISTANCE, Domain.ALTITUDE, units)


def gradient_over_distance(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.DISTANCE, Domain.GRADIENT, units)


def speed_over_time(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.TIME, Domain.SPEED, units)


def altitude_over_time(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.TIME, Domain.ALTITUDE, units)


def speed_over_distance(track: Track, units: Optional[DisplayUnits] = None) -> SeriesResult:
    return generate_series(track, Domain.DISTANCE, Domain.SPEED, units)


# ---- area-preserving profiles -------------------

def _altitude_profile(track: Track, m: int):
    """
    Average altitude of `m` equal distance chunks centred on 0, d, 2d, ...,
    length, with d = length / (m - 1).

    Altitude is linear between consecutive points, so each chunk's average
    is the exact area under that line inside the chunk divided by how much
    of the chunk is covered. Steps with a missing altitude at either end
    contribute nothing; a chunk with no coverage is NaN.
    """
    if m < 2:
        return Status.ALGORITHMIC_PRECONDITION, None
    if not track.points:
        return Status.INVALID_ARGUMENT, None
    w = _walk(track)
    status = _check_over_distance(w)
    if not status.ok:
        return status, None

    delta = w.dist[-1] / (m - 1)
    half = delta / 2.0
    area = [0.0] * m
    covered = [0.0] * m
    for i in range(len(w) - 1):
        a0, a1 = w.alt[i], w.alt[i + 1]
        s0, s1 = w.dist[i], w.dist[i + 1]
        if math.isnan(a0) or math.isnan(a1) or s1 <= s0:
            continue
        k = max(0, int(math.floor((s0 + half) / delta)))
        while k < m:
            lo = k * delta - half
            if lo >= s1:
                break
            a, b = max(lo, s0), min(lo + delta, s1)
            if b > a:
                mid = (a + b) / 2.0
                area[k] += (a0 + (a1 - a0) * (mid - s0) / (s1 - s0)) * (b - a)
                covered[k] += b - a
            k += 1

    xs, ys, pts = [], [], []
    j = 0
    for k in range(m):
        x = k * delta
        while j + 1 < len(w) and w.dist[j + 1] <= x:
            j += 1
        xs.append(x)
        ys.append(area[k] / covered[k] if covered[k] > 0 else math.nan)
        pts.append(w.points[j])
    return Status.OK, (delta, xs, ys, pts)


def altitude_over_distance_profile(
    track: Track, m: int, units: Optional[DisplayUnits] = None
) -> SeriesResult:
    status, profile = _altitude_profile(track, m)
    if not status.ok:
        return SeriesResult(status)
    units = units or DisplayUnits()
    _, xs, ys, pts = profile
    series = DerivedSeries(
        Domain.DISTANCE,
        Domain.ALTITUDE,
        units.distance,
        units.altitude,
        x=_to_display(xs, units.distance),
        y=_to_display(ys, units.altitude),
        points=pts,
    )
    return SeriesResult(Status.OK, series)


def gradient_over_distance_profile(
    track: Track, m: int, units: Optional[DisplayUnits] = None
) -> SeriesResult:
    """Gradient between neighbouring chunks of the altitude profile."""
    status, profile = _altitude_profile(track, m)
    if not status.ok:
        return SeriesResult(status)
    units = units or DisplayUnits()
    delta, xs, ys, pts = profile
    grads = [100.0 * (ys[k + 1] - ys[k]) / delta for k in range(m - 1)]
    grads.append(grads[-1])
    series = DerivedSeries(
        Domain.DISTANCE,
        Domain.GRADIENT,
        units.distance,
        units.gradient,
        x=_to_display(xs, units.distance),
        y=grads,
        points=pts,
    )
    return SeriesResult(Status.OK, series)
