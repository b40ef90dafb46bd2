import math

import pytest

from trackmax.measure.measurement import Altitude, Time
from trackmax.track.track import Track
from trackmax.track.trackpoint import Trackpoint

# haversine's mean Earth radius; STEP_DEG of longitude on the equator is 100 m
EARTH_RADIUS_M = 6371008.8
STEP_DEG = math.degrees(100.0 / EARTH_RADIUS_M)


@pytest.fixture
def make_point():
    def _make(i, t=None, alt=None):
        return Trackpoint.at(
            0.0,
            i * STEP_DEG,
            timestamp=Time(t) if t is not None else Time.invalid(),
            altitude=Altitude(alt) if alt is not None else Altitude.invalid(),
        )
    return _make


@pytest.fixture
def make_track(make_point):
    """
    Build a track along the equator, consecutive points 100 m apart.

    `positions` overrides the default 0..n-1 step indices (repeat an index
    for a duplicate position); `segments` lists indices that start a segment.
    """
    def _make(n=None, times=None, alts=None, segments=(), positions=None, name="test"):
        positions = list(positions) if positions is not None else list(range(n))
        times = times or [None] * len(positions)
        alts = alts or [None] * len(positions)
        pts = [make_point(p, t, a) for p, t, a in zip(positions, times, alts)]
        for i in segments:
            pts[i].newsegment = True
        return Track(name, pts)
    return _make


@pytest.fixture
def four_point_track(make_track):
    return make_track(4, times=[0, 10, 20, 30])
