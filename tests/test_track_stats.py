import math

import pytest

from trackmax.measure.measurement import Distance


def test_four_point_scenario(four_point_track):
    trk = four_point_track

    assert len(trk) == 4
    assert trk.length().value == pytest.approx(300, rel=1e-6)
    assert trk.duration().value == 30
    assert trk.average_speed().value == pytest.approx(10, rel=1e-6)
    assert trk.max_speed().value == pytest.approx(10, rel=1e-6)
    assert trk.segment_count() == 1
    assert trk.first().newsegment


def test_gaps_are_skipped_unless_asked(make_track):
    trk = make_track(6, times=[0, 10, 20, 1000, 1010, 1020], segments=(3,))

    assert trk.segment_count() == 2
    assert trk.length().value == pytest.approx(400, rel=1e-6)
    assert trk.length(include_gaps=True).value == pytest.approx(500, rel=1e-6)
    assert trk.duration().value == 1020
    assert trk.duration(include_segment_gaps=False).value == 40
    assert trk.average_speed().value == pytest.approx(10, rel=1e-6)
    # the 980 s jump into the second segment is not a speed sample
    assert trk.max_speed().value == pytest.approx(10, rel=1e-6)


def test_moving_average_leaves_out_stops(make_track):
    trk = make_track(5, times=[0, 10, 20, 200, 210])

    assert trk.average_speed().value == pytest.approx(400 / 210, rel=1e-6)
    assert trk.moving_average_speed(60).value == pytest.approx(10, rel=1e-6)


def test_max_speed_point(make_track):
    trk = make_track(4, times=[0, 10, 15, 25])
    assert trk.max_speed().value == pytest.approx(20, rel=1e-6)
    assert trk.tp_by_max_speed() is trk.points[2]


def test_altitude_statistics(make_track):
    trk = make_track(5, alts=[100, 110, 105, None, 120])

    assert trk.min_altitude().value == 100
    assert trk.max_altitude().value == 120
    up, down = trk.elevation_gain_loss()
    assert up.value == pytest.approx(25)
    assert down.value == pytest.approx(-5)
    assert trk.tp_by_max_altitude() is trk.points[4]
    assert trk.tp_by_min_altitude() is trk.points[0]


def test_no_altitudes(make_track):
    trk = make_track(3)
    assert not trk.min_altitude().is_valid()
    up, down = trk.elevation_gain_loss()
    assert not up.is_valid() and not down.is_valid()


def test_duplicate_counts(make_track):
    trk = make_track(positions=[0, 1, 1, 2, 2, 2], times=[0, 10, 10, 20, 30, 30])
    assert trk.dup_point_count() == 3
    assert trk.same_time_point_count() == 2


def test_routes_have_no_time_statistics(make_track):
    trk = make_track(3, times=[0, 10, 20])
    trk.is_route = True
    assert not trk.duration().is_valid()
    assert not trk.average_speed().is_valid()
    assert not trk.max_speed().is_valid()
    assert trk.length().value == pytest.approx(200, rel=1e-6)


def test_empty_track(make_track):
    trk = make_track(0)
    assert not trk.length().is_valid()
    assert not trk.duration().is_valid()
    assert not trk.average_speed().is_valid()
    assert trk.first() is None
    assert not trk.bbox.is_valid()


def test_missing_timestamps_do_not_crash(make_track):
    trk = make_track(4, times=[0, None, 20, 30])
    assert trk.duration().value == 30
    assert trk.max_speed().value == pytest.approx(10, rel=1e-6)
    assert math.isnan(trk.speeds()[0])


def test_navigation(four_point_track):
    trk = four_point_track
    pts = list(trk)

    assert trk.tp_by_distance(150) is pts[1]
    assert trk.tp_by_distance(150, next_point=True) is pts[2]
    assert trk.tp_by_distance(10_000) is pts[3]
    assert trk.tp_by_distance(10_000, next_point=True) is None
    assert trk.tp_by_percentage_time(0.5) is pts[2]
    assert trk.tp_by_percentage_distance(0.0) is pts[0]

    assert trk.length_to(trk.handle_at(2)).value == pytest.approx(200, rel=1e-6)
    assert trk.distance_percent(trk.handle_at(2)) == pytest.approx(2 / 3, rel=1e-6)
    assert trk.time_percent(trk.handle_at(1)) == pytest.approx(1 / 3)
    assert trk.find(pts[3]) == 3
    assert trk.distances() == pytest.approx([100, 100, 100], rel=1e-6)
    assert trk.speeds() == pytest.approx([10, 10, 10], rel=1e-6)


def test_bbox(four_point_track):
    bbox = four_point_track.bbox
    assert bbox.is_valid()
    assert bbox.west == 0.0
    assert bbox.east == pytest.approx(four_point_track.last().coord.lon)
    assert bbox.contains(four_point_track.points[1].coord)


def test_position_queries_reject_stale_and_foreign_handles(four_point_track, make_track, make_point):
    trk = four_point_track
    stale = trk.handle_at(2)
    trk.add_trackpoint(make_point(4, 40))
    foreign = make_track(2).handle_at(1)

    for handle in (stale, foreign):
        assert not trk.length_to(handle).is_valid()
        assert isinstance(trk.length_to(handle), Distance)
        assert math.isnan(trk.distance_percent(handle))
        assert math.isnan(trk.time_percent(handle))
