import threading

import pytest

from trackmax.dem.elevation import CallableElevationSource, DemInterpolation
from trackmax.errors import Status
from trackmax.measure.measurement import Altitude
from trackmax.track.track import ANONYMIZE_EPOCH
from trackmax.util.jobs import JobControl


def _flags(trk):
    return [tp.newsegment for tp in trk]


def test_remove_dup_points_is_idempotent(make_track):
    trk = make_track(positions=[0, 1, 1, 2, 2, 2, 3])

    first = trk.remove_dup_points()
    assert first.status is Status.OK
    assert first.count == 3
    assert len(trk) == 4
    assert trk.dup_point_count() == 0

    second = trk.remove_dup_points()
    assert second.count == 0
    assert len(trk) == 4


def test_remove_dup_points_moves_segment_flag_forward(make_track):
    trk = make_track(positions=[0, 1, 1, 2], segments=(2,))
    survivor = trk.points[3]

    trk.remove_dup_points()

    assert len(trk) == 3
    assert survivor.newsegment
    assert _flags(trk) == [True, False, True]


def test_remove_same_time_points_is_idempotent(make_track):
    trk = make_track(5, times=[0, 10, 10, 20, 20])

    assert trk.remove_same_time_points().count == 2
    assert [tp.timestamp.value for tp in trk] == [0, 10, 20]
    assert trk.remove_same_time_points().count == 0
    assert len(trk) == 3


def test_dedup_on_empty_track(make_track):
    assert make_track(0).remove_dup_points().status is Status.INVALID_ARGUMENT


def test_reverse_keeps_segment_boundaries_between_the_same_points(make_track):
    trk = make_track(6, segments=(3,))
    old = list(trk)

    assert trk.reverse().status is Status.OK

    assert list(trk) == old[::-1]
    # boundary was between old[2] and old[3]; old[2] now follows old[3]
    assert _flags(trk) == [True, False, False, True, False, False]
    assert old[2].newsegment and not old[3].newsegment


def test_reverse_twice_restores_flags(make_track):
    trk = make_track(7, segments=(2, 5))
    old = list(trk)
    before = _flags(trk)

    trk.reverse()
    trk.reverse()

    assert list(trk) == old
    assert _flags(trk) == before


def test_reverse_flags_new_first_point(make_track):
    trk = make_track(3)
    last = trk.last()
    trk.reverse()
    assert trk.first() is last
    assert last.newsegment
    assert _flags(trk) == [True, False, False]


def test_merge_segments(make_track):
    trk = make_track(6, segments=(2, 4))
    assert trk.merge_segments().count == 2
    assert _flags(trk) == [True] + [False] * 5


def test_interpolate_times(make_track):
    trk = make_track(4, times=[0, None, None, 30])

    result = trk.interpolate_times()

    assert result.status is Status.OK
    assert result.count == 2
    assert [tp.timestamp.value for tp in trk] == [0, 10, 20, 30]


def test_interpolate_times_drops_resulting_same_time_points(make_track):
    trk = make_track(6, times=[0, None, None, None, None, 2])
    trk.interpolate_times()
    assert trk.same_time_point_count() == 0
    assert trk.first().timestamp.value == 0
    assert trk.last().timestamp.value == 2


def test_interpolate_times_keeps_the_real_endpoint(make_track):
    trk = make_track(5, times=[0, None, None, None, 2])
    pts = list(trk)
    length = trk.length(include_gaps=True).value

    trk.interpolate_times()

    assert trk.last() is pts[4]
    assert list(trk) == [pts[0], pts[2], pts[4]]
    assert [tp.timestamp.value for tp in trk] == [0, 1, 2]
    assert trk.length(include_gaps=True).value == pytest.approx(length)


def test_interpolate_times_needs_both_ends(make_track):
    trk = make_track(3, times=[0, None, None])
    assert trk.interpolate_times().status is Status.INVALID_ARGUMENT


def test_anonymize_times(make_track):
    trk = make_track(3, times=[None, 1_600_000_000, 1_600_000_060])

    result = trk.anonymize_times()

    assert result.count == 2
    assert trk.points[1].timestamp.value == ANONYMIZE_EPOCH
    assert trk.points[2].timestamp.value == ANONYMIZE_EPOCH + 60
    assert trk.points[1].timestamp.to_timestamp_string() == "1901-01-01T00:00:00Z"
    assert not trk.points[0].has_timestamp()


def test_apply_dem_data(make_track):
    trk = make_track(3, alts=[10, None, None])
    source = CallableElevationSource(lambda lat, lon: 42.0)

    result = trk.apply_dem_data(source)

    assert result.status is Status.OK
    assert result.count == 3
    assert [tp.altitude.value for tp in trk] == [42.0, 42.0, 42.0]


def test_apply_dem_data_only_missing(make_track):
    trk = make_track(3, alts=[10, None, None])
    source = CallableElevationSource(lambda lat, lon: 42.0)

    result = trk.apply_dem_data(source, only_missing=True)

    assert result.count == 2
    assert [tp.altitude.value for tp in trk] == [10.0, 42.0, 42.0]


def test_apply_dem_data_keeps_altitude_where_dem_has_none(make_track):
    trk = make_track(2, alts=[10, 20])
    source = CallableElevationSource(lambda lat, lon: None if lon > 0 else 5.0)

    assert trk.apply_dem_data(source).count == 1
    assert [tp.altitude.value for tp in trk] == [5.0, 20.0]


def test_apply_dem_data_can_be_cancelled(make_track):
    trk = make_track(5)
    stop = threading.Event()
    seen = []

    def progress(done):
        seen.append(done)
        if done == 2:
            stop.set()

    calls = []

    class Source:
        def get_elevation(self, coord, interpolation):
            calls.append(interpolation)
            return Altitude(7.0)

    result = trk.apply_dem_data(
        Source(), interpolation=DemInterpolation.SIMPLE, job=JobControl.from_event(stop, progress)
    )

    assert result.status is Status.CANCELLED
    assert result.count == 2
    assert seen == [1, 2]
    assert calls == [DemInterpolation.SIMPLE] * 2
    # partial work is kept
    assert [tp.has_altitude() for tp in trk] == [True, True, False, False, False]


def test_apply_dem_data_last_trackpoint(make_track):
    trk = make_track(3)
    assert trk.apply_dem_data_last_trackpoint(CallableElevationSource(lambda lat, lon: 99.0)).ok
    assert trk.last().altitude.value == 99.0
    assert not trk.first().has_altitude()


def test_dem_source_rejects_absurd_altitudes(make_point):
    source = CallableElevationSource(lambda lat, lon: 30000.0)
    assert not source.get_elevation(make_point(0).coord, DemInterpolation.NONE).is_valid()


def test_delete_trackpoint_passes_segment_flag_on(make_track):
    trk = make_track(5, segments=(2,))
    successor = trk.points[3]

    result = trk.delete_trackpoint(trk.handle_at(2))

    assert result.ok
    assert len(trk) == 4
    assert successor.newsegment


def test_stale_handle_is_rejected(make_track, make_point):
    trk = make_track(3)
    h = trk.handle_at(1)
    trk.add_trackpoint(make_point(3))

    assert trk.delete_trackpoint(h).status is Status.INVALID_ARGUMENT
    assert len(trk) == 4


def test_insert_interpolated(make_track):
    trk = make_track(3, times=[0, 10, 20], alts=[100, 200, 300])

    assert trk.insert_interpolated(trk.handle_at(0), before=False).ok

    assert len(trk) == 4
    mid = trk.points[1]
    assert mid.timestamp.value == 5
    assert mid.altitude.value == pytest.approx(150)
    assert mid.coord.lon == pytest.approx(trk.points[2].coord.lon / 2)


def test_insert_interpolated_before_segment_start(make_track):
    trk = make_track(4, times=[0, 10, 20, 30], segments=(2,))
    old = trk.points[2]

    trk.insert_interpolated(trk.handle_at(2), before=True)

    assert trk.points[2].newsegment
    assert not old.newsegment
    assert trk.insert_interpolated(trk.handle_at(0), before=True).status is Status.INVALID_ARGUMENT


def test_smooth_missing_elevation_linear(make_track):
    trk = make_track(4, alts=[100, None, None, 130])
    assert trk.smooth_missing_elevation_data().count == 2
    assert [tp.altitude.value for tp in trk] == pytest.approx([100, 110, 120, 130], rel=1e-6)


def test_smooth_missing_elevation_flat(make_track):
    trk = make_track(4, alts=[100, None, None, 130])
    trk.smooth_missing_elevation_data(flat=True)
    assert [tp.altitude.value for tp in trk] == [100, 100, 100, 130]


def test_smooth_leaves_open_ended_runs(make_track):
    trk = make_track(4, alts=[None, 100, 110, None])
    assert trk.smooth_missing_elevation_data().count == 0


def test_to_routepoints(make_track):
    trk = make_track(3, times=[0, 10, 20])

    assert trk.to_routepoints().count == 3

    assert trk.is_route
    assert not any(tp.has_timestamp() for tp in trk)
    assert not trk.max_speed().is_valid()


def test_selection_is_dropped_by_structural_edits(make_track, make_point):
    trk = make_track(3)
    trk.select(trk.points[1])
    assert trk.selected_point() is trk.points[1]

    trk.add_trackpoint(make_point(3))
    assert trk.selected_point() is None


def test_copy_properties(make_track):
    src = make_track(2, name="Morning ride")
    src.color = "#ff0000"
    src.comment = "windy"
    dst = src.new_like("copy")
    assert dst.name == "copy"
    assert dst.color == "#ff0000"
    assert dst.comment == "windy"
    assert len(dst) == 0
