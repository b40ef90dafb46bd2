import logging

import pytest

from trackmax.errors import Status
from trackmax.track.split import (
    cuts_by_segments,
    split_at,
    split_at_point,
    split_by_point_count,
    split_by_segments,
    split_by_time_gap,
    split_track,
)


def _sizes(result):
    return [len(t) for t in result.all_tracks]


@pytest.mark.parametrize("k", [1, 3, 8])
def test_split_at_interior_point(make_track, k):
    trk = make_track(10)
    pts = list(trk)

    result = split_at_point(trk, trk.handle_at(k))

    assert result.status is Status.OK
    assert _sizes(result) == [k + 1, 10 - k - 1]
    assert result.all_tracks[0] is trk
    assert list(trk) == pts[: k + 1]
    new = result.new_tracks[0]
    assert list(new) == pts[k + 1:]
    assert new.first().newsegment
    assert new.name == "test #1"


@pytest.mark.parametrize("index", [0, 9])
def test_split_at_end_points_is_rejected(make_track, index):
    trk = make_track(10)
    result = split_at_point(trk, trk.handle_at(index))
    assert result.status is Status.ALGORITHMIC_PRECONDITION
    assert len(trk) == 10


def test_split_by_segments(make_track):
    trk = make_track(10, segments=(5,))
    fifth = trk.points[5]

    result = split_by_segments(trk)

    assert result.ok
    assert len(result.all_tracks) == 2
    assert _sizes(result) == [5, 5]
    assert result.new_tracks[0].first() is fifth
    for t in result.all_tracks:
        assert t.first().newsegment
        assert t.segment_count() == 1


def test_split_by_segments_without_boundaries_is_a_no_op(make_track):
    trk = make_track(10)
    result = split_by_segments(trk)
    assert result.status is Status.NOTHING_TO_DO
    assert result.new_tracks == []
    assert len(trk) == 10


def test_segments_need_a_flagged_first_point(make_track):
    trk = make_track(4, segments=(2,))
    trk.first().newsegment = False
    assert cuts_by_segments(trk) is Status.ALGORITHMIC_PRECONDITION


def test_split_by_time_gap(make_track):
    trk = make_track(6, times=[0, 10, 20, 5000, 5010, 9000])

    result = split_by_time_gap(trk, 3600)

    assert result.ok
    assert _sizes(result) == [3, 2, 1]
    assert [t.name for t in result.new_tracks] == ["test #1", "test #2"]


def test_split_by_time_gap_refuses_out_of_order_times(make_track, caplog):
    trk = make_track(4, times=[0, 10, 5, 20])
    with caplog.at_level(logging.WARNING, logger="trackmax"):
        result = split_by_time_gap(trk, 1)
    assert result.status is Status.INVALID_ARGUMENT
    assert "out-of-order" in caplog.text
    assert len(trk) == 4


def test_split_by_point_count(make_track):
    trk = make_track(10)
    assert _sizes(split_by_point_count(trk, 4)) == [4, 4, 2]


def test_split_by_point_count_rejects_zero(make_track):
    assert split_by_point_count(make_track(10), 0).status is Status.INVALID_ARGUMENT


def test_stale_cut_handles_are_rejected(make_track, make_point):
    trk = make_track(10)
    h = trk.handle_at(4)
    trk.add_trackpoint(make_point(10))

    assert split_track(trk, [h]).status is Status.INVALID_ARGUMENT
    assert len(trk) == 11


def test_cuts_must_be_in_track_order(make_track):
    trk = make_track(10)
    cuts = [trk.handle_at(6), trk.handle_at(3)]
    assert split_track(trk, cuts).status is Status.INVALID_ARGUMENT
    assert len(trk) == 10


def test_metadata_and_caches_follow_the_split(make_track):
    trk = make_track(10, times=list(range(0, 100, 10)))
    trk.color = "#00ff00"
    trk.comment = "club ride"
    east_before = trk.bbox.east

    result = split_at(trk, trk.points[4])

    new = result.new_tracks[0]
    assert new.color == "#00ff00"
    assert new.comment == "club ride"
    assert trk.bbox.east < east_before
    assert new.bbox.east == pytest.approx(east_before)
    assert new.bbox.west == pytest.approx(new.first().coord.lon)
    assert new.max_speed().is_valid()
