# trackmax/track/split.py
"""
Track splitting.

A split is described by cut handles: each one names the point that opens a
new piece. The start and the end of the track are implicit boundaries. Every
piece after the first is moved (not copied) into a new Track carrying the
original's metadata; the original keeps the first piece.

The cut producers below build handle lists from a rule. Anything that can
produce handles can call split_track() directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from trackmax.errors import Status
from trackmax.track.points import TrackpointHandle
from trackmax.track.track import Track
from trackmax.util.logging import get_logger

logger = get_logger("split")


@dataclass
class SplitResult:
    status: Status
    new_tracks: list[Track] = field(default_factory=list)
    all_tracks: list[Track] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status.ok


CutsOrStatus = Union[list[TrackpointHandle], Status]


# ---- cut producers ------------------------------

def cuts_at_point(track: Track, handle: TrackpointHandle) -> CutsOrStatus:
    """One cut right after the handle's point, which must be interior."""
    tp = track.resolve(handle)
    if tp is None:
        return Status.INVALID_ARGUMENT
    if tp is track.first() or tp is track.last():
        return Status.ALGORITHMIC_PRECONDITION
    return [track.points.handle(track.points.next_of(tp))]


def cuts_by_time_gap(track: Track, gap_seconds: float) -> CutsOrStatus:
    """Cut before every point more than `gap_seconds` after its predecessor."""
    cuts = []
    prev = None
    for tp in track.points:
        if prev is not None and prev.has_timestamp() and tp.has_timestamp():
            dt = tp.timestamp.internal_value() - prev.timestamp.internal_value()
            if dt < 0:
                logger.warning("Track %r has out-of-order timestamps; not splitting", track.name)
                return Status.INVALID_ARGUMENT
            if dt > gap_seconds:
                cuts.append(track.points.handle(tp))
        prev = tp
    return cuts


def cuts_by_point_count(track: Track, count: int) -> CutsOrStatus:
    """Cut every `count` points."""
    if count < 1:
        return Status.INVALID_ARGUMENT
    return [
        track.points.handle(tp)
        for i, tp in enumerate(track.points)
        if i > 0 and i % count == 0
    ]


def cuts_by_segments(track: Track) -> CutsOrStatus:
    """Cut at every segment start."""
    first = track.first()
    if first is None:
        return Status.INVALID_ARGUMENT
    if not first.newsegment:
        return Status.ALGORITHMIC_PRECONDITION
    return [track.points.handle(tp) for tp in track.points if tp.newsegment and tp is not first]


# ---- the split itself ---------------------------

def split_track(track: Track, cuts: list[TrackpointHandle]) -> SplitResult:
    """
    Move the pieces between consecutive cuts into new tracks.

    All handles are checked before anything moves: each must still be
    valid for this track, none may name the first point, and they must be
    in track order.
    """
    if not track.points:
        return SplitResult(Status.INVALID_ARGUMENT)
    if not cuts:
        return SplitResult(Status.NOTHING_TO_DO, all_tracks=[track])

    resolved = [track.resolve(h) for h in cuts]
    wanted = {}
    for tp in resolved:
        if tp is None:
            logger.warning("Stale or foreign cut handle for track %r", track.name)
            return SplitResult(Status.INVALID_ARGUMENT)
        wanted[id(tp)] = tp

    # (index, point) of each cut, in track order
    starts = []
    for i, tp in enumerate(track.points):
        if id(tp) in wanted:
            starts.append((i, tp))
    if starts[0][0] == 0:
        return SplitResult(Status.ALGORITHMIC_PRECONDITION)
    if resolved != [tp for _, tp in starts]:
        return SplitResult(Status.INVALID_ARGUMENT)

    n = len(track.points)
    bounds = starts + [(n, None)]
    pieces = []
    for (i, first), (j, _) in zip(bounds, bounds[1:]):
        last = track.points[j - 1] if j < n else track.last()
        pieces.append((first, last, j - i))

    new_tracks = []
    for k, (first, last, count) in enumerate(pieces, start=1):
        moved = track.points.splice_out(first, last, count)
        new = track.new_like(f"{track.name} #{k}")
        new.points = moved
        first.newsegment = True
        new._recalculate()
        new_tracks.append(new)

    track._recalculate()
    logger.info("Split %r into %d tracks", track.name, len(new_tracks) + 1)
    return SplitResult(Status.OK, new_tracks, [track] + new_tracks)


def _split_with(track: Track, cuts: CutsOrStatus) -> SplitResult:
    if isinstance(cuts, Status):
        return SplitResult(cuts)
    return split_track(track, cuts)


def split_at_point(track: Track, handle: TrackpointHandle) -> SplitResult:
    return _split_with(track, cuts_at_point(track, handle))


def split_by_time_gap(track: Track, gap_seconds: float) -> SplitResult:
    return _split_with(track, cuts_by_time_gap(track, gap_seconds))


def split_by_point_count(track: Track, count: int) -> SplitResult:
    return _split_with(track, cuts_by_point_count(track, count))


def split_by_segments(track: Track) -> SplitResult:
    return _split_with(track, cuts_by_segments(track))


def split_at(track: Track, tp) -> SplitResult:
    """Convenience for callers holding a raw point instead of a handle."""
    handle = track.handle(tp)
    if handle is None:
        return SplitResult(Status.INVALID_ARGUMENT)
    return split_at_point(track, handle)
