# trackmax/track/points.py
"""
Doubly-linked trackpoint sequence and validated handles into it.

Moving a contiguous run of points from one list to another is a constant
amount of relinking; the points themselves are never copied.

Every structural change (insert, remove, reverse, splice) bumps the list's
`revision`. A TrackpointHandle remembers the revision it was taken at and is
only honoured while the list still has that revision, so a position held
across an edit cannot silently point somewhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from trackmax.track.trackpoint import Trackpoint


@dataclass(frozen=True, eq=False)
class TrackpointHandle:
    points: "TrackpointList"
    point: Trackpoint
    revision: int

    def is_valid(self) -> bool:
        return self.points.revision == self.revision

    def get(self) -> Optional[Trackpoint]:
        return self.point if self.is_valid() else None


class TrackpointList:
    def __init__(self, points: Iterable[Trackpoint] = ()) -> None:
        self._head: Optional[Trackpoint] = None
        self._tail: Optional[Trackpoint] = None
        self._len = 0
        self.revision = 0
        for tp in points:
            self.append(tp)

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[Trackpoint]:
        tp = self._head
        while tp is not None:
            nxt = tp._next
            yield tp
            tp = nxt

    def __reversed__(self) -> Iterator[Trackpoint]:
        tp = self._tail
        while tp is not None:
            prv = tp._prev
            yield tp
            tp = prv

    def __getitem__(self, index: int) -> Trackpoint:
        if index < 0:
            index += self._len
        if not 0 <= index < self._len:
            raise IndexError("trackpoint index out of range")
        if index <= self._len // 2:
            it = iter(self)
        else:
            it = reversed(self)
            index = self._len - 1 - index
        for _ in range(index):
            next(it)
        return next(it)

    @property
    def first(self) -> Optional[Trackpoint]:
        return self._head

    @property
    def last(self) -> Optional[Trackpoint]:
        return self._tail

    @staticmethod
    def next_of(tp: Trackpoint) -> Optional[Trackpoint]:
        return tp._next

    @staticmethod
    def prev_of(tp: Trackpoint) -> Optional[Trackpoint]:
        return tp._prev

    def index_of(self, tp: Trackpoint) -> Optional[int]:
        for i, cur in enumerate(self):
            if cur is tp:
                return i
        return None

    def __contains__(self, tp: object) -> bool:
        return any(cur is tp for cur in self)

    # ---- handles --------------------------------

    def handle(self, tp: Trackpoint) -> TrackpointHandle:
        return TrackpointHandle(self, tp, self.revision)

    def handle_at(self, index: int) -> TrackpointHandle:
        return self.handle(self[index])

    def resolve(self, handle: TrackpointHandle) -> Optional[Trackpoint]:
        """The handle's point, or None when it is stale or from another list."""
        if handle.points is not self:
            return None
        return handle.get()

    # ---- structure ------------------------------

    def _touch(self) -> None:
        self.revision += 1

    def append(self, tp: Trackpoint) -> None:
        tp._prev, tp._next = self._tail, None
        if self._tail is None:
            self._head = tp
        else:
            self._tail._next = tp
        self._tail = tp
        self._len += 1
        self._touch()

    def insert_before(self, ref: Trackpoint, tp: Trackpoint) -> None:
        prev = ref._prev
        tp._prev, tp._next = prev, ref
        ref._prev = tp
        if prev is None:
            self._head = tp
        else:
            prev._next = tp
        self._len += 1
        self._touch()

    def insert_after(self, ref: Trackpoint, tp: Trackpoint) -> None:
        nxt = ref._next
        if nxt is None:
            self.append(tp)
            return
        self.insert_before(nxt, tp)

    def remove(self, tp: Trackpoint) -> Optional[Trackpoint]:
        """Unlink `tp` and return its successor."""
        prev, nxt = tp._prev, tp._next
        if prev is None:
            self._head = nxt
        else:
            prev._next = nxt
        if nxt is None:
            self._tail = prev
        else:
            nxt._prev = prev
        tp._prev = tp._next = None
        self._len -= 1
        self._touch()
        return nxt

    def splice_out(self, first: Trackpoint, last: Trackpoint, count: int) -> "TrackpointList":
        """
        Move the run `first`..`last` (inclusive, `count` points long) into a
        new list. The caller vouches that the run is contiguous and in order.
        """
        before, after = first._prev, last._next
        if before is None:
            self._head = after
        else:
            before._next = after
        if after is None:
            self._tail = before
        else:
            after._prev = before
        first._prev = None
        last._next = None
        self._len -= count
        self._touch()

        out = TrackpointList()
        out._head, out._tail, out._len = first, last, count
        return out

    def reverse(self) -> None:
        tp = self._head
        while tp is not None:
            nxt = tp._next
            tp._prev, tp._next = tp._next, tp._prev
            tp = nxt
        self._head, self._tail = self._tail, self._head
        self._touch()
