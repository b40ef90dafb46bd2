# trackmax/series/series.py
"""
Derived (x, y) series and block-average compression.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from trackmax.errors import Status
from trackmax.measure.units import Domain
from trackmax.track.trackpoint import Trackpoint


def _nan_min_max(values: list[float]) -> tuple[float, float]:
    finite = [v for v in values if not math.isnan(v)]
    if not finite:
        return math.nan, math.nan
    return min(finite), max(finite)


@dataclass
class DerivedSeries:
    """
    Parallel x / y arrays in display units, plus the trackpoint each
    sample came from.

    A snapshot: editing the source track does not update it. NaN in `y`
    marks a gap (missing altitude, a timestamp glitch) and is ignored by
    the cached min/max.
    """

    x_domain: Domain
    y_domain: Domain
    x_unit: Any
    y_unit: Any
    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)
    points: list[Trackpoint] = field(default_factory=list, repr=False)
    # For compressed series: how many source samples went into each output one
    counts: list[int] = field(default_factory=list, repr=False)

    x_min: float = field(init=False, default=math.nan)
    x_max: float = field(init=False, default=math.nan)
    y_min: float = field(init=False, default=math.nan)
    y_max: float = field(init=False, default=math.nan)

    def __post_init__(self) -> None:
        self.update_min_max()

    def __len__(self) -> int:
        return len(self.x)

    def update_min_max(self) -> None:
        self.x_min, self.x_max = _nan_min_max(self.x)
        self.y_min, self.y_max = _nan_min_max(self.y)

    def point_near_x(self, x: float) -> Optional[Trackpoint]:
        """Back-reference of the sample whose x is closest to `x`."""
        best, best_d = None, math.inf
        for xi, tp in zip(self.x, self.points):
            d = abs(xi - x)
            if d < best_d:
                best, best_d = tp, d
        return best

    def compress(self, m: int) -> "SeriesResult":
        """
        Block-average into exactly `m` samples.

        The N inputs are cut into `m` consecutive windows of floor(N/m) or
        ceil(N/m) samples. A window takes the ceiling whenever stopping at
        the floor would leave it short of its ideal boundary (i+1)*N/m, so
        the window sizes add up to N exactly. Each output is the mean x and
        mean non-NaN y of its window, tagged with the window's first point.
        """
        n = len(self.x)
        if m <= 0 or m > n:
            return SeriesResult(Status.ALGORITHMIC_PRECONDITION)

        floor = n // m
        out = DerivedSeries(self.x_domain, self.y_domain, self.x_unit, self.y_unit)
        consumed = 0
        for i in range(m):
            size = floor + 1 if (i + 1) * n > m * (consumed + floor) else floor
            size = min(size, n - consumed)
            xs = self.x[consumed:consumed + size]
            ys = [v for v in self.y[consumed:consumed + size] if not math.isnan(v)]
            out.x.append(sum(xs) / len(xs))
            out.y.append(sum(ys) / len(ys) if ys else math.nan)
            out.points.append(self.points[consumed])
            out.counts.append(size)
            consumed += size

        out.update_min_max()
        return SeriesResult(Status.OK, out)


@dataclass
class SeriesResult:
    status: Status
    series: Optional[DerivedSeries] = None

    @property
    def ok(self) -> bool:
        return self.status.ok
