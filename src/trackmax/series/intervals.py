# trackmax/series/intervals.py
"""
"Nice" gridline spacing for plotted series.

Each domain has an ascending table of round numbers. Given an observed
range and a gridline count n, the chosen interval is the smallest table
entry that is at least (max - min) / n, so n gridlines always cover the
range. Past the end of the table the last entry is used.

Time values are seconds; the other tables are in whatever display unit the
series is in.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from trackmax.measure.units import Domain

ALTITUDE_INTERVALS = (
    1, 2, 4, 5, 10, 15, 20, 25, 40, 50, 75, 100, 150, 200, 250, 375, 500,
    750, 1000, 2000, 5000, 10000, 100000,
)

GRADIENT_INTERVALS = (
    1, 2, 3, 4, 5, 8, 10, 12, 15, 20, 25, 30, 35, 40, 45, 50, 75, 100, 150,
    200, 250, 375, 500, 750, 1000, 10000, 100000,
)

SPEED_INTERVALS = (
    1, 2, 3, 4, 5, 8, 10, 15, 20, 25, 40, 50, 75, 100, 150, 200, 250, 375,
    500, 750, 1000, 10000,
)

DISTANCE_INTERVALS = (
    0.1, 0.2, 0.5, 1, 2, 3, 4, 5, 8, 10, 15, 20, 25, 40, 50, 75, 100, 150,
    200, 250, 375, 500, 750, 1000, 10000,
)

TIME_INTERVALS = (
    60,        # 1 minute
    120,       # 2 minutes
    300,       # 5 minutes
    900,       # 15 minutes
    1800,      # 30 minutes
    3600,      # 1 hour
    10800,     # 3 hours
    21600,     # 6 hours
    43200,     # 12 hours
    86400,     # 1 day
    172800,    # 2 days
    604800,    # 1 week
    1209600,   # 2 weeks
    2419200,   # 4 weeks
)


class GraphIntervals:
    def __init__(self, values: Sequence[float]) -> None:
        self.values = tuple(values)

    @classmethod
    def for_domain(cls, domain: Domain) -> "GraphIntervals":
        return cls(_TABLES[domain])

    def get_interval_index(self, min_value: float, max_value: float, n: int) -> Optional[int]:
        if n <= 0 or math.isnan(min_value) or math.isnan(max_value):
            return None
        wanted = abs(max_value - min_value) / n
        for i, v in enumerate(self.values):
            if v >= wanted:
                return i
        return len(self.values) - 1

    def get_interval_value(self, index: int) -> float:
        return self.values[index]

    def get_interval(self, min_value: float, max_value: float, n: int) -> Optional[float]:
        index = self.get_interval_index(min_value, max_value, n)
        return None if index is None else self.values[index]


_TABLES = {
    Domain.ALTITUDE: ALTITUDE_INTERVALS,
    Domain.GRADIENT: GRADIENT_INTERVALS,
    Domain.SPEED: SPEED_INTERVALS,
    Domain.DISTANCE: DISTANCE_INTERVALS,
    Domain.TIME: TIME_INTERVALS,
}
