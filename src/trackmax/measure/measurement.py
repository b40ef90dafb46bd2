# trackmax/measure/measurement.py
"""
Unit-tagged scalar values.

A Measurement is a number, the unit it is expressed in, and a validity flag.
Arithmetic between two measurements of the same domain only works when their
units match. A mismatch is logged and yields an invalid result; an invalid
operand yields an invalid result quietly. Nothing in here raises on bad data,
so a long chain of calculations simply ends up invalid.

Time is special: in seconds its value is an int (POSIX seconds for
timestamps, plain seconds for durations). Converted to minutes, hours or
days it becomes a float.
"""

from __future__ import annotations

import datetime
import math
import operator
from typing import Any, Optional

from trackmax.errors import Status
from trackmax.measure.units import (
    AltitudeUnit,
    DistanceUnit,
    Domain,
    GradientUnit,
    SpeedUnit,
    TimeUnit,
)
from trackmax.util.logging import get_logger

logger = get_logger("measure")

INVALID_TEXT = "--"
_EPSILON = 1e-7


class Measurement:
    domain: Domain
    unit_type: Any
    precision: int = 2

    __slots__ = ("value", "unit", "valid")

    def __init__(self, value: Optional[float] = None, unit=None) -> None:
        if unit is None:
            unit = self.unit_type.internal_unit()
        elif not isinstance(unit, self.unit_type):
            raise TypeError(f"{type(self).__name__} cannot use unit {unit!r}")
        self.unit = unit
        self.value, self.valid = self._normalize(value, unit)

    @classmethod
    def _normalize(cls, value, unit) -> tuple[Any, bool]:
        if value is None:
            return math.nan, False
        v = float(value)
        return v, not math.isnan(v)

    @classmethod
    def invalid(cls, unit=None):
        return cls(None, unit)

    def _new(self, value):
        return type(self)(value, self.unit)

    def is_valid(self) -> bool:
        return self.valid

    # ---- units ----------------------------------

    def convert_to_unit(self, unit):
        """Return a copy of this measurement expressed in `unit`."""
        if not self.valid:
            return type(self).invalid(unit)
        return type(self)(unit.from_internal(self.unit.to_internal(self.value)), unit)

    def convert_to_unit_in_place(self, unit) -> Status:
        if not self.valid:
            self.unit = unit
            return Status.INVALID_ARGUMENT
        converted = self.convert_to_unit(unit)
        self.value, self.valid, self.unit = converted.value, converted.valid, unit
        return Status.OK

    def internal_value(self) -> float:
        """Value in the domain's internal unit (NaN when invalid)."""
        if not self.valid:
            return math.nan
        return self.unit.to_internal(self.value)

    def _units_match(self, other: "Measurement", op: str) -> bool:
        if self.unit is not other.unit:
            logger.error(
                "Unit mismatch in %s %s: %s vs %s",
                type(self).__name__, op, self.unit.symbol, other.unit.symbol,
            )
            return False
        return True

    # ---- arithmetic -----------------------------

    def _combine(self, other, fn, op: str):
        if not isinstance(other, type(self)):
            return NotImplemented
        if not self._units_match(other, op):
            return type(self).invalid(self.unit)
        if not (self.valid and other.valid):
            logger.debug("%s %s with invalid operand", type(self).__name__, op)
            return type(self).invalid(self.unit)
        return self._new(fn(self.value, other.value))

    def __add__(self, other):
        return self._combine(other, operator.add, "add")

    def __sub__(self, other):
        return self._combine(other, operator.sub, "sub")

    def __mul__(self, factor):
        if isinstance(factor, Measurement):
            return NotImplemented
        if not self.valid:
            return type(self).invalid(self.unit)
        return self._new(self.value * factor)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, Measurement):
            if not isinstance(other, type(self)):
                return NotImplemented
            # Same domain: dimensionless ratio
            if not self._units_match(other, "div"):
                return math.nan
            if not (self.valid and other.valid) or other.value == 0:
                return math.nan
            return self.value / other.value
        if not self.valid or other == 0:
            return type(self).invalid(self.unit)
        return self._new(self.value / other)

    def __neg__(self):
        if not self.valid:
            return type(self).invalid(self.unit)
        return self._new(-self.value)

    def __abs__(self):
        if not self.valid:
            return type(self).invalid(self.unit)
        return self._new(abs(self.value))

    # ---- comparison -----------------------------

    def _compare(self, other, fn, op: str):
        if not isinstance(other, type(self)):
            return NotImplemented
        if not self._units_match(other, op):
            return False
        if not (self.valid and other.valid):
            return False
        return fn(self.value, other.value)

    def __eq__(self, other):
        return self._compare(other, operator.eq, "==")

    def __ne__(self, other):
        result = self._compare(other, operator.eq, "!=")
        return result if result is NotImplemented else not result

    def __lt__(self, other):
        return self._compare(other, operator.lt, "<")

    def __le__(self, other):
        return self._compare(other, operator.le, "<=")

    def __gt__(self, other):
        return self._compare(other, operator.gt, ">")

    def __ge__(self, other):
        return self._compare(other, operator.ge, ">=")

    __hash__ = None  # type: ignore[assignment]

    def is_zero(self) -> bool:
        return self.valid and abs(self.value) < _EPSILON

    def is_positive(self) -> bool:
        return self.valid and self.value >= _EPSILON

    def is_negative(self) -> bool:
        return self.valid and self.value <= -_EPSILON

    # ---- text -----------------------------------

    def value_to_string(self, precision: Optional[int] = None) -> str:
        if not self.valid:
            return INVALID_TEXT
        p = self.precision if precision is None else precision
        return f"{self.value:.{p}f}"

    def to_string(self, precision: Optional[int] = None) -> str:
        if not self.valid:
            return INVALID_TEXT
        return f"{self.value_to_string(precision)} {self.unit.symbol}"

    def to_nice_string(self) -> str:
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r}, {self.unit})"


class Distance(Measurement):
    """Never negative; a negative value is invalid."""

    domain = Domain.DISTANCE
    unit_type = DistanceUnit
    __slots__ = ()

    @classmethod
    def _normalize(cls, value, unit):
        v, valid = super()._normalize(value, unit)
        return v, valid and v >= 0

    def to_nice_string(self) -> str:
        """Small distances in m/yd even when km/miles are configured, large ones the other way."""
        if not self.valid:
            return INVALID_TEXT
        if self.unit in (DistanceUnit.KILOMETRES, DistanceUnit.NAUTICAL_MILES) and self.value < 1.0:
            return self.convert_to_unit(DistanceUnit.METRES).to_string(precision=0)
        if self.unit is DistanceUnit.MILES and self.value < 1.0:
            return self.convert_to_unit(DistanceUnit.YARDS).to_string(precision=0)
        if self.unit is DistanceUnit.METRES and self.value >= 1000.0:
            return self.convert_to_unit(DistanceUnit.KILOMETRES).to_string()
        if self.unit is DistanceUnit.YARDS and self.value >= 1760.0:
            return self.convert_to_unit(DistanceUnit.MILES).to_string()
        return self.to_string()


class Altitude(Measurement):
    domain = Domain.ALTITUDE
    unit_type = AltitudeUnit
    __slots__ = ()


class Speed(Measurement):
    domain = Domain.SPEED
    unit_type = SpeedUnit
    __slots__ = ()

    @classmethod
    def from_distance_time(cls, distance: Distance, duration: "Time") -> "Speed":
        """Speed in m/s; invalid unless both are valid and the duration is positive."""
        metres = distance.internal_value()
        seconds = duration.internal_value()
        if math.isnan(metres) or math.isnan(seconds) or seconds <= 0:
            return cls.invalid()
        return cls(metres / seconds)


class Gradient(Measurement):
    domain = Domain.GRADIENT
    unit_type = GradientUnit
    __slots__ = ()

    def to_string(self, precision: Optional[int] = None) -> str:
        if not self.valid:
            return INVALID_TEXT
        return f"{self.value_to_string(precision)}{self.unit.symbol}"


class Time(Measurement):
    """
    Timestamps (POSIX seconds, UTC) and durations.

    Whole seconds while the unit is SECONDS; anything else is a float.
    """

    domain = Domain.TIME
    unit_type = TimeUnit
    __slots__ = ()

    @classmethod
    def _normalize(cls, value, unit):
        if value is None:
            return 0, False
        v = float(value)
        if math.isnan(v) or math.isinf(v):
            return 0, False
        if unit is TimeUnit.SECONDS:
            return int(round(v)), True
        return v, True

    @classmethod
    def from_datetime(cls, dt: Optional[datetime.datetime]) -> "Time":
        if dt is None:
            return cls.invalid()
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=datetime.timezone.utc)
        return cls(dt.timestamp())

    def to_datetime(self) -> Optional[datetime.datetime]:
        if not self.valid:
            return None
        return datetime.datetime.fromtimestamp(self.internal_value(), tz=datetime.timezone.utc)

    def value_to_string(self, precision: Optional[int] = None) -> str:
        if self.valid and self.unit is TimeUnit.SECONDS:
            return str(self.value)
        return super().value_to_string(precision)

    def to_nice_string(self) -> str:
        """Duration as '1 h 02 m 03 s'."""
        if not self.valid:
            return INVALID_TEXT
        total = int(round(self.internal_value()))
        sign = "-" if total < 0 else ""
        total = abs(total)
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{sign}{hours:d} h {minutes:02d} m {seconds:02d} s"

    def to_timestamp_string(self) -> str:
        dt = self.to_datetime()
        if dt is None:
            return INVALID_TEXT
        return dt.strftime("%Y-%m-%dT%H:%M:%SZ")

