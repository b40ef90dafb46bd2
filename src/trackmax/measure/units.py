# trackmax/measure/units.py
"""
Measurement domains and their units.

Every unit knows its display symbol and how many *internal* units one of it
is worth. The internal unit of each domain is its first member:
metres, metres, metres per second, percent, seconds.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Domain(enum.Enum):
    TIME = "time"
    DISTANCE = "distance"
    ALTITUDE = "altitude"
    GRADIENT = "gradient"
    SPEED = "speed"


class _Unit(enum.Enum):
    def __init__(self, symbol: str, factor: float) -> None:
        self.symbol = symbol
        self.factor = factor

    @classmethod
    def internal_unit(cls):
        return next(iter(cls))

    @classmethod
    def from_string(cls, text: str):
        """
        Look a unit up by symbol or alias, case-insensitively.

        Raises ValueError for unknown names; config code turns that into
        a ConfigError with file context.
        """
        key = (text or "").strip().lower()
        for unit in cls:
            if key == unit.symbol.lower() or key == unit.name.lower():
                return unit
        aliases = _ALIASES.get(cls.__name__, {})
        if key in aliases:
            return cls[aliases[key]]
        raise ValueError(f"unknown {cls.__name__}: {text!r}")

    def to_internal(self, value: float) -> float:
        return value * self.factor

    def from_internal(self, value: float) -> float:
        return value / self.factor


class TimeUnit(_Unit):
    SECONDS = ("s", 1.0)
    MINUTES = ("min", 60.0)
    HOURS = ("h", 3600.0)
    DAYS = ("d", 86400.0)


class DistanceUnit(_Unit):
    METRES = ("m", 1.0)
    KILOMETRES = ("km", 1000.0)
    MILES = ("miles", 1609.344)
    NAUTICAL_MILES = ("NM", 1852.0)
    YARDS = ("yd", 0.9144)


class AltitudeUnit(_Unit):
    METRES = ("m", 1.0)
    FEET = ("ft", 0.3048)


class SpeedUnit(_Unit):
    METRES_PER_SECOND = ("m/s", 1.0)
    KILOMETRES_PER_HOUR = ("km/h", 1.0 / 3.6)
    MILES_PER_HOUR = ("mph", 0.44704)
    KNOTS = ("knots", 1852.0 / 3600.0)


class GradientUnit(_Unit):
    PERCENT = ("%", 1.0)


_ALIASES: dict[str, dict[str, str]] = {
    "TimeUnit": {
        "sec": "SECONDS", "second": "SECONDS",
        "minute": "MINUTES", "minutes": "MINUTES",
        "hour": "HOURS", "hr": "HOURS",
        "day": "DAYS",
    },
    "DistanceUnit": {
        "metre": "METRES", "meter": "METRES", "meters": "METRES",
        "kilometre": "KILOMETRES", "kilometer": "KILOMETRES", "kilometers": "KILOMETRES",
        "mi": "MILES", "mile": "MILES",
        "nmi": "NAUTICAL_MILES", "nautical_mile": "NAUTICAL_MILES",
        "yard": "YARDS", "yards": "YARDS",
    },
    "AltitudeUnit": {
        "metre": "METRES", "meter": "METRES", "meters": "METRES",
        "foot": "FEET", "feet": "FEET",
    },
    "SpeedUnit": {
        "mps": "METRES_PER_SECOND",
        "kph": "KILOMETRES_PER_HOUR", "kmh": "KILOMETRES_PER_HOUR",
        "kn": "KNOTS", "kt": "KNOTS", "knot": "KNOTS",
    },
    "GradientUnit": {
        "percent": "PERCENT", "pct": "PERCENT",
    },
}


@dataclass(frozen=True)
class DisplayUnits:
    """The units derived series and summaries are shown in."""

    distance: DistanceUnit = DistanceUnit.KILOMETRES
    altitude: AltitudeUnit = AltitudeUnit.METRES
    speed: SpeedUnit = SpeedUnit.KILOMETRES_PER_HOUR
    time: TimeUnit = TimeUnit.SECONDS
    gradient: GradientUnit = GradientUnit.PERCENT

    def unit_for(self, domain: Domain):
        return {
            Domain.DISTANCE: self.distance,
            Domain.ALTITUDE: self.altitude,
            Domain.SPEED: self.speed,
            Domain.TIME: self.time,
            Domain.GRADIENT: self.gradient,
        }[domain]
