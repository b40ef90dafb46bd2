# trackmax/errors

"""
trackmax.errors

Central error vocabulary for trackmax.

Two kinds of failure live here:
  - Exceptions, for the configuration boundary only. Callers can catch
    TrackmaxError (broad) or ConfigError (narrow).
  - Status values, for everything on the analytics path. Track edits,
    series generation and splitting never raise on malformed input;
    they hand back a Status (usually wrapped in an EditResult).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TrackmaxError(RuntimeError):
    """Base class for all trackmax runtime errors."""


# ---- Configuration errors -----------------------

class ConfigError(TrackmaxError):
    """A config file could not be parsed or holds an unusable value."""


# ---- Status values ------------------------------

class Status(enum.Enum):
    OK = "ok"
    # Empty track, point not in the track, zero/negative span.
    INVALID_ARGUMENT = "invalid_argument"
    # Arithmetic between measurements in different units.
    UNIT_MISMATCH = "unit_mismatch"
    # Split at first/last point, compress to a non-positive count, ...
    ALGORITHMIC_PRECONDITION = "algorithmic_precondition"
    # Nothing wrong, nothing done (e.g. split with only begin/end).
    NOTHING_TO_DO = "nothing_to_do"
    # Stop was requested while a long edit was running.
    CANCELLED = "cancelled"

    @property
    def ok(self) -> bool:
        return self is Status.OK


@dataclass(frozen=True)
class EditResult:
    """
    Outcome of an in-place Track edit.

    `count` is the number of trackpoints the edit touched (removed,
    re-timed, re-elevated, ...). A cancelled edit still reports how far
    it got; nothing is rolled back.
    """

    status: Status
    count: int = 0

    @property
    def ok(self) -> bool:
        return self.status.ok
