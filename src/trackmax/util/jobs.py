# trackmax/util/jobs.py
"""
Progress and cooperative cancellation for long track edits.

trackmax never schedules work itself. A caller that runs an edit on a worker
thread hands in a JobControl; the edit reports how many items it has done and
checks `should_stop()` after each one.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass
class JobControl:
    progress: Optional[Callable[[int], None]] = None
    stop_requested: Optional[Callable[[], bool]] = None

    def report(self, done: int) -> None:
        if self.progress is not None:
            self.progress(done)

    def should_stop(self) -> bool:
        return bool(self.stop_requested()) if self.stop_requested is not None else False

    @classmethod
    def from_event(
        cls,
        event: threading.Event,
        progress: Optional[Callable[[int], None]] = None,
    ) -> "JobControl":
        """Stop as soon as `event` is set."""
        return cls(progress=progress, stop_requested=event.is_set)
