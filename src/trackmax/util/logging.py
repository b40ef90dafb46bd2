# trackmax/util/logging.py
from __future__ import annotations

import datetime
import logging
import sys

ROOT_LOGGER = "trackmax"
LOG_FORMAT = "%(asctime)s  %(message)s"


class _IsoFormatter(logging.Formatter):
    """Timestamp log lines as local ISO-8601 with timezone, to the second."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ts = datetime.datetime.fromtimestamp(record.created).astimezone()
        return ts.isoformat(timespec="seconds")


def get_logger(name: str) -> logging.Logger:
    """Return the logger for one area of the package, e.g. get_logger("track")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(level: int = logging.INFO, stream=None) -> logging.Handler:
    """
    Attach a console handler to the package root logger.

    Library code only ever logs; applications decide whether to call this.
    Calling it again replaces the previous handler instead of stacking.
    """
    root = logging.getLogger(ROOT_LOGGER)
    for h in list(root.handlers):
        if getattr(h, "_trackmax_console", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_IsoFormatter(LOG_FORMAT))
    handler._trackmax_console = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def log(msg: str) -> None:
    """Log a line at INFO on the package root logger."""
    logging.getLogger(ROOT_LOGGER).info(msg)
