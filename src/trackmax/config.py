"""
trackmax configuration loader

This module centralizes *all* configuration handling for trackmax.

Design goals:
- Library calls stay explicit: anything passed as an argument wins.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal preferences:
    ~/.config/trackmax/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) Explicit arguments (handled by each caller)
2) Environment variables (TRACKMAX_*)
3) User config: ~/.config/trackmax/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (km, m, km/h, s; 5 gridlines; ...)

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.

Configuration is the one place trackmax raises: a malformed file or an
unknown unit name is a ConfigError. Everything downstream of the loaded
config reports problems as Status values instead.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from trackmax.errors import ConfigError
from trackmax.measure.units import (
    AltitudeUnit,
    DisplayUnits,
    DistanceUnit,
    SpeedUnit,
    TimeUnit,
)

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with the file name in the message.
    """
    if not path.is_file():
        return {}

    try:
        try:
            # Python 3.11+ standard library
            import tomllib
            return tomllib.loads(path.read_text(encoding="utf-8")) or {}
        except ModuleNotFoundError:
            import tomli
            return tomli.loads(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "units.distance")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_int(v: Any, key: str, origin: str) -> int:
    """
    Coerce a config value into a positive int.

    TOML gives us ints already; environment variables give strings.
    """
    if isinstance(v, bool):
        raise ConfigError(f"{origin}: {key} must be an integer, got {v!r}")
    try:
        i = int(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{origin}: {key} must be an integer, got {v!r}") from e
    if i <= 0:
        raise ConfigError(f"{origin}: {key} must be positive, got {i}")
    return i


def _as_unit(unit_type, v: Any, key: str, origin: str):
    try:
        return unit_type.from_string(str(v))
    except ValueError as e:
        raise ConfigError(f"{origin}: {key} = {v!r} is not a known unit") from e


# ---------------------------------------------------------------------------
# Repo discovery
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the trackmax repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class AnalysisConfig:
    """
    Defaults for analysis calls that take a tuning knob.

    gridlines          -> grid-interval selection
    compressed_points  -> size of display series
    min_stop_seconds   -> moving-average speed
    """

    gridlines: int = 5
    compressed_points: int = 500
    min_stop_seconds: int = 60


@dataclass(frozen=True)
class TrackmaxConfig:
    """
    Fully merged trackmax configuration.

    Attributes:
    - units: display units for series and summaries
    - analysis: default tuning values
    - source: provenance map showing where each value came from
    """

    units: DisplayUnits
    analysis: AnalysisConfig
    source: dict[str, str]


_UNIT_KEYS = {
    "units.distance": DistanceUnit,
    "units.altitude": AltitudeUnit,
    "units.speed": SpeedUnit,
    "units.time": TimeUnit,
}

_INT_KEYS = (
    "analysis.gridlines",
    "analysis.compressed_points",
    "analysis.min_stop_seconds",
)

ENV_MAP = {
    "TRACKMAX_DISTANCE_UNIT": "units.distance",
    "TRACKMAX_ALTITUDE_UNIT": "units.altitude",
    "TRACKMAX_SPEED_UNIT": "units.speed",
    "TRACKMAX_TIME_UNIT": "units.time",
    "TRACKMAX_GRIDLINES": "analysis.gridlines",
    "TRACKMAX_COMPRESSED_POINTS": "analysis.compressed_points",
    "TRACKMAX_MIN_STOP_SECONDS": "analysis.min_stop_seconds",
}


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> TrackmaxConfig:
    """
    Load, merge, and normalize all trackmax configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "trackmax" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    defaults_units = DisplayUnits()
    defaults_analysis = AnalysisConfig()
    values: dict[str, Any] = {
        "units.distance": defaults_units.distance,
        "units.altitude": defaults_units.altitude,
        "units.speed": defaults_units.speed,
        "units.time": defaults_units.time,
    }
    for key in _INT_KEYS:
        values[key] = getattr(defaults_analysis, key.split(".", 1)[1])

    # Track provenance for debugging
    src = {key: "default" for key in values}

    # Repo then user: later wins
    for cfg, label, path in ((repo_cfg, "repo", repo_config_path), (user_cfg, "user", user_config_path)):
        origin = f"{label}:{path}"
        for key, unit_type in _UNIT_KEYS.items():
            v = _deep_get(cfg, key)
            if v is None:
                continue
            values[key] = _as_unit(unit_type, v, key, origin)
            src[key] = origin
        for key in _INT_KEYS:
            v = _deep_get(cfg, key)
            if v is None:
                continue
            values[key] = _as_int(v, key, origin)
            src[key] = origin

    # Environment variable overrides
    for env, key in ENV_MAP.items():
        v = os.environ.get(env)
        if not v:
            continue
        origin = f"env:{env}"
        if key in _UNIT_KEYS:
            values[key] = _as_unit(_UNIT_KEYS[key], v, key, origin)
        else:
            values[key] = _as_int(v, key, origin)
        src[key] = origin

    units = DisplayUnits(
        distance=values["units.distance"],
        altitude=values["units.altitude"],
        speed=values["units.speed"],
        time=values["units.time"],
    )
    analysis = AnalysisConfig(
        gridlines=values["analysis.gridlines"],
        compressed_points=values["analysis.compressed_points"],
        min_stop_seconds=values["analysis.min_stop_seconds"],
    )
    return TrackmaxConfig(units=units, analysis=analysis, source=src)
