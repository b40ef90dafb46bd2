# trackmax/analyze/report.py
"""
Configured per-track report: summary numbers plus a display-sized
altitude profile, optionally drawn to an image.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from trackmax.analyze.statistics import analyze_track
from trackmax.config import TrackmaxConfig, load_config
from trackmax.series.generator import altitude_over_distance
from trackmax.track.track import Track
from trackmax.util.logging import get_logger
from trackmax.visualize.plot import save_series_plot

logger = get_logger("analyze")


def track_report(
    track: Track,
    config: Optional[TrackmaxConfig] = None,
    plot_path: Optional[Path] = None,
) -> dict:
    """
    Analyze `track` with the configured defaults.

    The profile is compressed to `analysis.compressed_points` samples when it
    is longer than that; `None` when the track has no altitude profile.
    """
    if config is None:
        config = load_config()
    analysis = config.analysis

    report = {
        "name": track.name,
        "summary": analyze_track(track, analysis.min_stop_seconds),
        "profile": None,
        "plot": None,
    }

    result = altitude_over_distance(track, config.units)
    if not result.ok:
        logger.info("No altitude profile for %s: %s", track.name, result.status.name)
        return report

    profile = result.series
    if len(profile.x) > analysis.compressed_points:
        compressed = profile.compress(analysis.compressed_points)
        if compressed.ok:
            profile = compressed.series
    report["profile"] = profile

    if plot_path is not None:
        report["plot"] = save_series_plot(
            profile, Path(plot_path), gridlines=analysis.gridlines, title=track.name,
        )
    return report


def print_report(report: dict, *, tsv: bool = False) -> None:
    stats = report["summary"]
    if tsv:
        print(
            f"{report['name']}\t"
            f"{stats['points']}\t"
            f"{stats['segments']}\t"
            f"{stats['distance_m']:.2f}\t"
            f"{stats['duration_s']:.1f}\t"
            f"{stats['avg_speed_mps']:.3f}\t"
            f"{stats['moving_avg_speed_mps']:.3f}\t"
            f"{stats['max_speed_mps']:.3f}"
        )
        return
    print(f"\n{report['name']}")
    print(f"  points              : {stats['points']}")
    print(f"  segments            : {stats['segments']}")
    print(f"  distance (m)        : {stats['distance_m']:.2f}")
    print(f"  duration (s)        : {stats['duration_s']:.1f}")
    print(f"  avg speed m/s       : {stats['avg_speed_mps']:.3f}")
    print(f"  moving avg speed m/s: {stats['moving_avg_speed_mps']:.3f}")
    print(f"  max speed m/s       : {stats['max_speed_mps']:.3f}")
    if report["profile"] is not None:
        print(f"  profile samples     : {len(report['profile'].x)}")
