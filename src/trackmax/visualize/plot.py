# trackmax/visualize/plot.py
"""
Plotting routines for trackmax
"""

import matplotlib.pyplot as plt
from matplotlib.ticker import MultipleLocator

from trackmax.measure.units import Domain
from trackmax.series.intervals import GraphIntervals


def _axis_label(domain, unit):
    return f"{domain.value.capitalize()} ({unit.symbol})"


def _grid_step(domain, unit, lo, hi, gridlines):
    # the time table is in seconds, whatever unit the axis shows
    intervals = GraphIntervals.for_domain(domain)
    if domain is not Domain.TIME:
        return intervals.get_interval(lo, hi, gridlines)
    step = intervals.get_interval(unit.to_internal(lo), unit.to_internal(hi), gridlines)
    return None if step is None else unit.from_internal(step)


def plot_series(series, ax=None, gridlines=5, title=None):
    """
    Draw a DerivedSeries as a line. NaN samples break the line, so data
    gaps stay visible. Major ticks sit on the "nice" grid interval.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))

    ax.plot(series.x, series.y, linewidth=1)
    ax.set_xlabel(_axis_label(series.x_domain, series.x_unit))
    ax.set_ylabel(_axis_label(series.y_domain, series.y_unit))
    if title:
        ax.set_title(title)

    x_step = _grid_step(series.x_domain, series.x_unit, series.x_min, series.x_max, gridlines)
    y_step = _grid_step(series.y_domain, series.y_unit, series.y_min, series.y_max, gridlines)
    if x_step:
        ax.xaxis.set_major_locator(MultipleLocator(x_step))
    if y_step:
        ax.yaxis.set_major_locator(MultipleLocator(y_step))
    ax.grid(True, linewidth=0.5)
    return ax


def save_series_plot(series, path, gridlines=5, title=None):
    fig, ax = plt.subplots(figsize=(8, 4))
    plot_series(series, ax=ax, gridlines=gridlines, title=title)
    fig.savefig(path)
    plt.close(fig)
    return path
