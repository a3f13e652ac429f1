# sleeptracker/plots.py
from __future__ import annotations

from typing import Iterable, Optional
import matplotlib.pyplot as plt

from domain.quality import quality_color
from .calendar_grid import SUNDAY, month_grid, month_quality_map, weekday_headers
from .engine import (
    BAR_WINDOW_HOURS,
    BAR_WINDOW_START,
    SleepRecord,
    format_duration,
    session_duration,
    sleep_bar_span,
)


def _bar_hour_labels():
    """21, 22, ... 14 across the display window."""
    n = int(BAR_WINDOW_HOURS) + 1
    return [(BAR_WINDOW_START.hour + i) % 24 for i in range(n)]


def plot_sleep_bars(
    records: Iterable[SleepRecord],
    title: str = "Sleep Sessions",
    ax: Optional[plt.Axes] = None,
):
    """
    One horizontal bar per night across the 21:00 -> 14:00 window.
    Returns matplotlib Figure.
    """
    rs = list(records)

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, max(2.0, 0.45 * len(rs) + 1.0)))
    else:
        fig = ax.figure

    for i, r in enumerate(rs):
        start, width = sleep_bar_span(r)
        ax.broken_barh([(0.0, 1.0)], (i - 0.3, 0.6), facecolors=(0.5, 0.5, 0.5, 0.2))
        ax.broken_barh([(start, width)], (i - 0.3, 0.6), facecolors="tab:blue")
        ax.text(1.01, i, format_duration(session_duration(r)), va="center", fontsize=8)

    hours = _bar_hour_labels()
    ax.set_xticks([i / BAR_WINDOW_HOURS for i in range(len(hours))])
    ax.set_xticklabels([str(h) for h in hours], fontsize=7)
    ax.set_xlim(0.0, 1.12)
    ax.set_yticks(list(range(len(rs))))
    ax.set_yticklabels([r.date.strftime("%d %b") for r in rs])
    ax.invert_yaxis()
    ax.set_title(title)
    ax.grid(True, axis="x", alpha=0.2)
    return fig


def plot_quality_calendar(
    records: Iterable[SleepRecord],
    year: int,
    month: int,
    first_weekday: int = SUNDAY,
    ax: Optional[plt.Axes] = None,
):
    """
    Month grid with each day shaded by its logged quality.
    Days outside the month are drawn faded; days without a record stay clear.
    Returns matplotlib Figure.
    """
    qmap = month_quality_map(records, year, month)
    days = month_grid(year, month, first_weekday=first_weekday)

    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 5))
    else:
        fig = ax.figure

    for i, d in enumerate(days):
        col = i % 7
        row = i // 7
        color = quality_color(qmap[d]) if d in qmap else (0.0, 0.0, 0.0, 0.0)
        ax.add_patch(plt.Rectangle((col, row), 0.92, 0.92, facecolor=color, edgecolor=(0.8, 0.8, 0.8, 1.0)))
        alpha = 1.0 if d.month == month else 0.35
        ax.text(col + 0.46, row + 0.46, str(d.day), ha="center", va="center", fontsize=9, alpha=alpha)

    n_rows = (len(days) + 6) // 7
    ax.set_xlim(0, 7)
    ax.set_ylim(n_rows, -0.6)
    for col, name in enumerate(weekday_headers(first_weekday)):
        ax.text(col + 0.46, -0.3, name, ha="center", va="center", fontsize=8)
    ax.set_title(f"{year}-{month:02d}")
    ax.axis("off")
    return fig
