# sleeptracker/coach.py
from __future__ import annotations

from typing import List
import datetime as dt

from .engine import SleepStatistics, format_duration


TIPS = [
    "Maintain a consistent sleep schedule to improve your circadian rhythm.",
    "Create a restful environment by keeping your room dark and quiet.",
    "Limit screen time before bed to reduce blue light exposure.",
    "Be mindful of what you eat and drink, especially avoiding caffeine before bed.",
    "Get regular physical activity to promote better sleep quality.",
]


def daily_tip(day: dt.date) -> str:
    """Tip of the day, rotating by day of month."""
    return TIPS[day.day % len(TIPS)]


def interpret_statistics(stats: SleepStatistics) -> List[str]:
    """
    Short suggestion-style insights for the Statistics tab.
    Tone: "may", "could", never prescriptive.
    """
    if stats.record_count == 0:
        return ["No sleep records yet. Log a few nights to see your statistics."]

    out: List[str] = []
    if stats.optimal_duration is None:
        out.append("Rate a few nights as 😀 or 😍 to estimate your optimal sleep duration.")
    else:
        target = format_duration(stats.optimal_duration)
        out.append(f"Your best-rated nights average about {target}; aiming for that may help.")
        if stats.average_duration is not None:
            gap_min = (stats.optimal_duration - stats.average_duration).total_seconds() / 60.0
            if gap_min >= 30:
                out.append(f"You usually sleep about {gap_min:.0f} min less than on your best nights.")
            elif gap_min <= -30:
                out.append(f"You usually sleep about {-gap_min:.0f} min more than on your best nights.")

    if stats.satisfaction_pct >= 80:
        out.append("Overall satisfaction is high. Keep the routine that is working.")
    elif stats.satisfaction_pct < 50:
        out.append("Overall satisfaction is low. A steadier bedtime could be worth trying.")
    return out
