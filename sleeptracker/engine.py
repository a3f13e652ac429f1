# sleeptracker/engine.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import datetime as dt

from domain.quality import QUALITY_MAX, clamp_quality


# ----------------------------
# Data models
# ----------------------------

@dataclass(frozen=True)
class SleepRecord:
    """
    One logged sleep session.
    - date is the "sleep night" the record belongs to.
    - sleep_time / wake_time may share the same calendar day even when the
      session crossed midnight; session_duration resolves that.
    """
    date: dt.date
    sleep_time: dt.datetime
    wake_time: dt.datetime
    quality: int
    notes: Optional[str] = None
    record_id: str = ""
    created_at: Optional[dt.datetime] = None


@dataclass(frozen=True)
class SleepStatistics:
    record_count: int
    average_quality: float
    average_duration: Optional[dt.timedelta]
    optimal_duration: Optional[dt.timedelta]
    satisfaction_pct: float


# ----------------------------
# Constants
# ----------------------------

ONE_DAY = dt.timedelta(hours=24)

OPTIMAL_QUALITY_WEIGHTS = {4: 1.0, 5: 2.0}

# Sleep bar display window: 21:00 on the sleep day to 14:00 the next day.
BAR_WINDOW_START = dt.time(21, 0)
BAR_WINDOW_HOURS = 17.0


# ----------------------------
# Helpers
# ----------------------------

def _clip(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x

def _as_date(d) -> dt.date:
    if isinstance(d, dt.datetime):
        return d.date()
    return d

def _mean_timedelta(durations: List[dt.timedelta]) -> Optional[dt.timedelta]:
    if not durations:
        return None
    total = sum((d.total_seconds() for d in durations), 0.0)
    return dt.timedelta(seconds=total / len(durations))


# ----------------------------
# Per-record values
# ----------------------------

def session_duration(record: SleepRecord) -> dt.timedelta:
    """
    Time asleep for one record.
    A wake time earlier than the sleep time means the session crossed
    midnight, so the wake time is read as the following day.
    """
    wake = record.wake_time
    if wake < record.sleep_time:
        wake = wake + ONE_DAY
    delta = wake - record.sleep_time
    if delta < dt.timedelta(0):
        # timestamps more than a day apart the wrong way
        return dt.timedelta(0)
    return delta


def format_duration(duration: Optional[dt.timedelta]) -> str:
    """7h 15m style. Missing or negative durations render as 0h 0m."""
    if duration is None or duration < dt.timedelta(0):
        return "0h 0m"
    minutes = int(duration.total_seconds() // 60)
    return f"{minutes // 60}h {minutes % 60}m"


def sleep_bar_span(record: SleepRecord) -> Tuple[float, float]:
    """
    (start_ratio, width_ratio) of the session inside the 21:00 -> 14:00
    display window used by the nightly sleep bar.
    """
    s = record.sleep_time
    window_start = s.replace(
        hour=BAR_WINDOW_START.hour,
        minute=BAR_WINDOW_START.minute,
        second=0,
        microsecond=0,
    )
    # After-midnight sleep belongs to the window that opened the evening before.
    if s < window_start:
        window_start = window_start - ONE_DAY
    total_s = BAR_WINDOW_HOURS * 3600.0
    start = _clip((s - window_start).total_seconds() / total_s, 0.0, 1.0)
    width = _clip(session_duration(record).total_seconds() / total_s, 0.0, 1.0 - start)
    return start, width


# ----------------------------
# Aggregates
# ----------------------------

def average_quality(records: Iterable[SleepRecord]) -> float:
    qs = [clamp_quality(r.quality) for r in records]
    if not qs:
        return 0.0
    return sum(qs) / len(qs)


def average_duration(records: Iterable[SleepRecord]) -> Optional[dt.timedelta]:
    """Mean session length, or None when there is nothing to average."""
    return _mean_timedelta([session_duration(r) for r in records])


def optimal_sleep_duration(records: Iterable[SleepRecord]) -> Optional[dt.timedelta]:
    """
    Quality-weighted mean duration over the nights rated 4 or 5.
    Nights rated 5 count twice as much as nights rated 4; nights rated 3 or
    lower are ignored. None means not enough data.
    """
    weighted = 0.0
    weight_sum = 0.0
    for r in records:
        w = OPTIMAL_QUALITY_WEIGHTS.get(clamp_quality(r.quality))
        if w is None:
            continue
        weighted += session_duration(r).total_seconds() * w
        weight_sum += w
    if weight_sum <= 0:
        return None
    return dt.timedelta(seconds=weighted / weight_sum)


def satisfaction_percentage(records: Iterable[SleepRecord]) -> float:
    avg = average_quality(records)
    return _clip(avg / float(QUALITY_MAX) * 100.0, 0.0, 100.0)


def summarize(records: Iterable[SleepRecord]) -> SleepStatistics:
    rs = list(records)
    return SleepStatistics(
        record_count=len(rs),
        average_quality=average_quality(rs),
        average_duration=average_duration(rs),
        optimal_duration=optimal_sleep_duration(rs),
        satisfaction_pct=satisfaction_percentage(rs),
    )


# ----------------------------
# Calendar lookups
# ----------------------------

def records_for_date(records: Iterable[SleepRecord], date) -> List[SleepRecord]:
    day = _as_date(date)
    out = [r for r in records if _as_date(r.date) == day]
    out.sort(key=lambda r: r.sleep_time)
    return out


def daily_quality_map(records: Iterable[SleepRecord], date) -> Optional[int]:
    """
    Quality logged for one calendar day, or None.
    When several records share the day, the most recently created one wins;
    records without created_at rank oldest, then later input position wins.
    """
    day = _as_date(date)
    best: Optional[Tuple[Tuple[int, float, int], SleepRecord]] = None
    for i, r in enumerate(records):
        if _as_date(r.date) != day:
            continue
        if r.created_at is None:
            key = (0, 0.0, i)
        else:
            key = (1, r.created_at.timestamp(), i)
        if best is None or key > best[0]:
            best = (key, r)
    if best is None:
        return None
    return clamp_quality(best[1].quality)
