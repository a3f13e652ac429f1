# sleeptracker/calendar_grid.py
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple
import calendar
import datetime as dt

from .engine import SleepRecord, daily_quality_map

SUNDAY = 6


def month_bounds(year: int, month: int) -> Tuple[dt.date, dt.date]:
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, 1), dt.date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Month navigation (prev/next buttons)."""
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1


def month_grid(year: int, month: int, first_weekday: int = SUNDAY) -> List[dt.date]:
    """
    Every date from the start of the week holding the 1st through the last
    day of the month. first_weekday follows datetime.weekday() (Mon=0 .. Sun=6).
    """
    first, last = month_bounds(year, month)
    lead = (first.weekday() - first_weekday) % 7
    cur = first - dt.timedelta(days=lead)
    days: List[dt.date] = []
    while cur <= last:
        days.append(cur)
        cur += dt.timedelta(days=1)
    return days


def weekday_headers(first_weekday: int = SUNDAY) -> List[str]:
    names = list(calendar.day_abbr)  # Mon .. Sun
    return [names[(first_weekday + i) % 7] for i in range(7)]


def month_quality_map(records: Iterable[SleepRecord], year: int, month: int) -> Dict[dt.date, int]:
    first, last = month_bounds(year, month)
    in_month = [r for r in records if first <= _record_day(r) <= last]
    out: Dict[dt.date, int] = {}
    for day in sorted({_record_day(r) for r in in_month}):
        q = daily_quality_map(in_month, day)
        if q is not None:
            out[day] = q
    return out


def _record_day(r: SleepRecord) -> dt.date:
    d = r.date
    return d.date() if isinstance(d, dt.datetime) else d
