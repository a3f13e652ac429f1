from __future__ import annotations

import datetime as dt
import unittest

from sleeptracker.calendar_grid import month_bounds, month_grid, month_quality_map, shift_month, weekday_headers
from sleeptracker.engine import SleepRecord


def _night(day: dt.date, quality: int, created_hour: int | None = None) -> SleepRecord:
    created = None
    if created_hour is not None:
        created = dt.datetime(day.year, day.month, day.day, created_hour, 0, tzinfo=dt.timezone.utc)
    return SleepRecord(
        date=day,
        sleep_time=dt.datetime(day.year, day.month, day.day, 23, 0),
        wake_time=dt.datetime(day.year, day.month, day.day, 7, 0),
        quality=quality,
        created_at=created,
    )


class MonthGridTests(unittest.TestCase):
    def test_grid_starts_on_sunday_and_ends_on_last_day(self):
        # 2026-02-01 is a Sunday
        days = month_grid(2026, 2)
        self.assertEqual(days[0], dt.date(2026, 2, 1))
        self.assertEqual(days[-1], dt.date(2026, 2, 28))
        self.assertEqual(len(days), 28)

    def test_grid_includes_leading_days_of_previous_month(self):
        # 2026-07-01 is a Wednesday -> grid opens on Sunday 2026-06-28
        days = month_grid(2026, 7)
        self.assertEqual(days[0], dt.date(2026, 6, 28))
        self.assertEqual(days[0].weekday(), 6)
        self.assertEqual(days[-1], dt.date(2026, 7, 31))

    def test_grid_monday_first(self):
        days = month_grid(2026, 7, first_weekday=0)
        self.assertEqual(days[0], dt.date(2026, 6, 29))
        self.assertEqual(days[0].weekday(), 0)

    def test_weekday_headers_follow_first_weekday(self):
        self.assertEqual(len(weekday_headers()), 7)
        self.assertEqual(weekday_headers(0)[0], weekday_headers(6)[1])

    def test_month_bounds_leap_year(self):
        self.assertEqual(month_bounds(2028, 2), (dt.date(2028, 2, 1), dt.date(2028, 2, 29)))

    def test_shift_month_wraps_years(self):
        self.assertEqual(shift_month(2026, 1, -1), (2025, 12))
        self.assertEqual(shift_month(2026, 12, 1), (2027, 1))
        self.assertEqual(shift_month(2026, 5, 0), (2026, 5))


class MonthQualityMapTests(unittest.TestCase):
    def test_only_days_in_month_with_records(self):
        rs = [
            _night(dt.date(2026, 3, 1), 4),
            _night(dt.date(2026, 3, 15), 2),
            _night(dt.date(2026, 2, 28), 5),
            _night(dt.date(2026, 4, 1), 1),
        ]
        qmap = month_quality_map(rs, 2026, 3)
        self.assertEqual(qmap, {dt.date(2026, 3, 1): 4, dt.date(2026, 3, 15): 2})

    def test_duplicate_day_uses_most_recent_record(self):
        day = dt.date(2026, 3, 10)
        rs = [_night(day, 5, created_hour=12), _night(day, 1, created_hour=8)]
        self.assertEqual(month_quality_map(rs, 2026, 3), {day: 5})

    def test_empty(self):
        self.assertEqual(month_quality_map([], 2026, 3), {})


if __name__ == "__main__":
    unittest.main()
