from __future__ import annotations

import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from shared.record_input import (
    RecordDraft,
    draft_from_record,
    draft_to_record,
    draft_to_row,
    parse_time_hhmm,
    row_to_record,
)
from sleeptracker.engine import session_duration


class RecordInputTests(unittest.TestCase):
    def test_draft_to_row_keeps_both_times_on_nominal_day(self):
        draft = RecordDraft(dt.date(2026, 2, 16), dt.time(23, 30), dt.time(6, 45), 4, "Good sleep")
        row = draft_to_row(draft)
        self.assertEqual(
            row,
            {
                "date": "2026-02-16",
                "sleep_time": "2026-02-16T23:30:00",
                "wake_time": "2026-02-16T06:45:00",
                "quality": "4",
                "notes": "Good sleep",
            },
        )

    def test_draft_to_row_with_timezone(self):
        tz = ZoneInfo("Asia/Seoul")
        row = draft_to_row(RecordDraft(dt.date(2026, 2, 16), dt.time(23, 0), dt.time(7, 0)), tz)
        self.assertEqual(row["sleep_time"], "2026-02-16T23:00:00+09:00")

    def test_draft_to_row_rejects_out_of_range_quality(self):
        for q in (0, 6):
            with self.assertRaises(ValueError):
                draft_to_row(RecordDraft(dt.date(2026, 2, 16), dt.time(23, 0), dt.time(7, 0), q))

    def test_row_to_record_parses_store_row(self):
        row = {
            "record_id": "abc",
            "date": "2026-02-16",
            "sleep_time": "2026-02-16T23:30:00",
            "wake_time": "2026-02-16T06:45:00",
            "quality": "4",
            "notes": "",
            "created_at": "2026-02-17T08:00:00Z",
        }
        rec = row_to_record(row)
        self.assertIsNotNone(rec)
        self.assertEqual(rec.record_id, "abc")
        self.assertEqual(rec.quality, 4)
        self.assertIsNone(rec.notes)
        self.assertEqual(rec.created_at, dt.datetime(2026, 2, 17, 8, 0, tzinfo=dt.timezone.utc))
        self.assertEqual(session_duration(rec), dt.timedelta(hours=7, minutes=15))

    def test_row_to_record_tolerates_numeric_cells(self):
        row = {"date": "2026-02-16", "sleep_time": "2026-02-16T22:00:00", "wake_time": "2026-02-17T06:00:00", "quality": 5.0}
        rec = row_to_record(row)
        self.assertEqual(rec.quality, 5)
        self.assertEqual(rec.record_id, "")
        self.assertIsNone(rec.created_at)

    def test_row_to_record_rejects_broken_rows(self):
        self.assertIsNone(row_to_record({"date": "bad", "sleep_time": "2026-02-16T22:00:00", "wake_time": "2026-02-16T06:00:00"}))
        self.assertIsNone(row_to_record({"date": "2026-02-16", "sleep_time": "", "wake_time": "2026-02-16T06:00:00"}))
        self.assertIsNone(row_to_record({"date": "2026-02-16", "sleep_time": "2026-02-16T22:00:00", "wake_time": "2026-02-16T06:00:00", "quality": "great"}))
        self.assertIsNone(row_to_record("not a row"))

    def test_row_to_record_rejects_non_finite_quality(self):
        base = {"date": "2026-02-16", "sleep_time": "2026-02-16T22:00:00", "wake_time": "2026-02-16T06:00:00"}
        for q in ("inf", "-inf", "1e999", "nan"):
            self.assertIsNone(row_to_record(dict(base, quality=q)), q)

    def test_draft_from_record_round_trip(self):
        draft = RecordDraft(dt.date(2026, 2, 16), dt.time(23, 30), dt.time(6, 45), 2, "restless")
        rec = row_to_record(draft_to_row(draft))
        self.assertEqual(draft_from_record(rec), draft)

    def test_draft_to_record_preview(self):
        draft = RecordDraft(dt.date(2026, 2, 16), dt.time(22, 15), dt.time(6, 0), 3)
        rec = draft_to_record(draft)
        self.assertEqual(rec.record_id, "")
        self.assertEqual(session_duration(rec), dt.timedelta(hours=7, minutes=45))

    def test_parse_time_hhmm(self):
        self.assertEqual(parse_time_hhmm("07:30", dt.time(0, 0)), dt.time(7, 30))
        self.assertEqual(parse_time_hhmm("23:05:59", dt.time(0, 0)), dt.time(23, 5))
        self.assertEqual(parse_time_hhmm("bad", dt.time(7, 0)), dt.time(7, 0))
        self.assertEqual(parse_time_hhmm(None, dt.time(7, 0)), dt.time(7, 0))


if __name__ == "__main__":
    unittest.main()
