# shared/record_input.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
import datetime as dt
import math

from domain.quality import DEFAULT_QUALITY, QUALITY_MAX, QUALITY_MIN, is_valid_quality
from sleeptracker.engine import SleepRecord


RECORD_HEADERS = [
    "record_id",
    "date",
    "sleep_time",
    "wake_time",
    "quality",
    "notes",
    "created_at",
    "updated_at",
]


@dataclass(frozen=True)
class RecordDraft:
    """Add/edit form state. Times are clock times on the draft's date."""
    date: dt.date
    sleep_time: dt.time
    wake_time: dt.time
    quality: int = DEFAULT_QUALITY
    notes: str = ""


def parse_time_hhmm(s: Any, fallback: dt.time) -> dt.time:
    try:
        hh, mm = str(s).strip().split(":")[:2]
        return dt.time(int(hh), int(mm))
    except Exception:
        return fallback


def _parse_date_iso(s: Any) -> Optional[dt.date]:
    try:
        return dt.date.fromisoformat(str(s).strip()[:10])
    except Exception:
        return None


def _parse_datetime_iso(s: Any) -> Optional[dt.datetime]:
    raw = str(s or "").strip()
    if not raw:
        return None
    try:
        return dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except Exception:
        return None


def validate_draft(draft: RecordDraft) -> None:
    if not is_valid_quality(draft.quality):
        raise ValueError(f"quality must be between {QUALITY_MIN} and {QUALITY_MAX}, got {draft.quality!r}")
    if not isinstance(draft.date, dt.date):
        raise ValueError(f"date is required, got {draft.date!r}")


def draft_datetimes(draft: RecordDraft, tz: Optional[dt.tzinfo] = None):
    """
    (sleep_dt, wake_dt) on the draft's nominal date.
    Both land on the same calendar day even for overnight sessions; the
    engine reads a wake time before the sleep time as the next morning.
    """
    d = draft.date
    sleep_dt = dt.datetime.combine(d, draft.sleep_time.replace(second=0, microsecond=0), tzinfo=tz)
    wake_dt = dt.datetime.combine(d, draft.wake_time.replace(second=0, microsecond=0), tzinfo=tz)
    return sleep_dt, wake_dt


def draft_to_row(draft: RecordDraft, tz: Optional[dt.tzinfo] = None) -> Dict[str, Any]:
    """
    Store payload (without ids/timestamps, which the store assigns).
    Example:
      {"date":"2026-02-16","sleep_time":"2026-02-16T23:30:00","wake_time":"2026-02-16T06:45:00",
       "quality":"4","notes":"..."}
    """
    validate_draft(draft)
    sleep_dt, wake_dt = draft_datetimes(draft, tz)
    return {
        "date": draft.date.isoformat(),
        "sleep_time": sleep_dt.isoformat(),
        "wake_time": wake_dt.isoformat(),
        "quality": str(int(draft.quality)),
        "notes": str(draft.notes or ""),
    }


def row_to_record(row: Dict[str, Any]) -> Optional[SleepRecord]:
    """
    Store row -> SleepRecord. Returns None for rows that cannot be parsed.
    """
    if not isinstance(row, dict):
        return None
    date = _parse_date_iso(row.get("date", ""))
    sleep_dt = _parse_datetime_iso(row.get("sleep_time", ""))
    wake_dt = _parse_datetime_iso(row.get("wake_time", ""))
    if date is None or sleep_dt is None or wake_dt is None:
        return None
    try:
        q = float(row.get("quality", DEFAULT_QUALITY))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(q):
        return None
    quality = int(q)
    notes = row.get("notes", "")
    return SleepRecord(
        date=date,
        sleep_time=sleep_dt,
        wake_time=wake_dt,
        quality=quality,
        notes=str(notes) if notes not in (None, "") else None,
        record_id=str(row.get("record_id", "") or ""),
        created_at=_parse_datetime_iso(row.get("created_at", "")),
    )


def draft_from_record(record: SleepRecord) -> RecordDraft:
    return RecordDraft(
        date=record.date,
        sleep_time=record.sleep_time.time().replace(second=0, microsecond=0),
        wake_time=record.wake_time.time().replace(second=0, microsecond=0),
        quality=int(record.quality),
        notes=record.notes or "",
    )


def draft_to_record(draft: RecordDraft, tz: Optional[dt.tzinfo] = None) -> SleepRecord:
    """Unsaved record, e.g. to preview the duration while the form is open."""
    sleep_dt, wake_dt = draft_datetimes(draft, tz)
    return SleepRecord(
        date=draft.date,
        sleep_time=sleep_dt,
        wake_time=wake_dt,
        quality=int(draft.quality),
        notes=draft.notes or None,
    )
