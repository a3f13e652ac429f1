# storage/repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Set
import datetime as dt

from sleeptracker.engine import SleepRecord, records_for_date
from shared.record_input import RECORD_HEADERS, RecordDraft, draft_to_row, row_to_record


def _row_key(row: Any) -> str:
    if not isinstance(row, dict):
        return repr(row)
    rid = str(row.get("record_id", "") or "").strip()
    if rid:
        return rid
    return "|".join(str(row.get(h, "")) for h in RECORD_HEADERS)


class SleepRepo:
    """
    App-level interface (backend-agnostic).
    Backends: storage.memory.InMemoryRecordStore, storage.gsheets.SleepGSheets.
    """
    def __init__(self, backend, tz: Optional[dt.tzinfo] = None):
        self.db = backend
        self.tz = tz
        # unparseable rows already written to the audit log
        self._reported_rows: Set[str] = set()

    def _audit_error(self, action: str, err: Exception) -> None:
        try:
            self.db.append_admin_log("error", action, "", str(err))
        except Exception:
            return

    # ---- reads ----
    def list_records(self, ascending: bool = False) -> List[SleepRecord]:
        try:
            rows = self.db.list_record_rows()
        except Exception as e:
            self._audit_error("list_records", e)
            return []
        out: List[SleepRecord] = []
        skipped: List[str] = []
        for row in rows:
            rec = row_to_record(row)
            if rec is None:
                skipped.append(_row_key(row))
                continue
            out.append(rec)
        new = [k for k in skipped if k not in self._reported_rows]
        if new:
            self._reported_rows.update(new)
            self._audit_error(
                "list_records",
                ValueError(f"skipped {len(new)} unparseable row(s): {', '.join(new[:10])}"),
            )
        out.sort(key=lambda r: (r.date, r.sleep_time.timestamp()), reverse=not ascending)
        return out

    def get_record(self, record_id: str) -> Optional[SleepRecord]:
        try:
            row = self.db.get_record_row(record_id)
        except Exception as e:
            self._audit_error("get_record", e)
            return None
        if not row:
            return None
        return row_to_record(row)

    def records_for_date(self, date: dt.date) -> List[SleepRecord]:
        return records_for_date(self.list_records(ascending=True), date)

    # ---- writes ----
    def add_record(self, draft: RecordDraft) -> SleepRecord:
        payload = draft_to_row(draft, self.tz)
        try:
            row = self.db.append_record_row(payload)
        except Exception as e:
            self._audit_error("add_record", e)
            raise RuntimeError(f"failed to save sleep record: {e}") from e
        rec = row_to_record(row)
        if rec is None:
            raise RuntimeError("store returned an unreadable record row")
        return rec

    def update_record(self, record_id: str, draft: RecordDraft) -> bool:
        payload = draft_to_row(draft, self.tz)
        try:
            return bool(self.db.update_record_row(record_id, payload))
        except Exception as e:
            self._audit_error("update_record", e)
            raise RuntimeError(f"failed to update sleep record {record_id}: {e}") from e

    def delete_record(self, record_id: str) -> bool:
        try:
            return bool(self.db.delete_record_row(record_id))
        except Exception as e:
            self._audit_error("delete_record", e)
            raise RuntimeError(f"failed to delete sleep record {record_id}: {e}") from e

    def get_recent_admin_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            return self.db.get_recent_admin_logs(limit=limit)
        except Exception:
            return []
