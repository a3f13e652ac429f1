# storage/memory.py
from __future__ import annotations

from typing import Any, Deque, Dict, List, Optional
from collections import deque
import datetime as dt
import threading
import uuid


ADMIN_LOG_MAXLEN = 500


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


class InMemoryRecordStore:
    """
    Collection-backed record store with the same surface as SleepGSheets.
    Rows are plain dicts of strings, like sheet rows.
    """
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None):
        self._lock = threading.Lock()
        self._rows: List[Dict[str, Any]] = [dict(r) for r in (rows or [])]
        self._admin_logs: Deque[Dict[str, Any]] = deque(maxlen=ADMIN_LOG_MAXLEN)

    # -------- Sleep records --------

    def list_record_rows(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(r) for r in self._rows]

    def get_record_row(self, record_id: str) -> Optional[Dict[str, Any]]:
        key = str(record_id).strip()
        with self._lock:
            for r in self._rows:
                if str(r.get("record_id", "")).strip() == key:
                    return dict(r)
        return None

    def append_record_row(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = _now_iso()
        row = {"record_id": uuid.uuid4().hex, "created_at": now, "updated_at": now}
        row.update({k: v for k, v in data.items() if k not in ("record_id", "created_at", "updated_at")})
        with self._lock:
            self._rows.append(row)
        return dict(row)

    def update_record_row(self, record_id: str, patch: Dict[str, Any]) -> bool:
        key = str(record_id).strip()
        with self._lock:
            for r in self._rows:
                if str(r.get("record_id", "")).strip() == key:
                    r.update({k: v for k, v in patch.items() if k not in ("record_id", "created_at")})
                    r["updated_at"] = _now_iso()
                    return True
        return False

    def delete_record_row(self, record_id: str) -> bool:
        key = str(record_id).strip()
        with self._lock:
            before = len(self._rows)
            self._rows = [r for r in self._rows if str(r.get("record_id", "")).strip() != key]
            return len(self._rows) < before

    # -------- Audit log --------

    def append_admin_log(self, level: str, action: str, username: str, detail: str) -> None:
        payload = {
            "timestamp": _now_iso(),
            "level": str(level or "info"),
            "action": str(action or ""),
            "username": str(username or ""),
            "detail": str(detail or ""),
        }
        with self._lock:
            self._admin_logs.append(payload)

    def get_recent_admin_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        with self._lock:
            out = list(self._admin_logs)
        out.sort(key=lambda r: str(r.get("timestamp", "")), reverse=True)
        return out[: max(0, int(limit))]
