# storage/gsheets.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Dict, Any, List, Tuple
import datetime as dt
import random
import time
import uuid

import gspread
from gspread.exceptions import APIError, WorksheetNotFound

from shared.record_input import RECORD_HEADERS


# ----------------------------
# Config
# ----------------------------

@dataclass
class GSheetsConfig:
    spreadsheet_name: str = "SleepTracker_DB"
    records_ws: str = "sleep_records"
    admin_logs_ws: str = "admin_logs"
    read_ttl_sec: float = 20.0

    # Columns
    # sleep_records:
    #   record_id, date, sleep_time, wake_time, quality, notes, created_at, updated_at
    #
    # admin_logs:
    #   timestamp, level, action, username, detail


ADMIN_LOG_HEADERS = ["timestamp", "level", "action", "username", "detail"]
RETRYABLE_STATUS = (429, 500, 502, 503, 504)


# ----------------------------
# Utilities
# ----------------------------

def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _is_retryable_api_error(exc: Exception) -> bool:
    if isinstance(exc, APIError):
        code = getattr(getattr(exc, "response", None), "status_code", None)
        if code in RETRYABLE_STATUS:
            return True
    text = str(exc).lower()
    return any(k in text for k in ("timeout", "temporarily", "rate limit", "connection reset", "503"))


def _with_retry(op: str, fn, attempts: int = 4, base_delay: float = 0.25):
    """Run fn, retrying transient API errors with exponential backoff + jitter."""
    last_err: Optional[Exception] = None
    for i in range(max(1, attempts)):
        try:
            return fn()
        except Exception as e:
            last_err = e
            if i >= attempts - 1 or not _is_retryable_api_error(e):
                break
            time.sleep(base_delay * (2 ** i) + random.uniform(0.0, 0.15))
    raise RuntimeError(f"Sheets operation failed: {op}: {last_err}") from last_err


def _col_letter(n: int) -> str:
    """1 -> A, 2 -> B ... 27 -> AA"""
    s = ""
    while n > 0:
        n, r = divmod(n - 1, 26)
        s = chr(65 + r) + s
    return s


def _header_row(ws) -> List[str]:
    return _with_retry("row_values(header)", lambda: ws.row_values(1))


def _ensure_headers(ws, headers: List[str]) -> None:
    """Append any missing columns to the header row."""
    existing = _header_row(ws)
    if not existing:
        _with_retry("append_row(header)", lambda: ws.append_row(headers))
        return
    missing = [h for h in headers if h not in existing]
    if missing:
        updated = list(existing) + missing
        _with_retry("update(header)", lambda: ws.update(range_name=f"A1:{_col_letter(len(updated))}1", values=[updated]))


def _row_from_dict(headers: List[str], data: Dict[str, Any], base: Optional[List[str]] = None) -> List[str]:
    row = list(base or [])
    if len(row) < len(headers):
        row += [""] * (len(headers) - len(row))
    pos = {h: i for i, h in enumerate(headers)}
    for k, v in data.items():
        if k in pos:
            row[pos[k]] = "" if v is None else str(v)
    return row


def _find_row_index(ws, key_col: str, key_value: str) -> Optional[int]:
    """1-based sheet row where key_col == key_value (header is row 1)."""
    headers = _header_row(ws)
    if key_col not in headers:
        return None
    col_vals = _with_retry("col_values", lambda: ws.col_values(headers.index(key_col) + 1))
    key = str(key_value).strip()
    for i in range(2, len(col_vals) + 1):
        if str(col_vals[i - 1]).strip() == key:
            return i
    return None


# ----------------------------
# Main client
# ----------------------------

class SleepGSheets:
    """Sleep record store on a Google Sheets spreadsheet, via gspread."""

    def __init__(self, gc: gspread.Client, cfg: Optional[GSheetsConfig] = None):
        self.gc = gc
        self.cfg = cfg or GSheetsConfig()
        self._read_cache: Dict[str, Tuple[float, Any]] = {}

        self.sh = _with_retry("open(spreadsheet)", lambda: self.gc.open(self.cfg.spreadsheet_name))
        self.records = self._get_or_create_ws(self.cfg.records_ws)
        self.admin_logs = self._get_or_create_ws(self.cfg.admin_logs_ws)

        _ensure_headers(self.records, RECORD_HEADERS)
        _ensure_headers(self.admin_logs, ADMIN_LOG_HEADERS)

    def _get_or_create_ws(self, title: str):
        try:
            return _with_retry(f"worksheet({title})", lambda: self.sh.worksheet(title))
        except RuntimeError as e:
            if not isinstance(e.__cause__, WorksheetNotFound):
                raise
        return _with_retry(f"add_worksheet({title})", lambda: self.sh.add_worksheet(title=title, rows=1000, cols=20))

    # -------- read cache --------

    def _cached_records(self, key: str, ws) -> List[Dict[str, Any]]:
        item = self._read_cache.get(key)
        if item and time.time() < item[0]:
            return item[1]
        rows = _with_retry("get_all_records", lambda: ws.get_all_records(numericise_ignore=["all"]))
        self._read_cache[key] = (time.time() + max(1.0, float(self.cfg.read_ttl_sec)), rows)
        return rows

    def _invalidate(self, prefix: str) -> None:
        for k in [k for k in self._read_cache if k.startswith(prefix)]:
            self._read_cache.pop(k, None)

    # -------- Sleep records --------

    def list_record_rows(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self._cached_records("records:all", self.records)]

    def get_record_row(self, record_id: str) -> Optional[Dict[str, Any]]:
        key = str(record_id).strip()
        for r in self.list_record_rows():
            if str(r.get("record_id", "")).strip() == key:
                return r
        return None

    def append_record_row(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = _now_iso()
        payload = dict(data)
        payload.update({"record_id": uuid.uuid4().hex, "created_at": now, "updated_at": now})
        headers = _header_row(self.records)
        if not headers:
            raise RuntimeError("sleep_records sheet has no header row.")
        row = _row_from_dict(headers, payload)
        _with_retry("append_row(record)", lambda: self.records.append_row(row))
        self._invalidate("records:")
        return payload

    def update_record_row(self, record_id: str, patch: Dict[str, Any]) -> bool:
        row_idx = _find_row_index(self.records, "record_id", record_id)
        if row_idx is None:
            return False
        headers = _header_row(self.records)
        current = _with_retry("row_values(record)", lambda: self.records.row_values(row_idx))
        data = {k: v for k, v in patch.items() if k not in ("record_id", "created_at")}
        data["updated_at"] = _now_iso()
        row = _row_from_dict(headers, data, base=current)
        rng = f"A{row_idx}:{_col_letter(len(headers))}{row_idx}"
        _with_retry("update(record)", lambda: self.records.update(range_name=rng, values=[row]))
        self._invalidate("records:")
        return True

    def delete_record_row(self, record_id: str) -> bool:
        row_idx = _find_row_index(self.records, "record_id", record_id)
        if row_idx is None:
            return False
        _with_retry("delete_rows(record)", lambda: self.records.delete_rows(row_idx))
        self._invalidate("records:")
        return True

    # -------- Audit log --------

    def append_admin_log(self, level: str, action: str, username: str, detail: str) -> None:
        payload = {
            "timestamp": _now_iso(),
            "level": str(level or "info"),
            "action": str(action or ""),
            "username": str(username or ""),
            "detail": str(detail or ""),
        }
        try:
            row = _row_from_dict(_header_row(self.admin_logs), payload)
            _with_retry("append_row(admin_log)", lambda: self.admin_logs.append_row(row))
            self._invalidate("admin_logs:")
        except Exception:
            # audit writes must not break the calling operation
            return

    def get_recent_admin_logs(self, limit: int = 50) -> List[Dict[str, Any]]:
        out = list(self._cached_records("admin_logs:all", self.admin_logs))
        out.sort(key=lambda r: str(r.get("timestamp", "")), reverse=True)
        return out[: max(0, int(limit))]
