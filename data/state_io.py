from __future__ import annotations

from typing import Optional
import datetime as dt

import streamlit as st

from domain.quality import DEFAULT_QUALITY
from shared.record_input import RecordDraft, draft_from_record

from .cache import _invalidate_repo_read_caches


# ----------------------------
# Session init
# ----------------------------

def init_session_defaults(today: dt.date) -> None:
    st.session_state.setdefault("form_open", False)
    st.session_state.setdefault("editing_record_id", "")
    st.session_state.setdefault("details_record_id", "")
    st.session_state.setdefault("form_draft", _blank_draft(today))
    st.session_state.setdefault("calendar_month", (today.year, today.month))
    st.session_state.setdefault("calendar_selected_date", None)


def _blank_draft(today: dt.date) -> RecordDraft:
    return RecordDraft(
        date=today,
        sleep_time=dt.time(23, 0),
        wake_time=dt.time(7, 0),
        quality=DEFAULT_QUALITY,
        notes="",
    )


# ----------------------------
# Form state
# ----------------------------

def is_editing() -> bool:
    return bool(st.session_state.get("editing_record_id"))


def current_draft() -> RecordDraft:
    return st.session_state["form_draft"]


def set_draft(draft: RecordDraft) -> None:
    st.session_state["form_draft"] = draft


def open_add_form(today: dt.date) -> None:
    st.session_state["editing_record_id"] = ""
    st.session_state["form_draft"] = _blank_draft(today)
    st.session_state["form_open"] = True


def start_editing(record) -> None:
    st.session_state["editing_record_id"] = record.record_id
    st.session_state["details_record_id"] = record.record_id
    st.session_state["form_draft"] = draft_from_record(record)
    st.session_state["form_open"] = True


def close_form() -> None:
    st.session_state["form_open"] = False
    st.session_state["editing_record_id"] = ""


def toggle_details(record_id: str) -> None:
    cur = st.session_state.get("details_record_id", "")
    st.session_state["details_record_id"] = "" if cur == record_id else record_id


# ----------------------------
# Persistence
# ----------------------------

def save_form(repo, draft: Optional[RecordDraft] = None) -> None:
    """
    Add or update from the form draft, then close the form.
    Raises RuntimeError/ValueError from the repo; the caller shows the error.
    """
    d = draft or current_draft()
    record_id = st.session_state.get("editing_record_id", "")
    if record_id:
        ok = repo.update_record(record_id, d)
        if not ok:
            raise RuntimeError("record no longer exists")
        st.session_state["details_record_id"] = ""
    else:
        repo.add_record(d)
    set_draft(d)
    close_form()
    _invalidate_repo_read_caches()


def delete_record(repo, record_id: str) -> None:
    repo.delete_record(record_id)
    if st.session_state.get("details_record_id") == record_id:
        st.session_state["details_record_id"] = ""
    _invalidate_repo_read_caches()
