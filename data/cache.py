from __future__ import annotations

from typing import List

import streamlit as st

from sleeptracker.engine import SleepRecord


@st.cache_data(ttl=30, show_spinner=False)
def _cached_records(_repo, ascending: bool = False) -> List[SleepRecord]:
    return _repo.list_records(ascending=ascending)


def _invalidate_repo_read_caches() -> None:
    _cached_records.clear()
