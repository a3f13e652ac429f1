# sleeptracker_app.py
from __future__ import annotations

import datetime as dt

import streamlit as st

from backend import app_timezone, get_repo, load_app_config
from data.cache import _cached_records
from data.state_io import init_session_defaults
from ui.views import render_calendar, render_daily_tip, render_records_list, render_statistics


def main():
    st.set_page_config(page_title="Sleep Tracker", page_icon="🛏️", layout="centered")

    cfg = load_app_config()
    try:
        repo = get_repo(cfg)
    except RuntimeError as e:
        st.error(f"Could not open the record store: {e}")
        st.stop()

    today = dt.datetime.now(app_timezone(cfg)).date()
    init_session_defaults(today)

    records = _cached_records(repo, False)

    tab_log, tab_stats, tab_cal, tab_tip = st.tabs(["🛏️ Sleep Tracker", "📊 Statistics", "📅 Calendar", "💡 Daily Tip"])
    with tab_log:
        render_records_list(repo, records, today)
    with tab_stats:
        render_statistics(records)
    with tab_cal:
        render_calendar(records)
    with tab_tip:
        render_daily_tip(today)

    if cfg.backend == "memory":
        st.sidebar.caption("Records are kept in memory for this server process.")


if __name__ == "__main__":
    main()
