from __future__ import annotations

from typing import List, Optional
import datetime as dt

import matplotlib.pyplot as plt
import streamlit as st

from data.state_io import (
    close_form,
    current_draft,
    delete_record,
    is_editing,
    open_add_form,
    save_form,
    start_editing,
    toggle_details,
)
from domain.quality import quality_choices, quality_color, quality_emoji, quality_label
from shared.record_input import RecordDraft, draft_to_record
from sleeptracker.calendar_grid import month_grid, month_quality_map, shift_month, weekday_headers
from sleeptracker.coach import daily_tip, interpret_statistics
from sleeptracker.engine import SleepRecord, format_duration, records_for_date, session_duration, summarize
from sleeptracker.plots import plot_quality_calendar, plot_sleep_bars


def _rgba_css(c) -> str:
    r, g, b, a = c
    return f"rgba({int(r * 255)},{int(g * 255)},{int(b * 255)},{a})"


def _day_cell_html(day: dt.date, quality: Optional[int], in_month: bool, selected: bool) -> str:
    bg = _rgba_css(quality_color(quality)) if quality is not None else "transparent"
    border = "2px solid #2563eb" if selected else "1px solid #e5e7eb"
    opacity = "1.0" if in_month else "0.35"
    return (
        f"<div style='text-align:center;padding:8px 0;border-radius:8px;background:{bg};"
        f"border:{border};opacity:{opacity};font-weight:600;'>{day.day}</div>"
    )


def _record_detail_lines(record: SleepRecord) -> List[str]:
    return [
        f"**Total Sleep Duration:** {format_duration(session_duration(record))}",
        f"Sleep Time: {record.sleep_time.strftime('%H:%M')}",
        f"Wake Time: {record.wake_time.strftime('%H:%M')}",
        f"Quality: {quality_emoji(record.quality)} ({quality_label(record.quality)})",
        f"Notes: {record.notes or ''}",
    ]


# ----------------------------
# Sleep Tracker tab
# ----------------------------

def render_record_form(repo):
    draft = current_draft()
    st.subheader("Edit Sleep Record" if is_editing() else "Add New Sleep Record")
    with st.form("record_form", clear_on_submit=False):
        d = st.date_input("Date", value=draft.date)
        c1, c2 = st.columns(2)
        with c1:
            sleep_t = st.time_input("Sleep Time", value=draft.sleep_time, step=300)
        with c2:
            wake_t = st.time_input("Wake Time", value=draft.wake_time, step=300)
        choices = list(quality_choices())
        q = st.radio(
            "Quality",
            choices,
            index=choices.index(draft.quality) if draft.quality in choices else 2,
            format_func=quality_emoji,
            horizontal=True,
        )
        notes = st.text_input("Notes", value=draft.notes)

        b1, b2 = st.columns(2)
        saved = b1.form_submit_button("Save Record", type="primary", use_container_width=True)
        closed = b2.form_submit_button("Close", use_container_width=True)

    if closed:
        close_form()
        st.rerun()
    if saved:
        new_draft = RecordDraft(date=d, sleep_time=sleep_t, wake_time=wake_t, quality=int(q), notes=str(notes or ""))
        try:
            save_form(repo, new_draft)
            st.success("Saved.")
            st.rerun()
        except (RuntimeError, ValueError) as e:
            st.error(f"Could not save the record: {e}")
        return

    preview = draft_to_record(draft)
    st.caption(f"Duration: {format_duration(session_duration(preview))}")


def render_records_list(repo, records: List[SleepRecord], today: dt.date):
    head_l, head_r = st.columns([4, 1])
    head_l.header("Sleep Tracker")
    if head_r.button("＋ Add", use_container_width=True, key="add_record_btn"):
        open_add_form(today)
        st.rerun()

    if st.session_state.get("form_open"):
        render_record_form(repo)
        st.divider()

    if not records:
        st.info("No sleep records yet.")
        return

    details_id = st.session_state.get("details_record_id", "")
    for r in records:
        with st.container(border=True):
            c1, c2, c3, c4 = st.columns([3, 2, 1, 1])
            if c1.button(r.date.strftime("%d %B"), key=f"details_{r.record_id}"):
                toggle_details(r.record_id)
                st.rerun()
            c2.write(format_duration(session_duration(r)))
            if c3.button("Edit", key=f"edit_{r.record_id}"):
                start_editing(r)
                st.rerun()
            if c4.button("Delete", key=f"delete_{r.record_id}"):
                try:
                    delete_record(repo, r.record_id)
                    st.rerun()
                except RuntimeError as e:
                    st.error(str(e))
            if details_id == r.record_id:
                st.write(f"Quality: {quality_emoji(r.quality)}")
                st.write(f"Notes: {r.notes or ''}")

    fig = plot_sleep_bars(records[:14], title="Recent nights (21:00 – 14:00)")
    st.pyplot(fig, clear_figure=True)
    plt.close(fig)


# ----------------------------
# Statistics tab
# ----------------------------

def render_statistics(records: List[SleepRecord]):
    st.header("Overall Statistics")
    stats = summarize(records)

    c1, c2, c3 = st.columns(3)
    c1.metric("Total Sleep Records", stats.record_count)
    c2.metric("Average Sleep Quality", f"{stats.average_quality:.1f}")
    c3.metric("Satisfaction", f"{stats.satisfaction_pct:.0f}%")

    c4, c5 = st.columns(2)
    c4.metric(
        "Average Duration",
        format_duration(stats.average_duration) if stats.average_duration is not None else "–",
    )
    c5.metric(
        "Optimal Duration",
        format_duration(stats.optimal_duration) if stats.optimal_duration is not None else "Not enough data",
    )

    for line in interpret_statistics(stats):
        st.write(f"- {line}")


# ----------------------------
# Calendar tab
# ----------------------------

def render_calendar(records: List[SleepRecord]):
    st.header("Calendar")
    year, month = st.session_state["calendar_month"]

    nav_l, nav_c, nav_r = st.columns([1, 3, 1])
    if nav_l.button("◀", key="cal_prev", use_container_width=True):
        st.session_state["calendar_month"] = shift_month(year, month, -1)
        st.rerun()
    nav_c.markdown(f"<h4 style='text-align:center'>{dt.date(year, month, 1).strftime('%B %Y')}</h4>", unsafe_allow_html=True)
    if nav_r.button("▶", key="cal_next", use_container_width=True):
        st.session_state["calendar_month"] = shift_month(year, month, 1)
        st.rerun()

    qmap = month_quality_map(records, year, month)
    selected = st.session_state.get("calendar_selected_date")
    days = month_grid(year, month)

    header_cols = st.columns(7)
    for col, name in zip(header_cols, weekday_headers()):
        col.caption(name)
    for week_start in range(0, len(days), 7):
        cols = st.columns(7)
        for col, day in zip(cols, days[week_start:week_start + 7]):
            col.markdown(_day_cell_html(day, qmap.get(day), day.month == month, day == selected), unsafe_allow_html=True)
            if col.button("·", key=f"cal_pick_{day.isoformat()}", use_container_width=True):
                st.session_state["calendar_selected_date"] = day
                st.rerun()

    with st.expander("Heat map"):
        fig = plot_quality_calendar(records, year, month)
        st.pyplot(fig, clear_figure=True)
        plt.close(fig)

    if selected is None:
        st.caption("Please select a date to view sleep records.")
        return

    st.subheader(selected.strftime("%d %B"))
    day_records = records_for_date(records, selected)
    if not day_records:
        st.caption("No sleep records for this date.")
        return
    for r in day_records:
        with st.container(border=True):
            for line in _record_detail_lines(r):
                st.markdown(line)


# ----------------------------
# Daily Tip tab
# ----------------------------

def render_daily_tip(today: dt.date):
    st.header("Daily Tip")
    if st.toggle("Reveal today's tip", key="daily_tip_flipped"):
        st.info(daily_tip(today))
    else:
        st.caption("Flip the card to see today's tip.")
