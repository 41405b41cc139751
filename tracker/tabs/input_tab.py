import streamlit as st

from tracker.constants import TOTAL_KINDS
from tracker.dates import month_name, parse_day_key, shift_month, today_key
from tracker.derivation import month_calendar
from tracker.errors import TrackerError
from tracker.models import TotalsSource

WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _month_cursor(store):
    cursor = st.session_state.get("input.month")
    if cursor is None:
        selected = store.state.selected_date
        cursor = (selected.year, selected.month)
    return cursor


def _render_calendar(ctx):
    store = ctx.store
    year, month = _month_cursor(store)
    prev_col, title_col, next_col = st.columns([1, 3, 1])
    if prev_col.button("‹", key="input.prev"):
        st.session_state["input.month"] = shift_month(year, month, -1)
        st.rerun()
    title_col.markdown(f"### {month_name(month)} {year}")
    if next_col.button("›", key="input.next"):
        st.session_state["input.month"] = shift_month(year, month, 1)
        st.rerun()

    cells = month_calendar(year, month, store.bundle.daily_totals, store.date_key, today_key(store.clock))
    for col, header in zip(st.columns(7), WEEKDAY_HEADERS):
        col.caption(header)
    for start in range(0, len(cells), 7):
        for col, cell in zip(st.columns(7), cells[start : start + 7]):
            if cell["empty"]:
                col.write("")
                continue
            label = f"{cell['day']}{' •' if cell['has_data'] else ''}"
            kind = "primary" if cell["is_selected"] else "secondary"
            if col.button(label, key=f"input.day.{cell['key']}", type=kind):
                store.select_date(parse_day_key(cell["key"]))
                st.rerun()


def _render_totals(ctx, key):
    store = ctx.store
    summary = store.day_summary(key)
    from_grid = summary["source"] is TotalsSource.GRID
    if from_grid:
        st.caption("Totals for this day come from the hourly grid.")
    cols = st.columns(len(TOTAL_KINDS))
    for col, kind in zip(cols, TOTAL_KINDS):
        value = col.number_input(
            kind.capitalize(),
            min_value=0.0,
            max_value=24.0,
            step=0.5,
            value=float(summary[kind]),
            key=f"input.total.{key}.{kind}",
            disabled=from_grid or store.read_only,
        )
        if not from_grid and not store.read_only and value != summary[kind]:
            try:
                store.set_manual_total(key, kind, value)
            except TrackerError as exc:
                st.warning(str(exc))


def _render_patterns(ctx, key):
    store = ctx.store
    st.markdown("#### Wasted time patterns")
    for index, pattern in enumerate(store.day_patterns(key)):
        auto = store.is_auto_pattern(key, pattern)
        text_col, remove_col = st.columns([5, 1])
        text_col.write(f"{pattern} · _auto from the hourly grid_" if auto else pattern)
        disabled = store.read_only or auto
        if remove_col.button("✕", key=f"input.pattern.remove.{key}.{index}", disabled=disabled):
            try:
                store.remove_pattern(key, index)
            except TrackerError as exc:
                st.warning(str(exc))
            st.rerun()
    new_pattern = st.text_input("Add a pattern", key=f"input.pattern.new.{key}", disabled=store.read_only)
    if st.button("Add", key=f"input.pattern.add.{key}", disabled=store.read_only):
        try:
            store.add_pattern(key, new_pattern)
        except TrackerError as exc:
            st.warning(str(exc))
        st.rerun()


def render_input_tab(ctx):
    _render_calendar(ctx)
    key = ctx.store.date_key
    st.markdown(f"#### {parse_day_key(key):%A, %B %d, %Y}")
    _render_totals(ctx, key)
    _render_patterns(ctx, key)
    if not ctx.store.read_only:
        with st.expander("Danger zone"):
            confirm = st.checkbox("I understand this deletes all tracked data.", key="input.reset.confirm")
            if st.button("Reset all data", disabled=not confirm, key="input.reset"):
                try:
                    ctx.store.reset_all()
                    st.success("All data cleared.")
                except TrackerError as exc:
                    st.warning(str(exc))
