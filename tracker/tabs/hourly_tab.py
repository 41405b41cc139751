from datetime import date

import streamlit as st

from tracker.constants import BACK, MAIN_ACTIVITIES, MISC_ACTIVITIES, WASTED, WASTED_REASONS
from tracker.dates import format_hours, hour_label, time_range
from tracker.errors import ImportFailedError, TrackerError

EMPTY_OPTION = ""


def _options(showing_misc):
    if showing_misc:
        return [EMPTY_OPTION, *MISC_ACTIVITIES, BACK]
    return [EMPTY_OPTION, *MAIN_ACTIVITIES]


def _apply_slot(ctx, key, hour, half, widget_key):
    try:
        ctx.store.set_half_slot(key, hour, half, st.session_state.get(widget_key) or None)
    except TrackerError as exc:
        st.warning(str(exc))


def _apply_reason(ctx, key, hour, widget_key):
    try:
        ctx.store.set_wasted_reason(key, hour, st.session_state.get(widget_key))
    except TrackerError as exc:
        st.warning(str(exc))


def _render_half(ctx, column, key, hour, half, slot, locked):
    current = slot.get(half) if slot else None
    menu = ctx.store.state.misc_menu
    options = _options(menu.showing_misc(key, hour, half, current))
    widget_key = f"hourly.{key}.{hour}.{half}"
    st.session_state[widget_key] = current if current in options else EMPTY_OPTION
    column.selectbox(
        time_range(hour)[half],
        options,
        key=widget_key,
        disabled=locked,
        on_change=_apply_slot,
        args=(ctx, key, hour, half, widget_key),
    )


def render_summary(ctx, key):
    summary = ctx.store.day_summary(key)
    cols = st.columns(4)
    cols[0].metric("Study", format_hours(summary["study"]))
    cols[1].metric("Sleep", format_hours(summary["sleep"]))
    cols[2].metric("Wasted", format_hours(summary["wasted"]))
    cols[3].metric("Misc", format_hours(summary["misc_hours"]))
    if summary["overflow"]:
        st.warning(f"Accounted hours exceed 24 ({format_hours(summary['accounted'])}).")


def render_hourly_tab(ctx):
    store = ctx.store
    selected = st.date_input("Day", value=store.state.selected_date, key="hourly.date")
    if isinstance(selected, date):
        store.select_date(selected)
    key = store.date_key
    locked = store.read_only or store.is_past(key)
    if store.read_only:
        st.info("Viewing the live tracker (read-only).")
    elif store.is_past(key):
        st.caption("Past days are locked.")

    render_summary(ctx, key)

    rows = store.bundle.activity_grid.get(key)
    for hour in range(24):
        slot = rows[hour] if rows else None
        label_col, first_col, second_col, reason_col = st.columns([1, 2, 2, 2])
        label_col.markdown(f"**{hour_label(hour)}**")
        _render_half(ctx, first_col, key, hour, "first", slot, locked)
        _render_half(ctx, second_col, key, hour, "second", slot, locked)
        if slot and WASTED in (slot.first, slot.second):
            reason_key = f"hourly.reason.{key}.{hour}"
            reason_options = [EMPTY_OPTION, *WASTED_REASONS]
            current = slot.wasted_reason or EMPTY_OPTION
            if current not in reason_options:
                reason_options.append(current)
            st.session_state[reason_key] = current
            reason_col.selectbox(
                "Why?",
                reason_options,
                key=reason_key,
                disabled=locked,
                on_change=_apply_reason,
                args=(ctx, key, hour, reason_key),
            )

    _render_reflection(ctx, key, locked)
    _render_happiness(ctx, key)
    _render_export_import(ctx)


def _render_reflection(ctx, key, locked):
    st.markdown("#### Reflection")
    widget_key = f"hourly.reflection.{key}"
    text = st.text_area("How did today go?", value=ctx.store.reflection(key), key=widget_key, disabled=locked)
    save_col, clear_col = st.columns(2)
    try:
        if save_col.button("Save reflection", disabled=locked, key=f"{widget_key}.save"):
            ctx.store.set_reflection(key, text)
            st.success("Reflection saved.")
        if clear_col.button("Clear", disabled=locked, key=f"{widget_key}.clear"):
            ctx.store.clear_reflection(key)
            st.rerun()
    except TrackerError as exc:
        st.warning(str(exc))


def _render_happiness(ctx, key):
    checklist = ctx.happiness
    st.markdown("#### Happiness checklist")
    flags = checklist.day_status(key)
    for index, label in enumerate(checklist.items):
        checked = st.checkbox(label, value=flags[index], key=f"happy.{key}.{index}")
        if checked != flags[index]:
            checklist.toggle(key, index)
    completed, percent, total = checklist.completion(key)
    if total:
        st.progress(int(percent), text=f"{completed}/{total} done")
    with st.expander("Edit checklist"):
        new_label = st.text_input("New item", key="happy.new")
        try:
            if st.button("Add item", key="happy.add"):
                checklist.add_item(new_label)
                st.rerun()
            for index, label in enumerate(checklist.items):
                if st.button(f"Remove {label}", key=f"happy.remove.{index}"):
                    checklist.remove_item(index)
                    st.rerun()
        except TrackerError as exc:
            st.warning(str(exc))


def _render_export_import(ctx):
    st.markdown("#### Backup")
    filename, text = ctx.store.export_data()
    st.download_button("Export JSON", data=text, file_name=filename, mime="application/json")
    upload = st.file_uploader("Import JSON", type=["json"], key="hourly.import")
    if upload is not None and st.button("Import", key="hourly.import.run"):
        try:
            ctx.store.import_data(upload.getvalue())
            st.success("Import complete.")
        except ImportFailedError as exc:
            st.error(str(exc))
        except TrackerError as exc:
            st.warning(str(exc))
