import streamlit as st

from tracker.constants import POMODORO_MAX_HOURS, POMODORO_MAX_MINUTES


def render_pomodoro_tab(ctx):
    timer = ctx.pomodoro
    timer.check_expiry()
    for message in ctx.pop_notices():
        st.toast(message)

    view = timer.view()
    st.markdown(f"## {view['display']}")
    st.progress(min(100, int(view["progress"])))
    st.caption(f"Task: {view['task']}")

    cols = st.columns(3)
    hours = cols[0].number_input("Hours", min_value=0, max_value=POMODORO_MAX_HOURS, step=1, key="pomodoro.h")
    minutes = cols[1].number_input("Minutes", min_value=0, max_value=POMODORO_MAX_MINUTES, step=1, key="pomodoro.m")
    task = cols[2].text_input("Task", key="pomodoro.task")

    set_col, pause_col, reset_col = st.columns(3)
    if set_col.button("Set", key="pomodoro.set"):
        timer.start(hours, minutes, task)
        st.rerun()
    pause_label = "RESUME" if view["is_paused"] else "PAUSE"
    if pause_col.button(pause_label, key="pomodoro.pause", disabled=view["total_sec"] == 0):
        timer.toggle_pause()
        st.rerun()
    if reset_col.button("RESET", key="pomodoro.reset"):
        timer.reset()
        st.rerun()
