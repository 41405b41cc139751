import streamlit as st

from tracker.tabs.accountability_tab import render_accountability_tab
from tracker.tabs.hourly_tab import render_hourly_tab
from tracker.tabs.input_tab import render_input_tab
from tracker.tabs.pomodoro_tab import render_pomodoro_tab
from tracker.tabs.reports_tab import render_reports_tab


TAB_OPTIONS = [
    "Hourly",
    "Input",
    "Reports",
    "Pomodoro",
    "Accountability",
]


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "Input":
        return _render_input(ctx)

    if active == "Reports":
        return _render_reports(ctx)

    if active == "Pomodoro":
        return _render_pomodoro(ctx)

    if active == "Accountability":
        return _render_accountability(ctx)

    return _render_hourly(ctx)


@st.fragment
def _render_hourly(ctx):
    render_hourly_tab(ctx)


@st.fragment
def _render_input(ctx):
    render_input_tab(ctx)


@st.fragment
def _render_reports(ctx):
    render_reports_tab(ctx)


@st.fragment(run_every=1)
def _render_pomodoro(ctx):
    render_pomodoro_tab(ctx)


@st.fragment
def _render_accountability(ctx):
    render_accountability_tab(ctx)
