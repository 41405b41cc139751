import streamlit as st

from tracker.auth import consume_auth_change, current_user, render_auth_controls
from tracker.context import get_context
from tracker.logging_config import configure_logging
from tracker.router import render_router
from tracker.store import DataSource, EffectiveMode

SOURCE_LABELS = {
    DataSource.LOCAL: "Your Tracker (private)",
    DataSource.LIVE: "LIVE tracker (read-only)",
}

configure_logging()
st.set_page_config(page_title="Time Tracker", page_icon="⏱", layout="wide")

user = current_user()
ctx = get_context(user)
if consume_auth_change(user):
    ctx.coordinator.on_auth_changed(user, ctx.settings.admin_uid, ctx.settings.admin_emails)

with st.sidebar:
    st.markdown("### Time Tracker")
    render_auth_controls(user)
    if ctx.store.effective_mode is EffectiveMode.ADMIN:
        st.caption("Admin: edits are published to the live tracker.")
    else:
        current = ctx.store.state.data_source
        choice = st.radio(
            "Data source",
            list(SOURCE_LABELS),
            index=list(SOURCE_LABELS).index(current),
            format_func=SOURCE_LABELS.get,
            key="sidebar.data_source",
        )
        if choice is not current:
            ctx.coordinator.set_data_source(choice)
            st.rerun()
    if not ctx.settings.live_enabled:
        st.caption("Live backend not configured; data stays on this device.")

for message in ctx.pop_notices():
    st.toast(message)

render_router(ctx)
