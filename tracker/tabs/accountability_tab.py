import streamlit as st

from tracker.errors import TrackerError

MAX_SETUP_ROWS = 5


def _render_setup(tracker):
    st.markdown("#### Set up your accountability plan")
    entries = []
    for index in range(MAX_SETUP_ROWS):
        title_col, approach_col = st.columns(2)
        title = title_col.text_input(f"Problem {index + 1}", key=f"acct.title.{index}")
        approach = approach_col.text_input("Approach", key=f"acct.approach.{index}")
        entries.append((title, approach))
    if st.button("Start tracking", key="acct.setup"):
        try:
            tracker.setup(entries)
            st.rerun()
        except TrackerError as exc:
            st.warning(str(exc))


def render_accountability_tab(ctx):
    tracker = ctx.accountability
    if not tracker.setup_complete:
        return _render_setup(tracker)

    stats = tracker.stats()
    cols = st.columns(4)
    cols[0].metric("Days", stats["total_days"])
    cols[1].metric("Perfect days", stats["perfect_days"])
    cols[2].metric("Current streak", stats["current_streak"])
    cols[3].metric("Success rate", f"{stats['success_rate']}%")

    for problem in tracker.problems:
        with st.container(border=True):
            st.markdown(f"**{problem.title}**  \nApproach: {problem.approach}")
            st.caption(f"Streak {problem.streak} · best {problem.best_streak}")
            reflection = st.text_area("Reflection", key=f"acct.reflection.{problem.id}")
            ok_col, fail_col = st.columns(2)
            try:
                if ok_col.button("Success", key=f"acct.ok.{problem.id}"):
                    tracker.mark_problem(problem.id, True, reflection)
                    st.rerun()
                if fail_col.button("Failed", key=f"acct.fail.{problem.id}"):
                    tracker.mark_problem(problem.id, False, reflection)
                    st.rerun()
            except TrackerError as exc:
                st.warning(str(exc))

    with st.expander("Reset"):
        if st.button("Delete all accountability data", key="acct.reset"):
            tracker.reset()
            st.rerun()
