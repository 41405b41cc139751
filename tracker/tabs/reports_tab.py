import pandas as pd
import streamlit as st

from tracker.constants import TOTAL_KINDS
from tracker.dates import format_hours, month_name
from tracker.derivation import monthly_report, pattern_analysis, visible_months, weekly_report, yearly_report
from tracker.tabs.hourly_tab import render_summary
from tracker.visualizations import hours_bar_chart, pattern_bar_chart

REPORT_VIEWS = ["Daily", "Weekly", "Monthly", "Yearly"]


def _period_picker(prefix, today, with_month=True):
    years = list(range(today.year - 4, today.year + 2))
    cols = st.columns(2)
    year = cols[0].selectbox("Year", years, index=years.index(today.year), key=f"{prefix}.year")
    if not with_month:
        return year, None
    month = cols[1].selectbox(
        "Month",
        list(range(1, 13)),
        index=today.month - 1,
        format_func=month_name,
        key=f"{prefix}.month",
    )
    return year, month


def _render_daily(ctx):
    key = ctx.store.date_key
    st.markdown(f"#### {key}")
    render_summary(ctx, key)
    patterns = ctx.store.day_patterns(key)
    if patterns:
        st.markdown("Patterns: " + ", ".join(patterns))
    reflection = ctx.store.reflection(key)
    if reflection:
        st.markdown(f"> {reflection}")


def _render_weekly(ctx, today):
    year, month = _period_picker("reports.weekly", today)
    weeks = weekly_report(year, month, ctx.store.bundle.daily_totals)
    frame = pd.DataFrame(weeks)
    st.dataframe(frame, hide_index=True, use_container_width=True)
    st.plotly_chart(
        hours_bar_chart(
            [f"Week {w['week_num']}" for w in weeks],
            [{kind: w[f"total_{kind}"] for kind in TOTAL_KINDS} for w in weeks],
            "Weekly totals",
        ),
        use_container_width=True,
    )


def _render_monthly(ctx, today):
    year, month = _period_picker("reports.monthly", today)
    report = monthly_report(year, month, ctx.store.bundle.daily_totals)
    cols = st.columns(3)
    for col, kind in zip(cols, TOTAL_KINDS):
        col.metric(
            f"{kind.capitalize()} total",
            format_hours(report["totals"][kind]),
            help=f"Average {report['averages'][kind]} h/day",
        )
    st.caption(f"{report['days_tracked']} of {report['days_in_month']} days tracked")
    month_patterns = {
        key: items
        for key, items in ctx.store.bundle.wasted_patterns.items()
        if key.startswith(f"{year:04d}-{month:02d}-")
    }
    analysis = pattern_analysis(month_patterns)
    if analysis:
        st.plotly_chart(pattern_bar_chart(analysis), use_container_width=True)


def _render_yearly(ctx, today):
    year, _ = _period_picker("reports.yearly", today, with_month=False)
    report = yearly_report(year, ctx.store.bundle.daily_totals)
    months = visible_months(report, today)
    frame = pd.DataFrame(
        [
            {
                "month": item["name"],
                "days tracked": item["days_tracked"],
                **{kind: round(item["totals"][kind], 1) for kind in TOTAL_KINDS},
            }
            for item in months
        ]
    )
    st.dataframe(frame, hide_index=True, use_container_width=True)
    st.plotly_chart(
        hours_bar_chart([item["name"][:3] for item in months], [item["totals"] for item in months], f"{year}"),
        use_container_width=True,
    )
    totals = report["totals"]
    st.caption(
        f"Year total: study {format_hours(totals['study'])} h, sleep {format_hours(totals['sleep'])} h, "
        f"wasted {format_hours(totals['wasted'])} h over {totals['days_tracked']} days"
    )


def render_reports_tab(ctx):
    today = ctx.store.clock().date()
    view = st.radio("Report", REPORT_VIEWS, horizontal=True, key="reports.view")
    if view == "Weekly":
        return _render_weekly(ctx, today)
    if view == "Monthly":
        return _render_monthly(ctx, today)
    if view == "Yearly":
        return _render_yearly(ctx, today)
    return _render_daily(ctx)
