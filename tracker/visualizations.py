from __future__ import annotations

import plotly.graph_objects as go

from tracker.constants import ACTIVITY_COLORS, SLEEPING, STUDYING, WASTED

SERIES = (("study", "Study", STUDYING), ("sleep", "Sleep", SLEEPING), ("wasted", "Wasted", WASTED))


def apply_common_plot_style(fig, title):
    fig.update_layout(
        title=title,
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=40, r=20, t=40, b=30),
        barmode="group",
        legend=dict(orientation="h", y=-0.2),
        xaxis=dict(showgrid=False, zeroline=False, showline=True, mirror=True),
        yaxis=dict(showgrid=True, zeroline=False, showline=True, mirror=True, title="hours"),
    )
    return fig


def hours_bar_chart(labels, rows, title, height=320):
    """``rows`` holds one mapping per label with study/sleep/wasted hours."""
    fig = go.Figure()
    for kind, name, activity in SERIES:
        fig.add_trace(
            go.Bar(
                x=list(labels),
                y=[float(row.get(kind, 0) or 0) for row in rows],
                name=name,
                marker_color=ACTIVITY_COLORS[activity],
            )
        )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height)
    return fig


def pattern_bar_chart(analysis, title="Wasted time patterns", height=300):
    fig = go.Figure(
        data=go.Bar(
            x=[item["count"] for item in analysis],
            y=[item["pattern"] for item in analysis],
            orientation="h",
            marker_color=ACTIVITY_COLORS[WASTED],
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=height, showlegend=False)
    fig.update_yaxes(autorange="reversed", title=None, automargin=True)
    fig.update_xaxes(title="days")
    return fig
