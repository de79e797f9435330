"""
Standard chart wrappers using Plotly.
"""
import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict, List, Optional


# =============================================================================
# CHART THEME
# =============================================================================

CHART_COLORS = {
    "primary": "#4F46E5",
    "internal": "#7C3AED",
    "external": "#3B82F6",
    "billable": "#10B981",
    "warning": "#F59E0B",
    "danger": "#dc3545",
    "neutral": "#6c757d",
}

CHART_TEMPLATE = "plotly_white"

DEFAULT_LAYOUT = {
    "template": CHART_TEMPLATE,
    "font": {"family": "Arial, sans-serif", "size": 12},
    "margin": {"l": 50, "r": 30, "t": 40, "b": 50},
    "hoverlabel": {"bgcolor": "white"},
}


def apply_layout(fig: go.Figure, **kwargs) -> go.Figure:
    """Apply standard layout to figure."""
    layout = {**DEFAULT_LAYOUT, **kwargs}
    fig.update_layout(**layout)
    return fig


# =============================================================================
# BAR CHARTS
# =============================================================================

def horizontal_bar(df: pd.DataFrame, x: str, y: str,
                   title: str = "", color: Optional[str] = None,
                   color_map: Optional[Dict] = None,
                   text: Optional[str] = None) -> go.Figure:
    """
    Create horizontal bar chart.
    """
    fig = px.bar(
        df, x=x, y=y, orientation="h",
        title=title,
        color=color,
        color_discrete_map=color_map,
        text=text,
    )

    fig.update_traces(textposition="outside")
    fig.update_layout(yaxis={"categoryorder": "total ascending"})

    return apply_layout(fig)


def grouped_bar(df: pd.DataFrame, x: str, y: List[str],
                title: str = "", barmode: str = "group",
                colors: Optional[List[str]] = None) -> go.Figure:
    """
    Create grouped or stacked bar chart.
    """
    fig = go.Figure()

    colors = colors or list(CHART_COLORS.values())

    for i, col in enumerate(y):
        fig.add_trace(go.Bar(
            name=col.replace("_", " ").title(),
            x=df[x],
            y=df[col],
            marker_color=colors[i % len(colors)],
        ))

    fig.update_layout(barmode=barmode, title=title)

    return apply_layout(fig)


# =============================================================================
# TIME SERIES
# =============================================================================

def monthly_trend_chart(trend: pd.DataFrame, title: str = "Monthly Hours Trend") -> go.Figure:
    """Stacked internal/external hours per month with a total line."""
    fig = grouped_bar(
        trend, x="month_label", y=["internal_hours", "external_hours"],
        title=title, barmode="stack",
        colors=[CHART_COLORS["internal"], CHART_COLORS["external"]],
    )
    fig.add_trace(go.Scatter(
        x=trend["month_label"],
        y=trend["total_hours"],
        name="Total Hours",
        mode="lines+markers",
        line={"color": CHART_COLORS["primary"]},
    ))
    fig.update_layout(xaxis_title="", yaxis_title="Hours")
    return fig


def internal_external_pie(internal_hours: float, external_hours: float,
                          title: str = "Internal vs External") -> go.Figure:
    """Donut chart of internal vs external hours."""
    fig = go.Figure(go.Pie(
        labels=["Internal", "External"],
        values=[internal_hours, external_hours],
        hole=0.5,
        marker={"colors": [CHART_COLORS["internal"], CHART_COLORS["external"]]},
    ))
    fig.update_layout(title=title)
    return apply_layout(fig, height=320)


def weekly_hours_chart(weekly: pd.DataFrame, low: float, high: float,
                       title: str = "Weekly Hours by Employee") -> go.Figure:
    """Weekly hours per employee with the alert band marked."""
    fig = px.line(
        weekly.sort_values("week_start"),
        x="week_start", y="hours", color="employee_name",
        title=title, markers=True,
    )
    fig.add_hrect(y0=low, y1=high, fillcolor=CHART_COLORS["billable"], opacity=0.08, line_width=0)
    fig.update_layout(xaxis_title="Week of", yaxis_title="Hours")
    return apply_layout(fig)
