"""
Layout components: header, sidebar filters, KPI strip, task cloud.
"""
import html

import pandas as pd
import streamlit as st
from typing import Dict, Optional

from harvest_analyzer.config import ALL, DATE_RANGE_LABELS, DATE_RANGE_PRESETS
from harvest_analyzer.data.lookups import FilterOptions
from harvest_analyzer.ui.formatting import fmt_count, fmt_hours, fmt_percent
from harvest_analyzer.ui.state import (
    get_state, on_client_change, on_project_change, reset_filters
)


# =============================================================================
# SIDEBAR FILTERS
# =============================================================================

def _client_label(client: str, options: FilterOptions) -> str:
    if client == ALL:
        return "All Clients"
    suffix = "Internal" if options.client_is_internal.get(client, False) else "External"
    return f"{client} ({suffix})"


def _with_selection(choices, key: str) -> list:
    # Keep a stale selection visible instead of crashing the widget
    values = [ALL] + list(choices)
    current = get_state(key)
    if current not in values:
        values.append(current)
    return values


def render_sidebar_filters(options: FilterOptions):
    """Render sidebar with the cascading filter controls."""
    st.sidebar.header("Filters")

    st.sidebar.selectbox(
        "Employee",
        options=_with_selection(options.employees, "filter_employee"),
        format_func=lambda x: "All Employees" if x == ALL else x,
        key="filter_employee",
    )

    clients = [ALL] + list(options.internal_clients) + list(options.external_clients)
    if get_state("filter_client") not in clients:
        clients.append(get_state("filter_client"))
    st.sidebar.selectbox(
        "Client",
        options=clients,
        format_func=lambda x: _client_label(x, options),
        key="filter_client",
        on_change=on_client_change,
    )

    st.sidebar.selectbox(
        "Project",
        options=_with_selection(options.projects, "filter_project"),
        format_func=lambda x: "All Projects" if x == ALL else x,
        key="filter_project",
        on_change=on_project_change,
        disabled=get_state("filter_client") == ALL,
    )

    st.sidebar.selectbox(
        "Task",
        options=_with_selection(options.tasks, "filter_task"),
        format_func=lambda x: "All Tasks" if x == ALL else x,
        key="filter_task",
        disabled=get_state("filter_project") == ALL,
    )

    st.sidebar.selectbox(
        "Date Range",
        options=list(DATE_RANGE_PRESETS.keys()),
        format_func=lambda x: DATE_RANGE_LABELS[x],
        key="filter_date_range",
    )

    st.sidebar.button("Reset Filters", on_click=reset_filters)


# =============================================================================
# KPI CARDS
# =============================================================================

def render_kpi_strip(summary: Dict[str, float]):
    """Render horizontal strip of KPI cards from summary stats."""
    cols = st.columns(4)

    with cols[0]:
        st.metric("Total Hours", fmt_hours(summary["total_hours"]),
                  help=f"{fmt_count(summary['entry_count'])} entries")
    with cols[1]:
        st.metric("Utilization", fmt_percent(summary["utilisation_rate"]),
                  help=f"{fmt_hours(summary['billable_hours'])} billable hours")
    with cols[2]:
        st.metric("Internal Hours", fmt_hours(summary["internal_hours"]),
                  help=f"{fmt_percent(summary['internal_rate'])} of total")
    with cols[3]:
        st.metric("External Hours", fmt_hours(summary["external_hours"]),
                  help=f"{fmt_percent(summary['external_rate'])} of total")

    cols = st.columns(3)
    with cols[0]:
        st.metric("Clients", fmt_count(summary["unique_clients"]))
    with cols[1]:
        st.metric("Projects", fmt_count(summary["unique_projects"]))
    with cols[2]:
        st.metric("Avg Hours / Day", fmt_hours(summary["avg_hours_per_day"]))


# =============================================================================
# TASK CLOUD
# =============================================================================

def render_task_cloud(tasks: pd.DataFrame):
    """Render top tasks as a word cloud sized by hours."""
    if len(tasks) == 0:
        st.info("No tasks in the current selection.")
        return

    words = [
        f'<span title="{html.escape(row.task)}: {fmt_hours(row.hours)} hours" '
        f'style="font-size: {row.size:.0f}px; margin: 0 8px; color: #4F46E5;">'
        f"{html.escape(row.task)}</span>"
        for row in tasks.itertuples(index=False)
    ]
    st.markdown(
        f'<div style="line-height: 2.2; text-align: center;">{"".join(words)}</div>',
        unsafe_allow_html=True,
    )


# =============================================================================
# SECTION HEADERS
# =============================================================================

def section_header(title: str, description: Optional[str] = None):
    """Render section header with optional description."""
    st.subheader(title)
    if description:
        st.caption(description)
