"""
Harvest Time Entry Analyzer

Main entry point for Streamlit app.
"""
import hashlib
import logging

import streamlit as st
from pathlib import Path

# Page config must be first Streamlit command
st.set_page_config(
    page_title="Harvest Time Entry Analyzer",
    page_icon="⏱️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent))

from harvest_analyzer.config import config
from harvest_analyzer.logging_config import setup_logging
from harvest_analyzer.data.loader import load_entries, read_export
from harvest_analyzer.data.schema import IngestionError, validate_schema, display_validation_result
from harvest_analyzer.pipeline import run_analytics
from harvest_analyzer.ui.state import init_state, get_criteria, get_state, set_state, reset_state
from harvest_analyzer.ui.layout import (
    render_sidebar_filters, render_kpi_strip, render_task_cloud, section_header
)
from harvest_analyzer.ui.charts import (
    CHART_COLORS, horizontal_bar, internal_external_pie, monthly_trend_chart, weekly_hours_chart
)
from harvest_analyzer.ui.formatting import (
    alert_message, fmt_hours, fmt_percent, format_metric_df, shoutout_message
)
from harvest_analyzer.metrics.rollup import rollup_frame

setup_logging(config.log_level, config.log_json)
logger = logging.getLogger(__name__)


def render_overview(result):
    render_kpi_strip(result.summary)
    st.markdown("---")

    col1, col2 = st.columns([2, 1])
    with col1:
        if len(result.monthly_trend) > 0:
            st.plotly_chart(monthly_trend_chart(result.monthly_trend), use_container_width=True)
    with col2:
        st.plotly_chart(
            internal_external_pie(result.summary["internal_hours"], result.summary["external_hours"]),
            use_container_width=True,
        )

    section_header("Top Tasks", "Sized by hours logged")
    render_task_cloud(result.task_frequency)

    section_header("Recent Shoutouts", f"Last {config.shoutout_recent_weeks} weeks")
    if len(result.shoutouts) == 0:
        st.caption("No shoutouts this period.")
    for _, row in result.shoutouts.iterrows():
        st.success(f"🎉 **Shoutout!** {shoutout_message(row)}")


def render_utilisation(result):
    section_header("Utilization Alerts",
                   f"Below {config.low_hours_threshold:.0f}h or above {config.high_hours_threshold:.0f}h in a week")
    if len(result.alerts) == 0:
        st.caption("No alerts.")
    for _, row in result.alerts.iterrows():
        if row["alert_level"] == "low":
            st.warning(alert_message(row))
        else:
            st.error(alert_message(row))

    if len(result.weekly) > 0:
        st.plotly_chart(
            weekly_hours_chart(result.weekly, config.low_hours_threshold, config.high_hours_threshold),
            use_container_width=True,
        )

    section_header("Weekly Utilization")
    table = result.weekly[[
        "week_start", "employee_name", "hours", "billable_hours",
        "internal_hours", "external_hours", "days_logged", "utilisation",
    ]]
    st.dataframe(format_metric_df(table), use_container_width=True, hide_index=True)


def render_internal(result):
    rollup = result.rollup
    section_header("Internal Time Breakdown", f"{fmt_hours(rollup.total_hours)} internal hours")

    if len(rollup) == 0:
        st.info("No internal time in the current selection.")
        return

    for client in rollup.clients.values():
        with st.expander(f"{client.name} · {fmt_hours(client.hours)} hours"):
            for project in client.projects.values():
                st.markdown(f"**{project.name}** · {fmt_hours(project.hours)} hours")
                for task in project.tasks.values():
                    label = f"{task.name}: {fmt_hours(task.hours)}h"
                    if task.billable_hours > 0:
                        label += f" ({fmt_hours(task.billable_hours)}h billable)"
                    st.markdown(f"- {label}")
                    entries = [
                        {
                            "date": e.work_date,
                            "employee": e.employee_name,
                            "hours": e.hours,
                            "billable": e.is_billable,
                        }
                        for e in task.sorted_entries()
                    ]
                    st.dataframe(entries, use_container_width=True, hide_index=True)

    with st.expander("Flat table"):
        st.dataframe(format_metric_df(rollup_frame(rollup)), use_container_width=True, hide_index=True)

    section_header("Internal Hours by Employee")
    by_employee = result.internal_by_employee
    if len(by_employee) > 0:
        st.plotly_chart(
            horizontal_bar(by_employee, x="hours", y="employee_name", title=""),
            use_container_width=True,
        )


def render_insights(result):
    section_header("Client Hours Distribution", f"Top {config.top_clients}")
    clients = result.client_distribution.assign(
        type=result.client_distribution["is_internal"].map({True: "Internal", False: "External"})
    )
    if len(clients) > 0:
        st.plotly_chart(
            horizontal_bar(
                clients, x="hours", y="client", color="type",
                color_map={"Internal": CHART_COLORS["internal"], "External": CHART_COLORS["primary"]},
            ),
            use_container_width=True,
        )

    section_header("Top Projects by Hours", f"Top {config.top_projects}")
    cols = st.columns(3)
    for i, row in enumerate(result.project_distribution.itertuples(index=False)):
        with cols[i % 3]:
            st.metric(
                row.project_key,
                f"{fmt_hours(row.hours)}h",
                help=f"{fmt_hours(row.billable_hours)}h billable · {fmt_percent(row.rate, 0)} billable",
            )


def render_entries(result):
    entries = result.recent_entries
    section_header("Time Entries")
    display = entries[[
        "work_date", "employee_name", "client", "project", "task", "hours", "is_internal", "is_billable",
    ]].assign(is_internal=entries["is_internal"].map({True: "Internal", False: "External"}))
    st.dataframe(format_metric_df(display), use_container_width=True, hide_index=True)

    total = len(result.filtered)
    if total > len(entries):
        st.caption(f"Showing first {len(entries)} of {total:,} entries (sorted by date, newest first)")


def main():
    """Main app entry point."""
    init_state()

    st.title("Harvest Time Entry Analyzer")
    st.caption("Upload and analyze your team's time tracking data")

    upload = st.file_uploader("Upload your Harvest time entries CSV", type=["csv"])
    if upload is None:
        st.info("Upload your Harvest time entries CSV to get started.")
        return

    file_bytes = upload.getvalue()
    digest = hashlib.sha256(file_bytes).hexdigest()
    if get_state("upload_digest") != digest:
        reset_state()
        set_state("upload_digest", digest)

    with st.spinner("Loading CSV data..."):
        try:
            validation = validate_schema(read_export(file_bytes), strict=False)
            entries = load_entries(file_bytes)
        except IngestionError as e:
            st.error(f"Error loading data: {e}")
            return

    if not validation["is_valid"]:
        display_validation_result(validation)

    if len(entries) == 0:
        st.warning("No entries with a valid date were found in this file.")
        return

    criteria = get_criteria()
    result = run_analytics(entries, criteria, config)
    render_sidebar_filters(result.options)

    tabs = st.tabs(["Overview", "Utilization", "Internal", "Insights", "Entries"])
    with tabs[0]:
        render_overview(result)
    with tabs[1]:
        render_utilisation(result)
    with tabs[2]:
        render_internal(result)
    with tabs[3]:
        render_insights(result)
    with tabs[4]:
        render_entries(result)


if __name__ == "__main__":
    main()
