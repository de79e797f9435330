"""
Consistent number and display formatting.
"""
import pandas as pd
from datetime import date
from typing import Union

from harvest_analyzer.config import FORMAT_DATE


# =============================================================================
# NUMBER FORMATTERS
# =============================================================================

def fmt_hours(value: Union[float, int, None]) -> str:
    """Format hours: 1,234.5"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:,.1f}"


def fmt_percent(value: Union[float, int, None], decimals: int = 1) -> str:
    """Format percentage: 12.3%"""
    if value is None or pd.isna(value):
        return "—"
    return f"{value:,.{decimals}f}%"


def fmt_count(value: Union[float, int, None]) -> str:
    """Format count: 1,234"""
    if value is None or pd.isna(value):
        return "—"
    return f"{int(value):,}"


def fmt_date(value: Union[date, pd.Timestamp, None], fmt: str = FORMAT_DATE) -> str:
    """Format date: Jan 15, 2024"""
    if value is None or pd.isna(value):
        return "—"
    return pd.Timestamp(value).strftime(fmt)


# =============================================================================
# DATAFRAME FORMATTERS
# =============================================================================

def format_metric_df(df: pd.DataFrame) -> pd.DataFrame:
    """
    Format a metrics dataframe for display.

    Applies appropriate formatting to known column types.
    """
    df = df.copy()

    hours_cols = [
        "hours", "billable_hours", "internal_hours", "external_hours", "total_hours",
    ]
    percent_cols = ["utilisation", "rate", "share_pct"]
    date_cols = ["work_date", "week_start"]

    for col in df.columns:
        if col in hours_cols:
            df[col] = df[col].apply(fmt_hours)
        elif col in percent_cols:
            df[col] = df[col].apply(fmt_percent)
        elif col in date_cols:
            df[col] = df[col].apply(fmt_date)

    return df


def alert_message(row) -> str:
    """One-line description of a weekly utilisation alert."""
    level = "Low" if row["alert_level"] == "low" else "High"
    return (
        f"**{level} Utilization Alert**: {row['employee_name']} logged "
        f"{fmt_hours(row['hours'])} hours for week of {fmt_date(row['week_start'])}"
    )


def shoutout_message(row) -> str:
    """One-line description of a shoutout."""
    return (
        f"{row['employee_name']} - {fmt_hours(row['billable_hours'])} billable hours "
        f"({fmt_percent(row['utilisation'], 0)} utilization) "
        f"week of {fmt_date(row['week_start'], '%b %d')}"
    )
