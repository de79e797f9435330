"""
Distribution and trend extractors over the filtered working set.
"""
from typing import Dict, Optional

import numpy as np
import pandas as pd

from harvest_analyzer.config import AnalyticsConfig, FORMAT_MONTH, config as default_config


def _safe_pct(numerator: float, denominator: float) -> float:
    return float(numerator / denominator * 100) if denominator > 0 else 0.0


def compute_summary_stats(df: pd.DataFrame) -> Dict[str, float]:
    """
    Headline statistics for the filtered set.

    Rates are percentages; every ratio is 0 when its denominator is 0.
    """
    total_hours = float(df["hours"].sum())
    billable_hours = float(df.loc[df["is_billable"].astype(bool), "hours"].sum())
    internal_hours = float(df.loc[df["is_internal"].astype(bool), "hours"].sum())
    external_hours = float(df.loc[~df["is_internal"].astype(bool), "hours"].sum())
    unique_days = int(df["work_date"].dt.normalize().nunique())

    internal_rate = _safe_pct(internal_hours, total_hours)

    return {
        "total_hours": total_hours,
        "billable_hours": billable_hours,
        "internal_hours": internal_hours,
        "external_hours": external_hours,
        "utilisation_rate": _safe_pct(billable_hours, total_hours),
        "internal_rate": internal_rate,
        "external_rate": 100 - internal_rate if total_hours > 0 else 0.0,
        "unique_clients": int(df["client"].nunique()),
        "unique_projects": int(df["project"].nunique()),
        "unique_days": unique_days,
        "avg_hours_per_day": total_hours / unique_days if unique_days > 0 else 0.0,
        "entry_count": int(len(df)),
    }


def _top_n(result: pd.DataFrame, n: int, by: str = "hours") -> pd.DataFrame:
    # Stable sort: ties keep first-appearance order
    return result.sort_values(by, ascending=False, kind="mergesort").head(n).reset_index(drop=True)


def compute_client_distribution(df: pd.DataFrame, n: Optional[int] = None,
                                config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Top-N clients by hours.

    Returns DataFrame with: client, hours, is_internal, share_pct
    (share of total filtered hours, capped at 100).
    """
    config = config or default_config
    n = config.top_clients if n is None else n

    result = df.groupby("client", sort=False).agg(hours=("hours", "sum")).reset_index()
    result["is_internal"] = result["client"].map(config.is_internal_client).astype(bool)

    total = df["hours"].sum()
    result["share_pct"] = np.where(
        total > 0,
        np.minimum(result["hours"] / (total if total > 0 else 1) * 100, 100),
        0.0,
    )

    return _top_n(result, n)


def compute_project_distribution(df: pd.DataFrame, n: Optional[int] = None,
                                 config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Top-N (client, project) pairs by hours.

    Returns DataFrame with:
        project_key ("{client} - {project}"), client, project,
        hours, billable_hours, rate (billable %), is_internal
    """
    config = config or default_config
    n = config.top_projects if n is None else n

    work = df.assign(
        project_key=df["client"] + " - " + df["project"],
        billable_hours=np.where(df["is_billable"], df["hours"], 0.0),
    )

    result = work.groupby("project_key", sort=False).agg(
        client=("client", "first"),
        project=("project", "first"),
        hours=("hours", "sum"),
        billable_hours=("billable_hours", "sum"),
        is_internal=("is_internal", "first"),
    ).reset_index()

    result["rate"] = np.where(
        result["hours"] > 0,
        result["billable_hours"] / result["hours"].where(result["hours"] > 0, 1) * 100,
        0.0,
    )
    result["is_internal"] = result["is_internal"].astype(bool)

    return _top_n(result, n)


def compute_monthly_trend(df: pd.DataFrame) -> pd.DataFrame:
    """
    Hours per calendar month, oldest first.

    Returns DataFrame with: month (month start), month_label,
    total_hours, internal_hours, external_hours
    """
    if len(df) == 0:
        return pd.DataFrame(columns=["month", "month_label", "total_hours", "internal_hours", "external_hours"])

    work = df.assign(
        month=df["work_date"].dt.to_period("M").dt.to_timestamp(),
        internal_hours=np.where(df["is_internal"], df["hours"], 0.0),
        external_hours=np.where(df["is_internal"], 0.0, df["hours"]),
    )

    result = work.groupby("month").agg(
        total_hours=("hours", "sum"),
        internal_hours=("internal_hours", "sum"),
        external_hours=("external_hours", "sum"),
    ).reset_index()

    result = result.sort_values("month").reset_index(drop=True)
    result.insert(1, "month_label", result["month"].dt.strftime(FORMAT_MONTH))
    return result


def compute_task_frequency(df: pd.DataFrame, n: Optional[int] = None,
                           config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Top-N tasks by hours with a display size for the task cloud.

    size = hours / 10, clamped to [12, 48].
    """
    config = config or default_config
    n = config.top_tasks if n is None else n

    named = df[df["task"] != ""]
    result = named.groupby("task", sort=False).agg(hours=("hours", "sum")).reset_index()
    result = _top_n(result, n)
    result["size"] = (result["hours"] / config.task_size_divisor).clip(
        lower=config.task_size_min, upper=config.task_size_max
    )
    return result


def compute_internal_hours_by_employee(df: pd.DataFrame) -> pd.DataFrame:
    """
    Internal hours per employee, largest first.

    share_pct is the employee's share of all internal hours, capped at 100.
    """
    internal = df[df["is_internal"].astype(bool)]
    result = internal.groupby("employee_name", sort=False).agg(hours=("hours", "sum")).reset_index()

    total = internal["hours"].sum()
    result["share_pct"] = np.where(
        total > 0,
        np.minimum(result["hours"] / (total if total > 0 else 1) * 100, 100),
        0.0,
    )
    return result.sort_values("hours", ascending=False, kind="mergesort").reset_index(drop=True)


def get_recent_entries(df: pd.DataFrame, limit: Optional[int] = None,
                       config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """First ``limit`` rows of the (date-descending) filtered set."""
    config = config or default_config
    limit = config.entry_log_limit if limit is None else limit
    return df.head(limit)
