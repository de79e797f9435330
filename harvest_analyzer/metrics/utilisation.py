"""
Weekly utilisation metrics pack.

Single source of truth for: week bucketing, weekly employee totals,
utilisation alerts, and shoutouts.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, FrozenSet, List, Optional, Tuple

import numpy as np
import pandas as pd

from harvest_analyzer.config import AnalyticsConfig, config as default_config


WEEKLY_COLUMNS = [
    "week_start",
    "employee_name",
    "hours",
    "billable_hours",
    "internal_hours",
    "external_hours",
    "days_logged",
    "utilisation",
    "is_low_alert",
    "is_high_alert",
    "is_shoutout",
]


def week_start(dates: pd.Series) -> pd.Series:
    """Monday of each date's ISO week (Sunday belongs to the week before)."""
    days = dates.dt.normalize()
    return days - pd.to_timedelta(days.dt.weekday, unit="D")


def week_start_date(value: date) -> date:
    """Scalar form of week_start."""
    return (pd.Timestamp(value).normalize() - pd.Timedelta(days=value.weekday())).date()


def _split_hours(df: pd.DataFrame) -> pd.DataFrame:
    return df.assign(
        billable_hours=np.where(df["is_billable"], df["hours"], 0.0),
        internal_hours=np.where(df["is_internal"], df["hours"], 0.0),
        external_hours=np.where(df["is_internal"], 0.0, df["hours"]),
    )


def classify_weeks(weekly: pd.DataFrame,
                   config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """Add utilisation %, alert and shoutout flags to weekly totals."""
    config = config or default_config
    weekly = weekly.copy()

    has_hours = weekly["hours"] > 0
    billable_ratio = np.where(has_hours, weekly["billable_hours"] / weekly["hours"].where(has_hours, 1), 0.0)

    weekly["utilisation"] = billable_ratio * 100
    weekly["is_low_alert"] = weekly["hours"] < config.low_hours_threshold
    weekly["is_high_alert"] = weekly["hours"] > config.high_hours_threshold
    weekly["is_shoutout"] = (
        has_hours
        & (billable_ratio > config.shoutout_min_ratio)
        & (weekly["hours"] >= config.shoutout_min_hours)
    )
    return weekly


def compute_weekly_utilisation(df: pd.DataFrame,
                               config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Compute weekly utilisation per employee.

    Returns DataFrame (one row per week_start x employee) with:
    - hours, billable_hours, internal_hours, external_hours
    - days_logged (distinct calendar days with an entry)
    - utilisation (%), is_low_alert, is_high_alert, is_shoutout

    Sorted by week_start descending; within a week employees keep the order
    in which they first appear in ``df``.
    """
    if len(df) == 0:
        return pd.DataFrame(columns=WEEKLY_COLUMNS)

    work = _split_hours(df)
    work["week_start"] = week_start(work["work_date"])

    weekly = work.groupby(["week_start", "employee_name"], sort=False).agg(
        hours=("hours", "sum"),
        billable_hours=("billable_hours", "sum"),
        internal_hours=("internal_hours", "sum"),
        external_hours=("external_hours", "sum"),
        days_logged=("work_date", "nunique"),
    ).reset_index()

    weekly = weekly.sort_values("week_start", ascending=False, kind="mergesort").reset_index(drop=True)

    return classify_weeks(weekly, config)[WEEKLY_COLUMNS]


@dataclass(frozen=True)
class WeeklyUtilisationRecord:
    """One employee's totals for one week. Flags are derived on access."""
    week_start: date
    employee_name: str
    hours: float = 0.0
    billable_hours: float = 0.0
    internal_hours: float = 0.0
    external_hours: float = 0.0
    days: FrozenSet[date] = frozenset()
    config: AnalyticsConfig = field(default=default_config, repr=False, compare=False)

    @property
    def days_logged(self) -> int:
        return len(self.days)

    @property
    def billable_ratio(self) -> float:
        if self.hours <= 0:
            return 0.0
        return self.billable_hours / self.hours

    @property
    def utilisation(self) -> float:
        return self.billable_ratio * 100

    @property
    def is_low_alert(self) -> bool:
        return self.hours < self.config.low_hours_threshold

    @property
    def is_high_alert(self) -> bool:
        return self.hours > self.config.high_hours_threshold

    @property
    def is_shoutout(self) -> bool:
        return (
            self.hours > 0
            and self.billable_ratio > self.config.shoutout_min_ratio
            and self.hours >= self.config.shoutout_min_hours
        )


def weekly_utilisation_records(
    df: pd.DataFrame,
    config: Optional[AnalyticsConfig] = None,
) -> List[Tuple[date, Dict[str, WeeklyUtilisationRecord]]]:
    """
    Weekly utilisation as [(week_start, {employee: record})], newest week first.
    """
    config = config or default_config
    weekly = compute_weekly_utilisation(df, config)
    if len(weekly) == 0:
        return []

    keyed = df.assign(week_start=week_start(df["work_date"]))
    days = {
        key: frozenset(ts.date() for ts in group["work_date"])
        for key, group in keyed.groupby(["week_start", "employee_name"])
    }

    result = []
    for week, group in weekly.groupby("week_start", sort=False):
        employees = {}
        for row in group.itertuples(index=False):
            employees[row.employee_name] = WeeklyUtilisationRecord(
                week_start=week.date(),
                employee_name=row.employee_name,
                hours=float(row.hours),
                billable_hours=float(row.billable_hours),
                internal_hours=float(row.internal_hours),
                external_hours=float(row.external_hours),
                days=days[(week, row.employee_name)],
                config=config,
            )
        result.append((week.date(), employees))

    return result


def get_utilisation_alerts(weekly: pd.DataFrame) -> pd.DataFrame:
    """
    Weekly rows outside the healthy hours band.

    Adds alert_level: 'low' or 'high'.
    """
    if len(weekly) == 0:
        return weekly.assign(alert_level=pd.Series(dtype=object))

    alerts = weekly[weekly["is_low_alert"] | weekly["is_high_alert"]].copy()
    alerts["alert_level"] = np.where(alerts["is_low_alert"], "low", "high")
    return alerts


def get_shoutouts(weekly: pd.DataFrame, recent_weeks: Optional[int] = None,
                  config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Shoutout-qualifying weekly rows, limited to the most recent weeks.

    Args:
        recent_weeks: Number of most recent weeks to consider
            (defaults to config.shoutout_recent_weeks)
    """
    config = config or default_config
    if recent_weeks is None:
        recent_weeks = config.shoutout_recent_weeks

    if len(weekly) == 0:
        return weekly

    recent = weekly["week_start"].drop_duplicates().head(recent_weeks)
    in_window = weekly["week_start"].isin(recent)
    return weekly[in_window & weekly["is_shoutout"].astype(bool)]
