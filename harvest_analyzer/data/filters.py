"""
Filter criteria and the filter pipeline.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Union

import numpy as np
import pandas as pd

from harvest_analyzer.config import ALL, DATE_RANGE_PRESETS


@dataclass(frozen=True)
class FilterCriteria:
    """
    Snapshot of the user's filter selections.

    Updates go through the ``with_*`` methods, which return a new snapshot with
    the client -> project -> task cascade already applied.
    """
    employee: str = ALL
    client: str = ALL
    project: str = ALL
    task: str = ALL
    date_range: str = "all"

    def __post_init__(self):
        if self.date_range not in DATE_RANGE_PRESETS:
            raise ValueError(
                f"Unknown date range {self.date_range!r}; expected one of {list(DATE_RANGE_PRESETS)}"
            )

    def with_employee(self, employee: str) -> "FilterCriteria":
        return replace(self, employee=employee)

    def with_client(self, client: str) -> "FilterCriteria":
        """Select a client; project and task reset."""
        return replace(self, client=client, project=ALL, task=ALL)

    def with_project(self, project: str) -> "FilterCriteria":
        """Select a project; task resets."""
        return replace(self, project=project, task=ALL)

    def with_task(self, task: str) -> "FilterCriteria":
        return replace(self, task=task)

    def with_date_range(self, date_range: str) -> "FilterCriteria":
        return replace(self, date_range=date_range)

    @property
    def is_unfiltered(self) -> bool:
        return (
            self.employee == ALL and self.client == ALL and self.project == ALL
            and self.task == ALL and self.date_range == "all"
        )


def days_between(now: pd.Timestamp, dates: pd.Series) -> pd.Series:
    """Whole days between ``now`` and each date, rounded half up."""
    delta_days = (now - dates).abs() / pd.Timedelta(days=1)
    return np.floor(delta_days + 0.5)


def filter_by_date_range(df: pd.DataFrame, date_range: str,
                         now: Optional[Union[datetime, pd.Timestamp]] = None,
                         date_col: str = "work_date") -> pd.DataFrame:
    """
    Keep rows within the preset's number of days of ``now``.

    ``now`` defaults to the current time, read on every call.
    """
    if date_range not in DATE_RANGE_PRESETS:
        raise ValueError(f"Unknown date range {date_range!r}")

    days_back = DATE_RANGE_PRESETS[date_range]
    if days_back is None:
        return df

    now = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    # Working dates are naive wall-clock days
    if now.tzinfo is not None:
        now = now.tz_localize(None)
    days_diff = days_between(now, df[date_col])
    return df[(days_diff >= 0) & (days_diff <= days_back)]


def apply_filters(df: pd.DataFrame, criteria: FilterCriteria,
                  now: Optional[Union[datetime, pd.Timestamp]] = None) -> pd.DataFrame:
    """
    Apply filter criteria to the normalized frame.

    Returns the working subset sorted by date descending (stable for ties).
    """
    equality_filters = {
        "employee_name": criteria.employee,
        "client": criteria.client,
        "project": criteria.project,
        "task": criteria.task,
    }

    for col, value in equality_filters.items():
        if value != ALL:
            df = df[df[col] == value]

    df = filter_by_date_range(df, criteria.date_range, now=now)

    return df.sort_values("work_date", ascending=False, kind="mergesort").reset_index(drop=True)
