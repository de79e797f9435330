"""
Row normalizer: raw export rows -> typed time entries.

The normalized frame is the working set for every downstream stage. Rows
without a parseable date never make it into the frame.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from harvest_analyzer.config import (
    AnalyticsConfig,
    BILLABLE_YES,
    ENTRY_COLUMNS,
    RAW_COLUMNS,
    config as default_config,
)
from harvest_analyzer.data.schema import IngestionError, missing_required_columns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeEntry:
    """Single normalized time entry."""
    work_date: date
    employee_name: str
    client: str
    project: str
    task: str
    hours: float
    is_billable: bool
    is_internal: bool
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))


# Leading decimal number, the way a lenient float parse reads "7.5h"
_LEADING_NUMBER = r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)"


def _parse_date_value(value) -> pd.Timestamp:
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return pd.NaT
    # Keep the wall-clock calendar day of offset-bearing values
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def _parse_dates(values: pd.Series) -> pd.Series:
    try:
        parsed = pd.to_datetime(values, errors="coerce", format="mixed")
    except ValueError:
        # Mixed UTC offsets cannot share one tz-aware column
        parsed = None

    if parsed is None or not pd.api.types.is_datetime64_any_dtype(parsed):
        parsed = pd.to_datetime(values.map(_parse_date_value))
    elif parsed.dt.tz is not None:
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize()


def _parse_hours(values: pd.Series) -> pd.Series:
    leading = values.astype(str).str.extract(_LEADING_NUMBER, expand=False)
    hours = pd.to_numeric(leading, errors="coerce").astype(float)
    return hours.replace([np.inf, -np.inf], np.nan).fillna(0.0)


def empty_entries_frame() -> pd.DataFrame:
    """Normalized frame with no rows but the canonical dtypes."""
    return pd.DataFrame({
        "work_date": pd.Series(dtype="datetime64[ns]"),
        "employee_name": pd.Series(dtype=object),
        "client": pd.Series(dtype=object),
        "project": pd.Series(dtype=object),
        "task": pd.Series(dtype=object),
        "hours": pd.Series(dtype=float),
        "is_billable": pd.Series(dtype=bool),
        "is_internal": pd.Series(dtype=bool),
    })


def _raw_frame(rows: Union[pd.DataFrame, Iterable[Mapping]]) -> pd.DataFrame:
    if isinstance(rows, pd.DataFrame):
        return rows.copy()

    try:
        records = list(rows)
    except TypeError as exc:
        raise IngestionError(f"Time entry rows are not iterable: {exc}") from exc

    for position, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise IngestionError(
                f"Row {position} is a {type(record).__name__}, expected a column mapping"
            )

    return pd.DataFrame.from_records(records)


def normalize_rows(rows: Union[pd.DataFrame, Iterable[Mapping]],
                   config: Optional[AnalyticsConfig] = None) -> pd.DataFrame:
    """
    Normalize raw export rows into the working frame.

    Args:
        rows: Iterable of {column name: string} mappings, or a DataFrame of them
        config: Supplies the internal-client set

    Returns:
        DataFrame with ENTRY_COLUMNS followed by passthrough columns.
        Rows with a missing or unparseable date are dropped.

    Raises:
        IngestionError: if the rows cannot be read as mappings at all
    """
    config = config or default_config
    raw = _raw_frame(rows)

    if len(raw) == 0:
        return empty_entries_frame()

    missing = missing_required_columns(raw.columns)
    if missing:
        logger.warning("Export is missing columns %s; treating them as empty", missing)
        for col in missing:
            raw[col] = ""

    text = {key: raw[col].fillna("").astype(str) for key, col in RAW_COLUMNS.items()}

    df = pd.DataFrame({
        "work_date": _parse_dates(raw[RAW_COLUMNS["date"]]),
        "employee_name": text["first_name"] + " " + text["last_name"],
        "client": text["client"],
        "project": text["project"],
        "task": text["task"],
        "hours": _parse_hours(raw[RAW_COLUMNS["hours"]]),
        "is_billable": text["billable"] == BILLABLE_YES,
    }, index=raw.index)
    df["is_internal"] = df["client"].isin(config.internal_clients)

    extra_cols = [col for col in raw.columns
                  if col not in RAW_COLUMNS.values() and col not in ENTRY_COLUMNS]
    for col in extra_cols:
        df[col] = raw[col]

    valid = df["work_date"].notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.debug("Dropped %d of %d rows without a valid date", dropped, len(df),
                     extra={"row_count": dropped})

    return df[valid].reset_index(drop=True)


def normalize_row(row: Mapping, config: Optional[AnalyticsConfig] = None) -> Optional[TimeEntry]:
    """Normalize a single raw row. Returns None when the row is rejected."""
    df = normalize_rows([row], config)
    if len(df) == 0:
        return None
    return to_entries(df)[0]


def to_entries(df: pd.DataFrame) -> List[TimeEntry]:
    """Typed view over a normalized frame."""
    extra_cols = [col for col in df.columns if col not in ENTRY_COLUMNS]
    entries = []
    for record in df.to_dict("records"):
        entries.append(TimeEntry(
            work_date=pd.Timestamp(record["work_date"]).date(),
            employee_name=record["employee_name"],
            client=record["client"],
            project=record["project"],
            task=record["task"],
            hours=float(record["hours"]),
            is_billable=bool(record["is_billable"]),
            is_internal=bool(record["is_internal"]),
            extra={col: record[col] for col in extra_cols},
        ))
    return entries


def entries_frame(entries: Iterable[TimeEntry]) -> pd.DataFrame:
    """Build a normalized frame from TimeEntry objects."""
    rows = []
    for entry in entries:
        row = {
            "work_date": pd.Timestamp(entry.work_date),
            "employee_name": entry.employee_name,
            "client": entry.client,
            "project": entry.project,
            "task": entry.task,
            "hours": float(entry.hours),
            "is_billable": bool(entry.is_billable),
            "is_internal": bool(entry.is_internal),
        }
        row.update(entry.extra)
        rows.append(row)

    if not rows:
        return empty_entries_frame()
    return pd.DataFrame(rows)
