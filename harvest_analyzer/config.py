"""
Application configuration management.
"""
import os
from dataclasses import dataclass, field
from typing import FrozenSet


DEFAULT_INTERNAL_CLIENTS = frozenset({"Onica", "Rackspace Innovation In Action"})


def _internal_clients_from_env() -> FrozenSet[str]:
    raw = os.getenv("INTERNAL_CLIENTS")
    if not raw:
        return DEFAULT_INTERNAL_CLIENTS
    return frozenset(name.strip() for name in raw.split(",") if name.strip())


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AnalyticsConfig:
    """Analytics configuration with environment overrides."""

    # Clients whose time counts as internal
    internal_clients: FrozenSet[str] = field(default_factory=_internal_clients_from_env)

    # Weekly utilisation thresholds
    low_hours_threshold: float = field(default_factory=lambda: _env_float("LOW_HOURS_THRESHOLD", 30.0))
    high_hours_threshold: float = field(default_factory=lambda: _env_float("HIGH_HOURS_THRESHOLD", 45.0))
    shoutout_min_hours: float = field(default_factory=lambda: _env_float("SHOUTOUT_MIN_HOURS", 35.0))
    shoutout_min_ratio: float = 0.90
    shoutout_recent_weeks: int = 3

    # Distribution limits
    top_clients: int = 10
    top_projects: int = 9
    top_tasks: int = 20
    entry_log_limit: int = 100

    # Task frequency sizing
    task_size_divisor: float = 10.0
    task_size_min: float = 12.0
    task_size_max: float = 48.0

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_json: bool = field(default_factory=lambda: _env_flag("LOG_JSON", False))

    def is_internal_client(self, client: str) -> bool:
        return client in self.internal_clients


# Global config instance
config = AnalyticsConfig()


# Sentinel for "no filter applied"
ALL = "all"

# Raw export column names (Harvest time entries CSV)
RAW_COLUMNS = {
    "date": "Date",
    "client": "Client",
    "project": "Project",
    "task": "Task",
    "hours": "Hours",
    "billable": "Billable?",
    "first_name": "First Name",
    "last_name": "Last Name",
}

# Required columns (hard fail in strict validation if missing)
REQUIRED_COLUMNS = list(RAW_COLUMNS.values())

# Normalized frame columns, in display order
ENTRY_COLUMNS = [
    "work_date",
    "employee_name",
    "client",
    "project",
    "task",
    "hours",
    "is_billable",
    "is_internal",
]

BILLABLE_YES = "Yes"

# Rollup placeholders for empty project/task
NO_PROJECT = "No Project"
NO_TASK = "No Task"

# Date range presets: key -> days back (None = all time)
DATE_RANGE_PRESETS = {
    "all": None,
    "week": 7,
    "month": 30,
    "quarter": 90,
    "year": 365,
}

DATE_RANGE_LABELS = {
    "all": "All Time",
    "week": "Last 7 Days",
    "month": "Last 30 Days",
    "quarter": "Last 90 Days",
    "year": "Last Year",
}

# Formatting constants
FORMAT_DATE = "%b %d, %Y"
FORMAT_MONTH = "%b %Y"
