"""
Analytics pipeline: normalized entries + criteria -> every derived view.

Each stage is a pure function; this module only fixes their order. Callers
that already hold a normalized frame pass it straight to ``run_analytics`` so
that filter changes never re-run normalization.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd

from harvest_analyzer.config import AnalyticsConfig, config as default_config
from harvest_analyzer.data.filters import FilterCriteria, apply_filters
from harvest_analyzer.data.lookups import FilterOptions, build_filter_options
from harvest_analyzer.metrics.distributions import (
    compute_client_distribution,
    compute_internal_hours_by_employee,
    compute_monthly_trend,
    compute_project_distribution,
    compute_summary_stats,
    compute_task_frequency,
    get_recent_entries,
)
from harvest_analyzer.metrics.rollup import InternalRollup, build_internal_rollup
from harvest_analyzer.metrics.utilisation import (
    WeeklyUtilisationRecord,
    compute_weekly_utilisation,
    get_shoutouts,
    get_utilisation_alerts,
    weekly_utilisation_records,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsResult:
    """Every view derived from one (entries, criteria) pair."""
    criteria: FilterCriteria
    options: FilterOptions
    filtered: pd.DataFrame
    summary: Dict[str, float]
    weekly: pd.DataFrame
    weekly_records: List[Tuple[date, Dict[str, WeeklyUtilisationRecord]]]
    alerts: pd.DataFrame
    shoutouts: pd.DataFrame
    rollup: InternalRollup
    internal_by_employee: pd.DataFrame
    client_distribution: pd.DataFrame
    project_distribution: pd.DataFrame
    monthly_trend: pd.DataFrame
    task_frequency: pd.DataFrame
    recent_entries: pd.DataFrame


def run_analytics(entries: pd.DataFrame,
                  criteria: Optional[FilterCriteria] = None,
                  config: Optional[AnalyticsConfig] = None,
                  now: Optional[Union[datetime, pd.Timestamp]] = None) -> AnalyticsResult:
    """
    Run lookups, filtering and every aggregate over a normalized frame.

    Args:
        entries: Output of normalize_rows
        criteria: Filter selections (defaults to no filters)
        config: Thresholds, limits and internal-client set
        now: Reference time for date-range presets (defaults to the current time)
    """
    criteria = criteria or FilterCriteria()
    config = config or default_config

    options = build_filter_options(entries, criteria.client, criteria.project, config)
    filtered = apply_filters(entries, criteria, now=now)
    logger.debug("Filtered %d of %d entries with %s", len(filtered), len(entries), criteria)

    weekly = compute_weekly_utilisation(filtered, config)

    return AnalyticsResult(
        criteria=criteria,
        options=options,
        filtered=filtered,
        summary=compute_summary_stats(filtered),
        weekly=weekly,
        weekly_records=weekly_utilisation_records(filtered, config),
        alerts=get_utilisation_alerts(weekly),
        shoutouts=get_shoutouts(weekly, config=config),
        rollup=build_internal_rollup(filtered),
        internal_by_employee=compute_internal_hours_by_employee(filtered),
        client_distribution=compute_client_distribution(filtered, config=config),
        project_distribution=compute_project_distribution(filtered, config=config),
        monthly_trend=compute_monthly_trend(filtered),
        task_frequency=compute_task_frequency(filtered, config=config),
        recent_entries=get_recent_entries(filtered, config=config),
    )
