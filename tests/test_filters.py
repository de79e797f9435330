"""
Tests for filter criteria and the filter pipeline.
"""
import pytest
import pandas as pd
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_analyzer.config import ALL
from harvest_analyzer.data.filters import (
    FilterCriteria,
    apply_filters,
    days_between,
    filter_by_date_range,
)


NOW = pd.Timestamp("2024-03-15")


def make_entries() -> pd.DataFrame:
    return pd.DataFrame({
        "work_date": pd.to_datetime([
            "2024-03-01", "2024-03-14", "2024-03-08", "2024-03-07", "2024-03-14", "2023-01-01",
        ]),
        "employee_name": ["Ada A", "Ada A", "Bob B", "Bob B", "Cy C", "Ada A"],
        "client": ["Alpha", "Alpha", "Alpha", "Onica", "Beta", "Alpha"],
        "project": ["Web", "Web", "App", "Ops", "Web", "Web"],
        "task": ["Build", "Design", "Build", "Admin", "Build", "Build"],
        "hours": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "is_billable": [True, True, False, False, True, True],
        "is_internal": [False, False, False, True, False, False],
    })


class TestFilterCriteriaCascade:
    """Tests for the client -> project -> task cascade."""

    def test_defaults_are_unfiltered(self):
        criteria = FilterCriteria()

        assert criteria.is_unfiltered
        assert criteria.date_range == "all"

    def test_selecting_client_clears_project_and_task(self):
        criteria = FilterCriteria(client="Alpha", project="Web", task="Build")

        updated = criteria.with_client("Beta")

        assert updated.client == "Beta"
        assert updated.project == ALL
        assert updated.task == ALL

    def test_selecting_project_clears_task(self):
        criteria = FilterCriteria(client="Alpha", project="Web", task="Build")

        updated = criteria.with_project("App")

        assert updated.project == "App"
        assert updated.task == ALL
        assert updated.client == "Alpha"

    def test_resetting_client_resets_everything_below_in_one_update(self):
        """Client -> project -> task, then client back to all."""
        criteria = FilterCriteria().with_client("Alpha").with_project("Web").with_task("Build")
        assert (criteria.client, criteria.project, criteria.task) == ("Alpha", "Web", "Build")

        reset = criteria.with_client(ALL)

        assert (reset.client, reset.project, reset.task) == (ALL, ALL, ALL)

    def test_updates_do_not_mutate_original(self):
        criteria = FilterCriteria(client="Alpha", project="Web")

        criteria.with_client("Beta")

        assert criteria.client == "Alpha"
        assert criteria.project == "Web"

    def test_employee_and_date_range_do_not_cascade(self):
        criteria = FilterCriteria(client="Alpha", project="Web", task="Build")

        updated = criteria.with_employee("Ada A").with_date_range("week")

        assert (updated.client, updated.project, updated.task) == ("Alpha", "Web", "Build")

    def test_unknown_date_range_rejected(self):
        with pytest.raises(ValueError):
            FilterCriteria(date_range="fortnight")


class TestDateRange:
    """Tests for date range presets."""

    def test_seven_days_inclusive_eight_excluded(self):
        """Exactly 7 days back is kept, 8 days back is dropped."""
        df = make_entries()

        result = filter_by_date_range(df, "week", now=NOW)

        kept = set(result["work_date"].dt.strftime("%Y-%m-%d"))
        assert "2024-03-08" in kept
        assert "2024-03-07" not in kept
        assert "2024-03-14" in kept

    def test_all_time_keeps_everything(self):
        df = make_entries()

        assert len(filter_by_date_range(df, "all", now=NOW)) == len(df)

    def test_year_preset(self):
        df = make_entries()

        result = filter_by_date_range(df, "year", now=NOW)

        assert len(result) == 5

    def test_future_dates_count_by_distance(self):
        """Distance is absolute, so near-future entries are kept."""
        df = make_entries().assign(work_date=pd.to_datetime(["2024-03-20"] * 6))

        assert len(filter_by_date_range(df, "week", now=NOW)) == 6

    def test_days_rounded_half_up(self):
        dates = pd.Series(pd.to_datetime(["2024-03-08 12:00", "2024-03-08 12:01"]))

        result = days_between(NOW, dates)

        assert result.tolist() == [7.0, 6.0]

    def test_timezone_aware_now(self):
        """An aware now is compared by its wall-clock time."""
        df = make_entries()

        result = filter_by_date_range(df, "week", now=pd.Timestamp("2024-03-15", tz="UTC"))

        assert len(result) == len(filter_by_date_range(df, "week", now=NOW))

    def test_now_defaults_to_current_time(self):
        """Without an explicit now, today's entry is within the last week."""
        today = pd.Timestamp.now().normalize()
        df = make_entries().assign(work_date=[today] * 6)

        assert len(filter_by_date_range(df, "week")) == 6


class TestApplyFilters:
    """Tests for the complete filter pipeline."""

    def test_no_criteria_sorts_date_descending(self):
        result = apply_filters(make_entries(), FilterCriteria(), now=NOW)

        assert len(result) == 6
        assert result["work_date"].is_monotonic_decreasing

    def test_ties_keep_input_order(self):
        """Entries sharing a date keep their relative order."""
        result = apply_filters(make_entries(), FilterCriteria(), now=NOW)

        same_day = result[result["work_date"] == pd.Timestamp("2024-03-14")]
        assert same_day["employee_name"].tolist() == ["Ada A", "Cy C"]

    def test_equality_filters_combine(self):
        criteria = FilterCriteria(employee="Ada A").with_client("Alpha").with_project("Web").with_task("Build")

        result = apply_filters(make_entries(), criteria, now=NOW)

        assert result["hours"].tolist() == [1.0, 6.0]

    def test_date_range_combines_with_equality(self):
        criteria = FilterCriteria(employee="Ada A", date_range="month")

        result = apply_filters(make_entries(), criteria, now=NOW)

        assert result["hours"].tolist() == [2.0, 1.0]

    def test_no_match_returns_empty(self):
        result = apply_filters(make_entries(), FilterCriteria(employee="Nobody"), now=NOW)

        assert len(result) == 0
