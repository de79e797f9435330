"""
Tests for distribution and trend extractors.
"""
import pytest
import pandas as pd
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_analyzer.data.normalize import empty_entries_frame
from harvest_analyzer.metrics.distributions import (
    compute_client_distribution,
    compute_internal_hours_by_employee,
    compute_monthly_trend,
    compute_project_distribution,
    compute_summary_stats,
    compute_task_frequency,
    get_recent_entries,
)


def make_entries() -> pd.DataFrame:
    return pd.DataFrame({
        "work_date": pd.to_datetime([
            "2024-02-20", "2024-02-19", "2024-01-31", "2024-01-31", "2023-12-05",
        ]),
        "employee_name": ["Ada A", "Bob B", "Ada A", "Cy C", "Bob B"],
        "client": ["ClientX", "Onica", "ClientX", "ClientY", "Onica"],
        "project": ["Web", "Ops", "App", "Web", "Ops"],
        "task": ["Build", "Admin", "Build", "", "Hiring"],
        "hours": [10.0, 4.0, 6.0, 2.0, 8.0],
        "is_billable": [True, False, True, False, False],
        "is_internal": [False, True, False, False, True],
    })


class TestSummaryStats:
    """Tests for headline statistics."""

    def test_totals_and_rates(self):
        stats = compute_summary_stats(make_entries())

        assert stats["total_hours"] == 30.0
        assert stats["billable_hours"] == 16.0
        assert stats["internal_hours"] == 12.0
        assert stats["external_hours"] == 18.0
        assert stats["utilisation_rate"] == pytest.approx(16 / 30 * 100)
        assert stats["internal_rate"] == pytest.approx(40.0)
        assert stats["external_rate"] == pytest.approx(60.0)

    def test_distinct_counts(self):
        stats = compute_summary_stats(make_entries())

        assert stats["unique_clients"] == 3
        assert stats["unique_projects"] == 3
        assert stats["unique_days"] == 4
        assert stats["avg_hours_per_day"] == pytest.approx(7.5)
        assert stats["entry_count"] == 5

    def test_empty_set_has_zero_rates(self):
        stats = compute_summary_stats(empty_entries_frame())

        assert stats["total_hours"] == 0
        assert stats["utilisation_rate"] == 0
        assert stats["internal_rate"] == 0
        assert stats["external_rate"] == 0
        assert stats["avg_hours_per_day"] == 0

    def test_zero_hours_has_zero_rates(self):
        df = make_entries().assign(hours=0.0)

        stats = compute_summary_stats(df)

        assert stats["utilisation_rate"] == 0
        assert stats["internal_rate"] == 0


class TestClientDistribution:
    """Tests for the top-N client distribution."""

    def test_sorted_by_hours(self):
        result = compute_client_distribution(make_entries())

        assert result["client"].tolist() == ["ClientX", "Onica", "ClientY"]
        assert result["hours"].tolist() == [16.0, 12.0, 2.0]

    def test_internal_flag_and_share(self):
        result = compute_client_distribution(make_entries())

        assert result["is_internal"].tolist() == [False, True, False]
        assert result["share_pct"].iloc[1] == pytest.approx(40.0)

    def test_top_n(self):
        df = pd.concat([make_entries().assign(client=f"C{i:02d}", hours=float(i)) for i in range(15)],
                       ignore_index=True)

        result = compute_client_distribution(df)

        assert len(result) == 10
        assert result["client"].iloc[0] == "C14"

    def test_empty(self):
        assert len(compute_client_distribution(empty_entries_frame())) == 0


class TestProjectDistribution:
    """Tests for the top-N project distribution."""

    def test_keyed_by_client_and_project(self):
        result = compute_project_distribution(make_entries())

        assert result["project_key"].tolist() == [
            "Onica - Ops", "ClientX - Web", "ClientX - App", "ClientY - Web",
        ]
        assert result["hours"].tolist() == [12.0, 10.0, 6.0, 2.0]

    def test_billable_rate(self):
        result = compute_project_distribution(make_entries()).set_index("project_key")

        assert result.loc["ClientX - Web", "billable_hours"] == 10.0
        assert result.loc["ClientX - Web", "rate"] == pytest.approx(100.0)
        assert result.loc["Onica - Ops", "rate"] == 0
        assert bool(result.loc["Onica - Ops", "is_internal"])

    def test_zero_hours_rate_is_zero(self):
        result = compute_project_distribution(make_entries().assign(hours=0.0))

        assert (result["rate"] == 0).all()

    def test_top_nine(self):
        df = pd.concat([make_entries().assign(project=f"P{i}") for i in range(5)], ignore_index=True)

        assert len(compute_project_distribution(df)) == 9


class TestMonthlyTrend:
    """Tests for the monthly series."""

    def test_grouped_by_month_ascending(self):
        result = compute_monthly_trend(make_entries())

        assert result["month_label"].tolist() == ["Dec 2023", "Jan 2024", "Feb 2024"]
        assert result["total_hours"].tolist() == [8.0, 8.0, 14.0]
        assert result["internal_hours"].tolist() == [8.0, 0.0, 4.0]
        assert result["external_hours"].tolist() == [0.0, 8.0, 10.0]

    def test_empty(self):
        result = compute_monthly_trend(empty_entries_frame())

        assert len(result) == 0
        assert "total_hours" in result.columns


class TestTaskFrequency:
    """Tests for the task cloud data."""

    def test_skips_empty_tasks(self):
        result = compute_task_frequency(make_entries())

        assert "" not in result["task"].tolist()
        assert result["task"].tolist() == ["Build", "Hiring", "Admin"]

    def test_size_clamped(self):
        df = pd.DataFrame({
            "work_date": pd.to_datetime(["2024-01-01"] * 3),
            "employee_name": ["A"] * 3,
            "client": ["C"] * 3,
            "project": ["P"] * 3,
            "task": ["Tiny", "Mid", "Huge"],
            "hours": [5.0, 250.0, 900.0],
            "is_billable": [True] * 3,
            "is_internal": [False] * 3,
        })

        result = compute_task_frequency(df).set_index("task")

        assert result.loc["Tiny", "size"] == 12
        assert result.loc["Mid", "size"] == 25
        assert result.loc["Huge", "size"] == 48

    def test_top_twenty(self):
        df = pd.concat([make_entries().assign(task=f"T{i}") for i in range(25)], ignore_index=True)

        assert len(compute_task_frequency(df)) == 20


class TestInternalByEmployee:
    """Tests for internal hours per employee."""

    def test_only_internal_hours(self):
        result = compute_internal_hours_by_employee(make_entries())

        assert result["employee_name"].tolist() == ["Bob B"]
        assert result["hours"].tolist() == [12.0]
        assert result["share_pct"].tolist() == [100.0]

    def test_empty(self):
        assert len(compute_internal_hours_by_employee(empty_entries_frame())) == 0


class TestRecentEntries:
    def test_limit(self):
        df = pd.concat([make_entries()] * 30, ignore_index=True)

        assert len(get_recent_entries(df)) == 100
        assert len(get_recent_entries(df, limit=5)) == 5
