"""
Tests for the internal time rollup tree.
"""
import pytest
import pandas as pd
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_analyzer.config import NO_PROJECT, NO_TASK
from harvest_analyzer.metrics.rollup import (
    InternalRollup,
    build_internal_rollup,
    rollup_frame,
)


def make_entries() -> pd.DataFrame:
    return pd.DataFrame({
        "work_date": pd.to_datetime([
            "2024-01-10", "2024-01-12", "2024-01-11", "2024-01-09", "2024-01-08", "2024-01-08",
        ]),
        "employee_name": ["Ada A", "Bob B", "Ada A", "Cy C", "Ada A", "Bob B"],
        "client": ["Onica", "Onica", "Onica", "Rackspace Innovation In Action", "ClientX", "Onica"],
        "project": ["Ops", "Ops", "", "Labs", "Web", "Ops"],
        "task": ["Admin", "Admin", "", "Research", "Build", "Hiring"],
        "hours": [2.0, 3.0, 1.5, 4.0, 8.0, 0.5],
        "is_billable": [False, True, False, False, True, False],
        "is_internal": [True, True, True, True, False, True],
    })


class TestBuildInternalRollup:
    """Tests for tree construction."""

    def test_only_internal_entries(self):
        rollup = build_internal_rollup(make_entries())

        assert list(rollup.clients) == ["Onica", "Rackspace Innovation In Action"]
        assert rollup.client("ClientX") is None

    def test_placeholders_for_empty_project_and_task(self):
        rollup = build_internal_rollup(make_entries())

        leaf = rollup.client("Onica").project(NO_PROJECT).task(NO_TASK)

        assert leaf is not None
        assert leaf.hours == 1.5

    def test_leaf_accumulates_hours_and_billable(self):
        rollup = build_internal_rollup(make_entries())

        admin = rollup.client("Onica").project("Ops").task("Admin")

        assert admin.hours == 5.0
        assert admin.billable_hours == 3.0
        assert len(admin.entries) == 2

    def test_totals_computed_from_leaves(self):
        rollup = build_internal_rollup(make_entries())

        onica = rollup.client("Onica")

        assert onica.project("Ops").hours == 5.5
        assert onica.hours == 7.0
        assert onica.billable_hours == 3.0
        assert rollup.total_hours == 11.0

    def test_completeness(self):
        """Leaf hours sum to all internal hours."""
        df = make_entries()
        rollup = build_internal_rollup(df)

        leaf_total = sum(task.hours for _, _, task in rollup.leaves())

        assert leaf_total == pytest.approx(df.loc[df["is_internal"], "hours"].sum())

    def test_each_entry_in_exactly_one_leaf(self):
        df = make_entries()
        rollup = build_internal_rollup(df)

        entry_count = sum(len(task.entries) for _, _, task in rollup.leaves())

        assert entry_count == int(df["is_internal"].sum())

    def test_sorted_entries_newest_first(self):
        rollup = build_internal_rollup(make_entries())

        admin = rollup.client("Onica").project("Ops").task("Admin")

        assert [e.work_date for e in admin.sorted_entries()] == [date(2024, 1, 12), date(2024, 1, 10)]

    def test_no_internal_entries_gives_empty_tree(self):
        df = make_entries()
        df = df[~df["is_internal"]]

        rollup = build_internal_rollup(df)

        assert len(rollup) == 0
        assert rollup.total_hours == 0

    def test_empty_tree_defaults(self):
        assert InternalRollup().total_hours == 0
        assert list(InternalRollup().leaves()) == []


class TestRollupFrame:
    """Tests for flattening the tree."""

    def test_one_row_per_leaf(self):
        frame = rollup_frame(build_internal_rollup(make_entries()))

        assert len(frame) == 4
        assert frame["hours"].sum() == pytest.approx(11.0)
        assert set(frame["task"]) == {"Admin", NO_TASK, "Research", "Hiring"}

    def test_empty_tree(self):
        frame = rollup_frame(InternalRollup())

        assert len(frame) == 0
        assert list(frame.columns) == ["client", "project", "task", "hours", "billable_hours", "entry_count"]
