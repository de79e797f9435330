#!/usr/bin/env python
"""
Validate a time entry export and print an analytics summary.

Usage:
    python scripts/analyze_export.py time_entries.csv
    python scripts/analyze_export.py time_entries.csv --client Onica --date-range month
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from harvest_analyzer.config import config, ALL, DATE_RANGE_PRESETS
from harvest_analyzer.logging_config import setup_logging
from harvest_analyzer.data.loader import read_export
from harvest_analyzer.data.normalize import normalize_rows
from harvest_analyzer.data.filters import FilterCriteria
from harvest_analyzer.data.schema import IngestionError, validate_schema
from harvest_analyzer.pipeline import run_analytics
from harvest_analyzer.ui.formatting import fmt_date, fmt_hours, fmt_percent

logger = logging.getLogger(__name__)


def build_criteria(args: argparse.Namespace) -> FilterCriteria:
    """Apply CLI selections in cascade order."""
    criteria = FilterCriteria(date_range=args.date_range).with_employee(args.employee)
    criteria = criteria.with_client(args.client)
    if args.client != ALL:
        criteria = criteria.with_project(args.project)
        if args.project != ALL:
            criteria = criteria.with_task(args.task)
    return criteria


def print_summary(result) -> None:
    summary = result.summary

    print("=" * 60)
    print("Time Entry Summary")
    print("=" * 60)
    print(f"  Entries:        {summary['entry_count']:,}")
    print(f"  Total hours:    {fmt_hours(summary['total_hours'])}")
    print(f"  Billable hours: {fmt_hours(summary['billable_hours'])} ({fmt_percent(summary['utilisation_rate'])})")
    print(f"  Internal hours: {fmt_hours(summary['internal_hours'])} ({fmt_percent(summary['internal_rate'])})")
    print(f"  External hours: {fmt_hours(summary['external_hours'])}")
    print(f"  Avg hours/day:  {fmt_hours(summary['avg_hours_per_day'])}")
    print()

    print("Utilization Alerts")
    print("-" * 40)
    if len(result.alerts) == 0:
        print("  none")
    for row in result.alerts.itertuples(index=False):
        print(f"  [{row.alert_level.upper():4}] {row.employee_name}: {fmt_hours(row.hours)}h "
              f"week of {fmt_date(row.week_start)}")
    print()

    print("Shoutouts")
    print("-" * 40)
    if len(result.shoutouts) == 0:
        print("  none")
    for row in result.shoutouts.itertuples(index=False):
        print(f"  {row.employee_name}: {fmt_hours(row.billable_hours)} billable hours "
              f"({fmt_percent(row.utilisation, 0)}) week of {fmt_date(row.week_start)}")
    print()

    print("Top Clients")
    print("-" * 40)
    for row in result.client_distribution.itertuples(index=False):
        marker = " (Internal)" if row.is_internal else ""
        print(f"  {row.client}{marker}: {fmt_hours(row.hours)}h")
    print()

    print("Internal Time")
    print("-" * 40)
    for client in result.rollup.clients.values():
        print(f"  {client.name}: {fmt_hours(client.hours)}h")
        for project in client.projects.values():
            print(f"    {project.name}: {fmt_hours(project.hours)}h")
            for task in project.tasks.values():
                print(f"      {task.name}: {fmt_hours(task.hours)}h")


def main():
    parser = argparse.ArgumentParser(description="Analyze a Harvest time entry export")
    parser.add_argument("export", type=Path, help="Path to the time entries CSV")
    parser.add_argument("--employee", default=ALL, help="Employee full name")
    parser.add_argument("--client", default=ALL)
    parser.add_argument("--project", default=ALL, help="Only used with --client")
    parser.add_argument("--task", default=ALL, help="Only used with --project")
    parser.add_argument(
        "--date-range",
        choices=list(DATE_RANGE_PRESETS.keys()),
        default="all",
    )
    parser.add_argument("--verbose", "-v", action="store_true")

    args = parser.parse_args()
    setup_logging("DEBUG" if args.verbose else config.log_level, config.log_json)

    if not args.export.exists():
        print(f"✗ File not found: {args.export}")
        return 1

    try:
        raw = read_export(args.export)
        validation = validate_schema(raw, strict=False)
        entries = normalize_rows(raw, config)
    except IngestionError as e:
        print(f"✗ {e}")
        return 1

    print(f"✓ Read {validation['total_rows']:,} rows, {validation['total_columns']} columns")
    if not validation["is_valid"]:
        print(f"  ✗ Missing required: {validation['missing_required']}")
    dropped = validation["total_rows"] - len(entries)
    if dropped:
        print(f"  Skipped {dropped:,} rows without a valid date")
    print()

    result = run_analytics(entries, build_criteria(args), config)
    print_summary(result)

    return 0 if validation["is_valid"] else 1


if __name__ == "__main__":
    sys.exit(main())
