#!/usr/bin/env python3
"""
View the dashboard and a monthly report.

Reads from a database seeded by seed_data.py, or from the bundled fixtures
with ``--fixtures``.  Optionally writes the JSON/CSV export.

Usage:
    python3 scripts/view_reports.py --fixtures --month 2023-12 --as-of 2024-01-01
    python3 scripts/view_reports.py --database-url sqlite:///vaccine_inventory.db \\
        --export-dir reports --format json
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

DEFAULT_DB_URL = "sqlite:///vaccine_inventory.db"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="View vaccine inventory reports")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--database-url", default=DEFAULT_DB_URL)
    source.add_argument(
        "--fixtures", action="store_true",
        help="report over the bundled fixtures instead of a database",
    )
    parser.add_argument("--month", help="report month as YYYY-MM (default: current)")
    parser.add_argument(
        "--as-of", type=date.fromisoformat,
        help="evaluate expiry as of this date (default: today)",
    )
    parser.add_argument("--policy", type=Path, help="policy YAML file")
    parser.add_argument("--export-dir", type=Path)
    parser.add_argument("--format", choices=("json", "csv"), default="json")
    return parser.parse_args(argv)


def print_dashboard(metrics) -> None:
    print()
    print("  DASHBOARD")
    print("  " + "-" * 56)
    print(f"  {'Total doses on hand':<32} {metrics.total_doses:>10}")
    print(f"  {'Doses administered (all time)':<32} {metrics.administered_doses:>10}")
    print(f"  {'Expiring soon':<32} {metrics.expiring_soon:>10}")
    print(f"  {'Expired':<32} {metrics.expired:>10}")
    print(f"  {'Low stock':<32} {metrics.low_stock:>10}")
    for alert in metrics.alerts:
        print(f"  [{alert.severity.value.upper():<7}] {alert.title}: {alert.message}")
    if metrics.low_stock_lots:
        print()
        print("  Low stock lots")
        for lot in metrics.low_stock_lots:
            print(
                f"    {lot.commercial_name:<24} {lot.lot_number:<12}"
                f" {lot.quantity_on_hand:>6}"
            )


def print_monthly_report(report) -> None:
    summary = report.summary
    print()
    print(f"  MONTHLY REPORT: {report.window.label}")
    print("  " + "-" * 56)
    print(f"  {'Total inventory':<32} {summary.total_inventory:>10}")
    print(f"  {'Total lots':<32} {summary.total_lots:>10}")
    print(f"  {'Administered this month':<32} {summary.monthly_administered:>10}")
    print(f"  {'Expiring soon':<32} {summary.expiring_soon:>10}")
    print(f"  {'Expired':<32} {summary.expired:>10}")
    print(f"  {'Low stock':<32} {summary.low_stock:>10}")
    print()
    print(f"  {'Vaccine':<24} {'Lots':>5} {'Doses':>7} {'Exp.soon':>9} {'Expired':>8}")
    for row in report.breakdown:
        print(
            f"  {row.vaccine_name:<24} {row.lot_count:>5} {row.total_doses:>7}"
            f" {row.expiring_soon_count:>9} {row.expired_count:>8}"
        )


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.disable(logging.CRITICAL)

    from vaccine_config import get_active_policy
    from vaccine_kernel.domain.clock import DeterministicClock, SystemClock
    from vaccine_kernel.exceptions import StorageError
    from vaccine_kernel.storage.memory import InMemoryStorage
    from vaccine_engines.reporting import parse_month
    from vaccine_modules.reporting import ReportingService, as_of

    clock = DeterministicClock(as_of(args.as_of)) if args.as_of else SystemClock()
    policy = get_active_policy(args.policy)

    session = None
    if args.fixtures:
        storage = InMemoryStorage.from_fixtures()
    else:
        from vaccine_kernel.db.engine import get_session, init_engine_from_url
        from vaccine_kernel.storage.sql import SqlStorage

        init_engine_from_url(args.database_url, echo=False)
        session = get_session()
        storage = SqlStorage(session)

    service = ReportingService(storage, clock, policy)
    try:
        window = parse_month(args.month) if args.month else service.report_months(1)[0]
        print_dashboard(service.dashboard())
        print_monthly_report(
            service.monthly_report(window.start.year, window.start.month)
        )
        if args.export_dir:
            export = service.export_json if args.format == "json" else service.export_csv
            path = export(window.start.year, window.start.month, args.export_dir)
            print()
            print(f"  Exported {path}")
    except (StorageError, ValueError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        if session is not None:
            session.close()

    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
