#!/usr/bin/env python3
"""
Seed a database with the bundled vaccine inventory fixtures.

Creates the tables (dropping them first with ``--reset``), then writes
vaccines, receipts, lots and administration events in dependency order.

Usage:
    python3 scripts/seed_data.py
    python3 scripts/seed_data.py --database-url sqlite:///inventory.db --reset
"""

import argparse
import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
DEFAULT_DB_URL = "sqlite:///vaccine_inventory.db"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--database-url", default=DEFAULT_DB_URL,
        help=f"SQLAlchemy URL (default: {DEFAULT_DB_URL})",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="drop all tables before creating them",
    )
    parser.add_argument(
        "--fixtures", type=Path, default=None,
        help="directory of fixture JSON files (default: bundled fixtures)",
    )
    parser.add_argument("--verbose", action="store_true", help="emit JSON logs")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if not args.verbose:
        logging.disable(logging.CRITICAL)

    from vaccine_kernel.db.engine import (
        create_tables,
        drop_tables,
        get_session,
        init_engine_from_url,
    )
    from vaccine_kernel.exceptions import StorageError
    from vaccine_kernel.storage.fixtures import load_fixtures
    from vaccine_kernel.storage.sql import SqlStorage

    print()
    print("=" * 60)
    print("  SEED DATA")
    print(f"  {args.database_url}")
    print("=" * 60)

    init_engine_from_url(args.database_url, echo=False)
    if args.reset:
        drop_tables()
        print("  Tables dropped.")
    create_tables()
    print("  Tables created.")

    fixtures = load_fixtures(args.fixtures)
    session = get_session()
    storage = SqlStorage(session)
    try:
        for vaccine in fixtures.vaccines:
            storage.save_vaccine(vaccine)
        for receipt in fixtures.receipts:
            storage.save_receipt(receipt)
        for lot in fixtures.lots:
            storage.save_lot(lot)
        for event in fixtures.administration_events:
            storage.save_administration_event(event)
    except StorageError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        session.close()

    print()
    print(f"  {'Vaccines':<24} {len(fixtures.vaccines):>6}")
    print(f"  {'Receipts':<24} {len(fixtures.receipts):>6}")
    print(f"  {'Lots':<24} {len(fixtures.lots):>6}")
    print(f"  {'Administration events':<24} {len(fixtures.administration_events):>6}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
