"""
Pytest fixtures for the vaccine inventory test suite.

Provides:
- Structured logging configuration and a JSON log capture fixture
- A deterministic clock pinned to 2024-01-01 12:00 UTC
- In-memory storage seeded from the bundled fixtures
- SQLite-backed SQL storage (fresh in-memory database per test)
- Inventory and reporting services wired to the above
"""

import json
import logging
from collections.abc import Generator
from datetime import UTC, date, datetime
from io import StringIO

import pytest

from vaccine_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from vaccine_kernel.domain.clock import DeterministicClock
from vaccine_kernel.domain.policy import InventoryPolicy
from vaccine_kernel.domain.records import Lot
from vaccine_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from vaccine_kernel.storage.fixtures import load_fixtures
from vaccine_kernel.storage.memory import InMemoryStorage
from vaccine_kernel.storage.sql import SqlStorage
from vaccine_modules.inventory import InventoryService
from vaccine_modules.reporting import ReportingService

# Instant every fixture-based expectation is computed against.
FIXTURE_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture vaccine_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, inventory_service):
            inventory_service.adjust_quantity(4, 200)
            logs = captured_logs()
            assert any(r["message"] == "lot_quantity_adjusted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("vaccine_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and policy
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock(FIXTURE_NOW)


@pytest.fixture
def policy():
    return InventoryPolicy.with_defaults()


# =============================================================================
# Storage fixtures
# =============================================================================


@pytest.fixture
def fixture_set():
    return load_fixtures()


@pytest.fixture
def memory_storage():
    """In-memory storage seeded with the bundled fixtures."""
    return InMemoryStorage.from_fixtures()


@pytest.fixture
def empty_storage():
    return InMemoryStorage()


@pytest.fixture
def sql_session():
    """Session on a fresh in-memory SQLite database with all tables."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    session = get_session()
    yield session
    session.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def sql_storage(sql_session):
    """SqlStorage seeded with the bundled fixtures."""
    storage = SqlStorage(sql_session)
    fixtures = load_fixtures()
    for vaccine in fixtures.vaccines:
        storage.save_vaccine(vaccine)
    for receipt in fixtures.receipts:
        storage.save_receipt(receipt)
    for lot in fixtures.lots:
        storage.save_lot(lot)
    for event in fixtures.administration_events:
        storage.save_administration_event(event)
    return storage


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def inventory_service(memory_storage, deterministic_clock):
    """Provide an InventoryService over seeded in-memory storage."""
    return InventoryService(memory_storage, deterministic_clock)


@pytest.fixture
def reporting_service(memory_storage, deterministic_clock):
    """Provide a ReportingService over seeded in-memory storage."""
    return ReportingService(memory_storage, deterministic_clock)


# =============================================================================
# Record factories
# =============================================================================


@pytest.fixture
def make_lot():
    """Factory fixture building standalone Lot snapshots."""

    def _make(
        quantity_on_hand: int = 50,
        expiration_date: date = date(2024, 6, 30),
        lot_id: int = 1,
        commercial_name: str = "Comirnaty",
        generic_name: str = "COVID-19 mRNA",
        lot_number: str | None = None,
        received_date: date = date(2023, 6, 1),
    ) -> Lot:
        return Lot(
            id=lot_id,
            vaccine_id=1,
            lot_number=lot_number or f"LOT{lot_id:04d}",
            expiration_date=expiration_date,
            quantity_on_hand=quantity_on_hand,
            received_date=received_date,
            commercial_name=commercial_name,
            generic_name=generic_name,
        )

    return _make
