"""
Fixture loader for seed data.

Reads the bundled JSON files (``fixtures/*.json``) and parses them into
domain records.  The JSON keeps the camelCase field names of the exported
mock data so files produced by the legacy front end load unchanged.

Failure modes:
    - Missing file  -> ``FileNotFoundError`` propagates.
    - Missing key   -> ``KeyError`` propagates.
    - Bad date      -> ``ValueError`` from ``date.fromisoformat``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from vaccine_kernel.domain.records import (
    AdministrationEvent,
    Lot,
    Receipt,
    Vaccine,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@dataclass(frozen=True)
class FixtureSet:
    """All seed records, in file order."""

    vaccines: tuple[Vaccine, ...]
    lots: tuple[Lot, ...]
    receipts: tuple[Receipt, ...]
    administration_events: tuple[AdministrationEvent, ...]


def load_json_file(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        return json.load(f) or []


def parse_date(value: Any) -> date:
    """Parse a date from an ISO string or pass a ``date`` through."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_vaccine(data: dict[str, Any]) -> Vaccine:
    return Vaccine(
        id=data["Id"],
        commercial_name=data["commercialName"],
        generic_name=data["genericName"],
    )


def parse_lot(data: dict[str, Any]) -> Lot:
    return Lot(
        id=data["Id"],
        vaccine_id=int(data["vaccineId"]),
        lot_number=data["lotNumber"],
        expiration_date=parse_date(data["expirationDate"]),
        quantity_on_hand=int(data["quantityOnHand"]),
        received_date=parse_date(data["receivedDate"]),
        commercial_name=data.get("commercialName", ""),
        generic_name=data.get("genericName", ""),
        receipt_id=data.get("receiptId"),
    )


def parse_receipt(data: dict[str, Any]) -> Receipt:
    return Receipt(
        id=data["Id"],
        vaccine_id=int(data["vaccineId"]),
        lot_number=data["lotNumber"],
        quantity_sent=int(data["quantitySent"]),
        quantity_received=int(data["quantityReceived"]),
        doses_passed_inspection=int(data["dosesPassedInspection"]),
        doses_failed_inspection=int(data["dosesFailedInspection"]),
        received_date=parse_date(data["receivedDate"]),
        expiration_date=parse_date(data["expirationDate"]),
        discrepancy_reason=data.get("discrepancyReason") or None,
        idempotency_key=data.get("idempotencyKey"),
    )


def parse_administration_event(data: dict[str, Any]) -> AdministrationEvent:
    return AdministrationEvent(
        id=data["Id"],
        lot_id=int(data["inventoryItemId"]),
        doses_administered=int(data["dosesAdministered"]),
        administration_date=parse_date(data["administrationDate"]),
    )


def load_fixtures(directory: Path | None = None) -> FixtureSet:
    """
    Load every fixture file from ``directory`` (default: bundled fixtures).

    Postconditions:
        Returns a ``FixtureSet`` whose record ids match the files.
    """
    base = directory or FIXTURES_DIR
    return FixtureSet(
        vaccines=tuple(
            parse_vaccine(d) for d in load_json_file(base / "vaccines.json")
        ),
        lots=tuple(parse_lot(d) for d in load_json_file(base / "inventory.json")),
        receipts=tuple(
            parse_receipt(d) for d in load_json_file(base / "receipts.json")
        ),
        administration_events=tuple(
            parse_administration_event(d)
            for d in load_json_file(base / "administration.json")
        ),
    )
