"""
In-memory storage collaborator.

Holds records in insertion-ordered dicts keyed by id.  New ids are
``max(existing) + 1``.  Seeded from the bundled fixtures by
``InMemoryStorage.from_fixtures()``; used by tests and demos.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import TypeVar

from vaccine_kernel.domain.records import (
    AdministrationEvent,
    Lot,
    Receipt,
    Vaccine,
)
from vaccine_kernel.exceptions import StorageError
from vaccine_kernel.logging_config import get_logger
from vaccine_kernel.storage.base import StorageCollaborator

logger = get_logger("storage.memory")

_R = TypeVar("_R", Vaccine, Lot, Receipt, AdministrationEvent)


def _next_id(table: dict[int, object]) -> int:
    return max(table, default=0) + 1


class InMemoryStorage(StorageCollaborator):
    """
    Dict-backed record store.

    Guarantees:
        - Records are frozen, so returning them directly cannot leak
          mutation; ``list_*`` return fresh lists.
        - A single re-entrant lock guards every table.
        - ``save_receipt`` rejects a second receipt with the same
          idempotency key, like the unique constraint of the SQL backend.
    """

    def __init__(
        self,
        vaccines: Iterable[Vaccine] = (),
        lots: Iterable[Lot] = (),
        receipts: Iterable[Receipt] = (),
        administration_events: Iterable[AdministrationEvent] = (),
    ):
        self._lock = threading.RLock()
        self._vaccines: dict[int, Vaccine] = {}
        self._lots: dict[int, Lot] = {}
        self._receipts: dict[int, Receipt] = {}
        self._events: dict[int, AdministrationEvent] = {}

        for vaccine in vaccines:
            self.save_vaccine(vaccine)
        for receipt in receipts:
            self.save_receipt(receipt)
        for lot in lots:
            self.save_lot(lot)
        for event in administration_events:
            self.save_administration_event(event)

    @classmethod
    def from_fixtures(cls) -> InMemoryStorage:
        """Build a store seeded with the bundled fixture records."""
        from vaccine_kernel.storage.fixtures import load_fixtures

        fixtures = load_fixtures()
        storage = cls(
            vaccines=fixtures.vaccines,
            lots=fixtures.lots,
            receipts=fixtures.receipts,
            administration_events=fixtures.administration_events,
        )
        logger.info(
            "memory_storage_seeded",
            extra={
                "vaccines": len(fixtures.vaccines),
                "lots": len(fixtures.lots),
                "receipts": len(fixtures.receipts),
                "administration_events": len(fixtures.administration_events),
            },
        )
        return storage

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_vaccines(self) -> Sequence[Vaccine]:
        with self._lock:
            return list(self._vaccines.values())

    def list_lots(self) -> Sequence[Lot]:
        with self._lock:
            return list(self._lots.values())

    def list_administration_events(self) -> Sequence[AdministrationEvent]:
        with self._lock:
            return list(self._events.values())

    def list_receipts(self) -> Sequence[Receipt]:
        with self._lock:
            return list(self._receipts.values())

    def get_vaccine(self, vaccine_id: int) -> Vaccine | None:
        with self._lock:
            return self._vaccines.get(vaccine_id)

    def get_lot(self, lot_id: int) -> Lot | None:
        with self._lock:
            return self._lots.get(lot_id)

    def get_receipt(self, receipt_id: int) -> Receipt | None:
        with self._lock:
            return self._receipts.get(receipt_id)

    def find_receipt_by_idempotency_key(self, key: str) -> Receipt | None:
        with self._lock:
            for receipt in self._receipts.values():
                if receipt.idempotency_key == key:
                    return receipt
            return None

    def find_lot_by_receipt(self, receipt_id: int) -> Lot | None:
        with self._lock:
            for lot in self._lots.values():
                if lot.receipt_id == receipt_id:
                    return lot
            return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _store(self, table: dict[int, _R], record: _R) -> _R:
        with self._lock:
            if record.id is None:
                record = replace(record, id=_next_id(table))
            table[record.id] = record
            return record

    def save_vaccine(self, vaccine: Vaccine) -> Vaccine:
        return self._store(self._vaccines, vaccine)

    def save_receipt(self, receipt: Receipt) -> Receipt:
        with self._lock:
            if receipt.idempotency_key is not None:
                existing = self.find_receipt_by_idempotency_key(
                    receipt.idempotency_key
                )
                if existing is not None and existing.id != receipt.id:
                    raise StorageError(
                        "save_receipt",
                        f"duplicate idempotency_key {receipt.idempotency_key!r}",
                    )
            return self._store(self._receipts, receipt)

    def save_lot(self, lot: Lot) -> Lot:
        return self._store(self._lots, lot)

    def save_administration_event(
        self, event: AdministrationEvent
    ) -> AdministrationEvent:
        return self._store(self._events, event)

    def delete_administration_event(self, event_id: int) -> None:
        with self._lock:
            self._events.pop(event_id, None)
