"""
SQLAlchemy storage collaborator.

Responsibility:
    Persists domain records through ORM models and converts rows back into
    frozen records with ``from_model()``.

Invariants enforced:
    - Every backend failure (``SQLAlchemyError``) rolls the session back and
      is re-raised as ``StorageError`` naming the storage operation.
    - With ``auto_commit=True`` (default) each save is its own transaction.
      With ``auto_commit=False`` the caller owns the boundary and saves only
      flush.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import contextmanager
from typing import Generator, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vaccine_kernel.domain.records import (
    AdministrationEvent,
    Lot,
    Receipt,
    Vaccine,
)
from vaccine_kernel.exceptions import StorageError
from vaccine_kernel.logging_config import get_logger
from vaccine_kernel.models.administration import (
    AdministrationEvent as AdministrationEventModel,
)
from vaccine_kernel.models.lot import Lot as LotModel
from vaccine_kernel.models.receipt import Receipt as ReceiptModel
from vaccine_kernel.models.vaccine import Vaccine as VaccineModel
from vaccine_kernel.storage.base import StorageCollaborator

logger = get_logger("storage.sql")

_T = TypeVar("_T")


class SqlStorage(StorageCollaborator):
    """Session-backed record store."""

    def __init__(self, session: Session, auto_commit: bool = True):
        self._session = session
        self._auto_commit = auto_commit

    @contextmanager
    def _guard(self, operation: str) -> Generator[Session, None, None]:
        try:
            yield self._session
            if self._auto_commit:
                self._session.commit()
            else:
                self._session.flush()
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "storage_operation_failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StorageError(operation, str(exc)) from exc

    def _read(self, operation: str, fn: Callable[[Session], _T]) -> _T:
        try:
            return fn(self._session)
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.error(
                "storage_operation_failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StorageError(operation, str(exc)) from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_vaccines(self) -> Sequence[Vaccine]:
        rows = self._read(
            "list_vaccines",
            lambda s: s.scalars(select(VaccineModel).order_by(VaccineModel.id)).all(),
        )
        return [Vaccine.from_model(r) for r in rows]

    def list_lots(self) -> Sequence[Lot]:
        rows = self._read(
            "list_lots",
            lambda s: s.scalars(select(LotModel).order_by(LotModel.id)).all(),
        )
        return [Lot.from_model(r) for r in rows]

    def list_administration_events(self) -> Sequence[AdministrationEvent]:
        rows = self._read(
            "list_administration_events",
            lambda s: s.scalars(
                select(AdministrationEventModel).order_by(AdministrationEventModel.id)
            ).all(),
        )
        return [AdministrationEvent.from_model(r) for r in rows]

    def list_receipts(self) -> Sequence[Receipt]:
        rows = self._read(
            "list_receipts",
            lambda s: s.scalars(select(ReceiptModel).order_by(ReceiptModel.id)).all(),
        )
        return [Receipt.from_model(r) for r in rows]

    def get_vaccine(self, vaccine_id: int) -> Vaccine | None:
        row = self._read("get_vaccine", lambda s: s.get(VaccineModel, vaccine_id))
        return Vaccine.from_model(row) if row is not None else None

    def get_lot(self, lot_id: int) -> Lot | None:
        row = self._read("get_lot", lambda s: s.get(LotModel, lot_id))
        return Lot.from_model(row) if row is not None else None

    def get_receipt(self, receipt_id: int) -> Receipt | None:
        row = self._read("get_receipt", lambda s: s.get(ReceiptModel, receipt_id))
        return Receipt.from_model(row) if row is not None else None

    def find_receipt_by_idempotency_key(self, key: str) -> Receipt | None:
        row = self._read(
            "find_receipt_by_idempotency_key",
            lambda s: s.scalars(
                select(ReceiptModel).where(ReceiptModel.idempotency_key == key)
            ).first(),
        )
        return Receipt.from_model(row) if row is not None else None

    def find_lot_by_receipt(self, receipt_id: int) -> Lot | None:
        row = self._read(
            "find_lot_by_receipt",
            lambda s: s.scalars(
                select(LotModel).where(LotModel.receipt_id == receipt_id)
            ).first(),
        )
        return Lot.from_model(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_vaccine(self, vaccine: Vaccine) -> Vaccine:
        with self._guard("save_vaccine") as session:
            row = session.get(VaccineModel, vaccine.id) if vaccine.id else None
            if row is None:
                row = VaccineModel(id=vaccine.id)
                session.add(row)
            row.commercial_name = vaccine.commercial_name
            row.generic_name = vaccine.generic_name
            session.flush()
        return Vaccine.from_model(row)

    def save_receipt(self, receipt: Receipt) -> Receipt:
        with self._guard("save_receipt") as session:
            row = ReceiptModel(
                id=receipt.id,
                vaccine_id=receipt.vaccine_id,
                lot_number=receipt.lot_number,
                quantity_sent=receipt.quantity_sent,
                quantity_received=receipt.quantity_received,
                doses_passed_inspection=receipt.doses_passed_inspection,
                doses_failed_inspection=receipt.doses_failed_inspection,
                discrepancy_reason=receipt.discrepancy_reason,
                received_date=receipt.received_date,
                expiration_date=receipt.expiration_date,
                idempotency_key=receipt.idempotency_key,
            )
            session.add(row)
            session.flush()
        return Receipt.from_model(row)

    def save_lot(self, lot: Lot) -> Lot:
        with self._guard("save_lot") as session:
            row = session.get(LotModel, lot.id) if lot.id else None
            if row is None:
                row = LotModel(id=lot.id)
                session.add(row)
            row.vaccine_id = lot.vaccine_id
            row.lot_number = lot.lot_number
            row.expiration_date = lot.expiration_date
            row.quantity_on_hand = lot.quantity_on_hand
            row.received_date = lot.received_date
            row.commercial_name = lot.commercial_name
            row.generic_name = lot.generic_name
            row.receipt_id = lot.receipt_id
            session.flush()
        return Lot.from_model(row)

    def save_administration_event(
        self, event: AdministrationEvent
    ) -> AdministrationEvent:
        with self._guard("save_administration_event") as session:
            row = AdministrationEventModel(
                id=event.id,
                lot_id=event.lot_id,
                doses_administered=event.doses_administered,
                administration_date=event.administration_date,
            )
            session.add(row)
            session.flush()
        return AdministrationEvent.from_model(row)

    def delete_administration_event(self, event_id: int) -> None:
        with self._guard("delete_administration_event") as session:
            row = session.get(AdministrationEventModel, event_id)
            if row is not None:
                session.delete(row)
                session.flush()
