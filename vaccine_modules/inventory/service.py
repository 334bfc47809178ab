"""
Inventory Module Service (``vaccine_modules.inventory.service``).

Responsibility
--------------
Validated state transitions over lot records: receive a shipment (with the
inspection pass/fail split), record administered doses, and adjust an
on-hand quantity.  Each operation checks every precondition before asking
the storage collaborator for any write.

Architecture
------------
Layer: **Modules** -- stateful orchestration wrapper around a
``StorageCollaborator``.  Thresholds come from ``InventoryPolicy``; status
derivation lives in ``vaccine_engines``.

Invariants
----------
- Receipt-then-lot is one logical operation.  A receipt is final only once
  a lot references it.  Retrying with the same ``idempotency_key`` finishes
  a half-applied receive by writing the missing lot, and returns the
  existing lot when both writes already happened.  A key reused with a
  different shipment is rejected.
- An administration event never outlives a failed lot decrement; it is
  deleted before the storage error propagates.
- Read-modify-write on one lot runs under that lot's lock
  (``LotLockRegistry``), so concurrent administrations never lose updates.
- ``quantity_on_hand`` never goes negative.

Failure Modes
-------------
- ``ValidationError`` naming one offending field.
- ``LotNotFoundError`` / ``VaccineNotFoundError`` / ``ReceiptNotFoundError``
  for unknown references.
- ``StorageError`` from the collaborator, re-raised unchanged.  When the
  second write of a two-write operation fails an error log names the
  orphaned record first.

Usage::

    service = InventoryService(InMemoryStorage.from_fixtures(), clock)
    lot = service.receive_shipment(
        vaccine_id=3, lot_number="Y020001",
        quantity_sent=100, quantity_received=100, doses_passed=98,
        expiration_date=date(2025, 6, 30), received_date=date(2024, 1, 2),
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from vaccine_kernel.domain.clock import Clock, SystemClock
from vaccine_kernel.domain.policy import InventoryPolicy
from vaccine_kernel.domain.records import (
    AdministrationEvent,
    Lot,
    Receipt,
    Vaccine,
)
from vaccine_kernel.exceptions import (
    LotNotFoundError,
    ReceiptNotFoundError,
    StorageError,
    ValidationError,
    VaccineNotFoundError,
)
from vaccine_kernel.logging_config import LogContext, get_logger
from vaccine_kernel.storage.base import StorageCollaborator
from vaccine_engines.listing import administrable_lots
from vaccine_modules.inventory.locks import LotLockRegistry

logger = get_logger("modules.inventory.service")


def validate_shipment(
    lot_number: str,
    quantity_sent: int,
    quantity_received: int,
    doses_passed: int,
    expiration_date: date,
    received_date: date,
    discrepancy_reason: str | None,
) -> None:
    """
    Check receive-shipment preconditions in form order.

    Raises:
        ValidationError: for the first violated precondition.
    """
    if not lot_number or not lot_number.strip():
        raise ValidationError("lot_number", "lot number is required", lot_number)
    if quantity_sent < 1:
        raise ValidationError(
            "quantity_sent", "quantity sent must be at least 1", quantity_sent
        )
    if quantity_received < 0:
        raise ValidationError(
            "quantity_received", "quantity received cannot be negative",
            quantity_received,
        )
    if quantity_received > quantity_sent:
        raise ValidationError(
            "quantity_received",
            "received quantity cannot exceed sent quantity",
            quantity_received,
        )
    if doses_passed < 0:
        raise ValidationError(
            "doses_passed", "passed inspection count cannot be negative",
            doses_passed,
        )
    if doses_passed > quantity_received:
        raise ValidationError(
            "doses_passed",
            "passed inspection cannot exceed received quantity",
            doses_passed,
        )
    if expiration_date <= received_date:
        raise ValidationError(
            "expiration_date",
            "expiration date must be after received date",
            expiration_date,
        )
    if quantity_sent != quantity_received and not (
        discrepancy_reason and discrepancy_reason.strip()
    ):
        raise ValidationError(
            "discrepancy_reason",
            "discrepancy reason is required when sent and received quantities differ",
            discrepancy_reason,
        )


_REPLAY_FIELDS = (
    "vaccine_id",
    "lot_number",
    "quantity_sent",
    "quantity_received",
    "doses_passed_inspection",
    "expiration_date",
    "received_date",
)


def _check_replay(receipt: Receipt, **requested: object) -> None:
    """Reject an idempotency key reused for a different shipment."""
    mismatched = [
        name for name in _REPLAY_FIELDS
        if getattr(receipt, name) != requested[name]
    ]
    if mismatched:
        raise ValidationError(
            "idempotency_key",
            f"key already used for receipt {receipt.id} with different "
            f"{', '.join(mismatched)}",
            receipt.idempotency_key,
        )


class InventoryService:
    """
    Orchestrates inventory mutations through a storage collaborator.

    Contract
    --------
    Every public mutator accepts semantically typed values (ints, dates),
    validates them, then persists through the collaborator and returns the
    stored ``Lot``.

    Non-goals
    ---------
    - No retries: storage failures surface to the caller.
    - No audit record for manual adjustments beyond the structured log.
    """

    def __init__(
        self,
        storage: StorageCollaborator,
        clock: Clock | None = None,
        policy: InventoryPolicy | None = None,
        locks: LotLockRegistry | None = None,
    ):
        self._storage = storage
        self._clock = clock or SystemClock()
        self._policy = policy or InventoryPolicy.with_defaults()
        self._locks = locks or LotLockRegistry()

    @property
    def policy(self) -> InventoryPolicy:
        return self._policy

    # =========================================================================
    # Reads
    # =========================================================================

    def list_vaccines(self) -> Sequence[Vaccine]:
        return self._storage.list_vaccines()

    def get_vaccine(self, vaccine_id: int) -> Vaccine:
        vaccine = self._storage.get_vaccine(vaccine_id)
        if vaccine is None:
            raise VaccineNotFoundError(vaccine_id)
        return vaccine

    def list_lots(self) -> Sequence[Lot]:
        return self._storage.list_lots()

    def get_receipt(self, receipt_id: int) -> Receipt:
        receipt = self._storage.get_receipt(receipt_id)
        if receipt is None:
            raise ReceiptNotFoundError(receipt_id)
        return receipt

    def get_lot(self, lot_id: int) -> Lot:
        lot = self._storage.get_lot(lot_id)
        if lot is None:
            raise LotNotFoundError(lot_id)
        return lot

    def administrable_lots(self, now: datetime | None = None) -> tuple[Lot, ...]:
        """Lots with stock on hand that have not expired as of ``now``."""
        return administrable_lots(
            self._storage.list_lots(), now or self._clock.now()
        )

    # =========================================================================
    # Receipts
    # =========================================================================

    def receive_shipment(
        self,
        vaccine_id: int,
        lot_number: str,
        quantity_sent: int,
        quantity_received: int,
        doses_passed: int,
        expiration_date: date,
        received_date: date,
        discrepancy_reason: str | None = None,
        idempotency_key: str | None = None,
    ) -> Lot:
        """
        Receive a shipment: persist a Receipt, then the Lot it produces.

        Preconditions:
            - lot_number non-blank; quantity_sent >= 1.
            - 0 <= quantity_received <= quantity_sent.
            - 0 <= doses_passed <= quantity_received.
            - expiration_date > received_date.
            - discrepancy_reason non-empty when sent != received.
            - vaccine_id refers to a catalog entry.

        Postconditions:
            - A Receipt with doses_failed = received - passed exists.
            - A Lot with quantity_on_hand = doses_passed references it.

        Raises:
            ValidationError, VaccineNotFoundError, StorageError.
        """
        with LogContext.bind(operation="receive_shipment"):
            validate_shipment(
                lot_number=lot_number,
                quantity_sent=quantity_sent,
                quantity_received=quantity_received,
                doses_passed=doses_passed,
                expiration_date=expiration_date,
                received_date=received_date,
                discrepancy_reason=discrepancy_reason,
            )
            vaccine = self.get_vaccine(vaccine_id)

            if idempotency_key is None:
                return self._receive(
                    vaccine, lot_number, quantity_sent, quantity_received,
                    doses_passed, expiration_date, received_date,
                    discrepancy_reason, None,
                )

            with self._locks.hold(("receipt", idempotency_key)):
                existing = self._storage.find_receipt_by_idempotency_key(
                    idempotency_key
                )
                if existing is not None:
                    _check_replay(
                        existing,
                        vaccine_id=vaccine.id,
                        lot_number=lot_number.strip(),
                        quantity_sent=quantity_sent,
                        quantity_received=quantity_received,
                        doses_passed_inspection=doses_passed,
                        expiration_date=expiration_date,
                        received_date=received_date,
                    )
                    return self._resume_receipt(existing)
                return self._receive(
                    vaccine, lot_number, quantity_sent, quantity_received,
                    doses_passed, expiration_date, received_date,
                    discrepancy_reason, idempotency_key,
                )

    def _receive(
        self,
        vaccine: Vaccine,
        lot_number: str,
        quantity_sent: int,
        quantity_received: int,
        doses_passed: int,
        expiration_date: date,
        received_date: date,
        discrepancy_reason: str | None,
        idempotency_key: str | None,
    ) -> Lot:
        receipt = self._storage.save_receipt(Receipt(
            id=None,
            vaccine_id=vaccine.id,
            lot_number=lot_number.strip(),
            quantity_sent=quantity_sent,
            quantity_received=quantity_received,
            doses_passed_inspection=doses_passed,
            doses_failed_inspection=quantity_received - doses_passed,
            received_date=received_date,
            expiration_date=expiration_date,
            discrepancy_reason=(discrepancy_reason or "").strip() or None,
            idempotency_key=idempotency_key,
        ))
        logger.info("receipt_recorded", extra={
            "receipt_id": receipt.id,
            "vaccine_id": vaccine.id,
            "lot_number": receipt.lot_number,
            "quantity_sent": quantity_sent,
            "quantity_received": quantity_received,
            "doses_passed_inspection": receipt.doses_passed_inspection,
            "doses_failed_inspection": receipt.doses_failed_inspection,
            "has_discrepancy": receipt.has_discrepancy,
        })
        return self._write_receipt_lot(receipt, vaccine)

    def _resume_receipt(self, receipt: Receipt) -> Lot:
        lot = self._storage.find_lot_by_receipt(receipt.id)
        if lot is not None:
            logger.info("receipt_replayed", extra={
                "receipt_id": receipt.id,
                "lot_id": lot.id,
                "idempotency_key": receipt.idempotency_key,
            })
            return lot
        logger.warning("receipt_completion_resumed", extra={
            "receipt_id": receipt.id,
            "idempotency_key": receipt.idempotency_key,
        })
        return self._write_receipt_lot(
            receipt, self.get_vaccine(receipt.vaccine_id)
        )

    def _write_receipt_lot(self, receipt: Receipt, vaccine: Vaccine) -> Lot:
        try:
            lot = self._storage.save_lot(Lot(
                id=None,
                vaccine_id=vaccine.id,
                lot_number=receipt.lot_number,
                expiration_date=receipt.expiration_date,
                quantity_on_hand=receipt.doses_passed_inspection,
                received_date=receipt.received_date,
                commercial_name=vaccine.commercial_name,
                generic_name=vaccine.generic_name,
                receipt_id=receipt.id,
            ))
        except StorageError:
            logger.error(
                "receipt_lot_write_failed",
                extra={
                    "receipt_id": receipt.id,
                    "idempotency_key": receipt.idempotency_key,
                },
                exc_info=True,
            )
            raise

        logger.info("lot_received", extra={
            "lot_id": lot.id,
            "receipt_id": receipt.id,
            "quantity_on_hand": lot.quantity_on_hand,
            "expiration_date": lot.expiration_date.isoformat(),
        })
        return lot

    # =========================================================================
    # Administration
    # =========================================================================

    def record_administration(
        self,
        lot_id: int,
        doses_administered: int,
        administration_date: date | None = None,
    ) -> Lot:
        """
        Record doses given from a lot and decrement its on-hand quantity.

        Preconditions:
            - lot_id refers to an existing lot.
            - 1 <= doses_administered <= lot.quantity_on_hand.

        Postconditions:
            - An AdministrationEvent is persisted.
            - The lot's quantity_on_hand is reduced by doses_administered.

        Raises:
            LotNotFoundError, ValidationError, StorageError.
        """
        when = administration_date or self._clock.today()
        with LogContext.bind(operation="record_administration", lot_id=lot_id):
            with self._locks.hold(lot_id):
                lot = self.get_lot(lot_id)
                if doses_administered < 1:
                    raise ValidationError(
                        "doses_administered",
                        "must administer at least 1 dose",
                        doses_administered,
                    )
                if doses_administered > lot.quantity_on_hand:
                    raise ValidationError(
                        "doses_administered",
                        "cannot administer more doses than available in stock",
                        doses_administered,
                    )

                event = self._storage.save_administration_event(AdministrationEvent(
                    id=None,
                    lot_id=lot_id,
                    doses_administered=doses_administered,
                    administration_date=when,
                ))
                try:
                    updated = self._storage.save_lot(
                        lot.with_quantity(lot.quantity_on_hand - doses_administered)
                    )
                except StorageError:
                    logger.error(
                        "administration_lot_write_failed",
                        extra={"administration_event_id": event.id},
                        exc_info=True,
                    )
                    self._withdraw_event(event)
                    raise

            logger.info("administration_recorded", extra={
                "administration_event_id": event.id,
                "doses_administered": doses_administered,
                "administration_date": when.isoformat(),
                "quantity_on_hand": updated.quantity_on_hand,
            })
            return updated

    def _withdraw_event(self, event: AdministrationEvent) -> None:
        """Delete an event whose lot decrement failed.

        A failed delete is logged; the caller re-raises the original lot
        write error either way.
        """
        try:
            self._storage.delete_administration_event(event.id)
        except StorageError:
            logger.error(
                "administration_withdraw_failed",
                extra={"administration_event_id": event.id},
                exc_info=True,
            )
            return
        logger.warning("administration_withdrawn", extra={
            "administration_event_id": event.id,
        })

    # =========================================================================
    # Adjustments
    # =========================================================================

    def adjust_quantity(self, lot_id: int, new_quantity: int) -> Lot:
        """
        Overwrite a lot's on-hand quantity (manual correction).

        Raises:
            LotNotFoundError, ValidationError, StorageError.
        """
        with LogContext.bind(operation="adjust_quantity", lot_id=lot_id):
            if new_quantity < 0:
                raise ValidationError(
                    "new_quantity", "quantity cannot be negative", new_quantity
                )
            with self._locks.hold(lot_id):
                lot = self.get_lot(lot_id)
                updated = self._storage.save_lot(lot.with_quantity(new_quantity))

            logger.info("lot_quantity_adjusted", extra={
                "previous_quantity": lot.quantity_on_hand,
                "new_quantity": new_quantity,
            })
            return updated
