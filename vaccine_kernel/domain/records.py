"""
Records -- Immutable vaccine inventory records.

Responsibility:
    Defines the four nouns of the stock workflow: Vaccine (catalog entry),
    Lot (trackable on-hand quantity), Receipt (shipment history) and
    AdministrationEvent (doses given).  Also the derived-status vocabulary
    (LotStatus, AlertSeverity) shared by the engines.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    ``from_model()`` class methods are boundary converters invoked only by
    the SQL storage implementation.

Invariants enforced:
    - Lot.quantity_on_hand is never negative.
    - Receipt: passed + failed == received, received <= sent,
      passed <= received.
    - AdministrationEvent.doses_administered >= 1.

Failure modes:
    - ValueError on construction of a record that breaks its invariant.
      Operation-level checks (with field names) live in the inventory
      service and raise ``ValidationError`` before any record is built.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vaccine_kernel.models.administration import (
        AdministrationEvent as AdministrationEventModel,
    )
    from vaccine_kernel.models.lot import Lot as LotModel
    from vaccine_kernel.models.receipt import Receipt as ReceiptModel
    from vaccine_kernel.models.vaccine import Vaccine as VaccineModel


class LotStatus(str, Enum):
    """Derived status of a lot.  Values match the badge names in the UI."""

    OK = "ok"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    LOW_STOCK = "low-stock"


class AlertSeverity(str, Enum):
    """Severity attached to dashboard alerts."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Vaccine:
    """A catalog entry.  Immutable once a lot references it."""

    id: int
    commercial_name: str
    generic_name: str

    @classmethod
    def from_model(cls, model: VaccineModel) -> Vaccine:
        return cls(
            id=model.id,
            commercial_name=model.commercial_name,
            generic_name=model.generic_name,
        )


@dataclass(frozen=True)
class Lot:
    """
    A received, trackable quantity of one vaccine product.

    Contract:
        ``id`` is None until storage assigns one.  ``commercial_name`` and
        ``generic_name`` are copied from the catalog when the lot is created
        so listings and reports need no catalog join.  ``receipt_id`` links
        the lot to the shipment that produced it (None for seeded stock).

    Guarantees:
        ``quantity_on_hand >= 0``.
    """

    id: int | None
    vaccine_id: int
    lot_number: str
    expiration_date: date
    quantity_on_hand: int
    received_date: date
    commercial_name: str = ""
    generic_name: str = ""
    receipt_id: int | None = None

    def __post_init__(self) -> None:
        if self.quantity_on_hand < 0:
            raise ValueError(
                f"quantity_on_hand cannot be negative (got {self.quantity_on_hand})"
            )

    def with_quantity(self, quantity_on_hand: int) -> Lot:
        """Return a copy with a new on-hand quantity."""
        return replace(self, quantity_on_hand=quantity_on_hand)

    @classmethod
    def from_model(cls, model: LotModel) -> Lot:
        return cls(
            id=model.id,
            vaccine_id=model.vaccine_id,
            lot_number=model.lot_number,
            expiration_date=model.expiration_date,
            quantity_on_hand=model.quantity_on_hand,
            received_date=model.received_date,
            commercial_name=model.commercial_name,
            generic_name=model.generic_name,
            receipt_id=model.receipt_id,
        )


@dataclass(frozen=True)
class Receipt:
    """
    Immutable shipment history record.

    A receipt is final once a Lot references it through ``receipt_id``.
    ``idempotency_key`` lets a caller retry a half-applied receive without
    writing a second receipt.
    """

    id: int | None
    vaccine_id: int
    lot_number: str
    quantity_sent: int
    quantity_received: int
    doses_passed_inspection: int
    doses_failed_inspection: int
    received_date: date
    expiration_date: date
    discrepancy_reason: str | None = None
    idempotency_key: str | None = None

    def __post_init__(self) -> None:
        if (
            self.doses_passed_inspection + self.doses_failed_inspection
            != self.quantity_received
        ):
            raise ValueError(
                "doses_passed_inspection + doses_failed_inspection must equal "
                f"quantity_received ({self.quantity_received})"
            )
        if self.quantity_received > self.quantity_sent:
            raise ValueError("quantity_received cannot exceed quantity_sent")
        if self.doses_passed_inspection > self.quantity_received:
            raise ValueError(
                "doses_passed_inspection cannot exceed quantity_received"
            )

    @property
    def has_discrepancy(self) -> bool:
        return self.quantity_sent != self.quantity_received

    @classmethod
    def from_model(cls, model: ReceiptModel) -> Receipt:
        return cls(
            id=model.id,
            vaccine_id=model.vaccine_id,
            lot_number=model.lot_number,
            quantity_sent=model.quantity_sent,
            quantity_received=model.quantity_received,
            doses_passed_inspection=model.doses_passed_inspection,
            doses_failed_inspection=model.doses_failed_inspection,
            received_date=model.received_date,
            expiration_date=model.expiration_date,
            discrepancy_reason=model.discrepancy_reason,
            idempotency_key=model.idempotency_key,
        )


@dataclass(frozen=True)
class AdministrationEvent:
    """A record of doses given to patients from one lot."""

    id: int | None
    lot_id: int
    doses_administered: int
    administration_date: date

    def __post_init__(self) -> None:
        if self.doses_administered < 1:
            raise ValueError("doses_administered must be at least 1")

    @classmethod
    def from_model(cls, model: AdministrationEventModel) -> AdministrationEvent:
        return cls(
            id=model.id,
            lot_id=model.lot_id,
            doses_administered=model.doses_administered,
            administration_date=model.administration_date,
        )
