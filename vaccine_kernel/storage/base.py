"""
Storage collaborator contract.

Responsibility:
    Defines the interface through which the inventory core reads and
    persists raw records.  The core never touches a backend directly.

Failure modes:
    - Any method may raise ``StorageError``; callers surface it unchanged.
    - ``get_*`` methods return None for unknown ids.  Translating that into
      ``NotFoundError`` is the caller's job.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from vaccine_kernel.domain.records import (
    AdministrationEvent,
    Lot,
    Receipt,
    Vaccine,
)


class StorageCollaborator(ABC):
    """
    Canonical record store for vaccines, lots, receipts and administrations.

    Contract:
        - ``list_*`` return snapshots; mutating a returned sequence never
          affects stored state.
        - ``save_*`` return the stored record with its identifier assigned.
        - ``save_lot`` inserts when ``lot.id`` is None, otherwise updates
          the lot with that id.
        - ``delete_administration_event`` exists only to undo an event
          whose lot decrement failed.
    """

    @abstractmethod
    def list_vaccines(self) -> Sequence[Vaccine]:
        ...

    @abstractmethod
    def list_lots(self) -> Sequence[Lot]:
        ...

    @abstractmethod
    def list_administration_events(self) -> Sequence[AdministrationEvent]:
        ...

    @abstractmethod
    def list_receipts(self) -> Sequence[Receipt]:
        ...

    @abstractmethod
    def get_vaccine(self, vaccine_id: int) -> Vaccine | None:
        ...

    @abstractmethod
    def get_lot(self, lot_id: int) -> Lot | None:
        ...

    @abstractmethod
    def get_receipt(self, receipt_id: int) -> Receipt | None:
        ...

    @abstractmethod
    def find_receipt_by_idempotency_key(self, key: str) -> Receipt | None:
        ...

    @abstractmethod
    def find_lot_by_receipt(self, receipt_id: int) -> Lot | None:
        ...

    @abstractmethod
    def save_vaccine(self, vaccine: Vaccine) -> Vaccine:
        ...

    @abstractmethod
    def save_receipt(self, receipt: Receipt) -> Receipt:
        ...

    @abstractmethod
    def save_lot(self, lot: Lot) -> Lot:
        ...

    @abstractmethod
    def save_administration_event(
        self, event: AdministrationEvent
    ) -> AdministrationEvent:
        ...

    @abstractmethod
    def delete_administration_event(self, event_id: int) -> None:
        """Remove an event; unknown ids are a no-op."""
        ...
