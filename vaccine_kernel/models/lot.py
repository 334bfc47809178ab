"""
Module: vaccine_kernel.models.lot
Responsibility: ORM persistence for lot-level inventory.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - quantity_on_hand >= 0 (ck_lot_quantity_non_negative).
    - lot_number is not unique globally; (vaccine_id, lot_number) is indexed
      for lookups but not constrained.

Failure modes:
    - IntegrityError on a negative quantity or an unknown vaccine_id.
"""

from datetime import date

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from vaccine_kernel.db.base import TrackedBase


class Lot(TrackedBase):
    """A received, trackable quantity of one vaccine product."""

    __tablename__ = "lots"

    __table_args__ = (
        CheckConstraint("quantity_on_hand >= 0", name="ck_lot_quantity_non_negative"),
        Index("idx_lot_vaccine_lot_number", "vaccine_id", "lot_number"),
        Index("idx_lot_receipt", "receipt_id"),
    )

    vaccine_id: Mapped[int] = mapped_column(ForeignKey("vaccines.id"), nullable=False)
    lot_number: Mapped[str] = mapped_column(String(100), nullable=False)
    expiration_date: Mapped[date] = mapped_column(nullable=False)
    quantity_on_hand: Mapped[int] = mapped_column(nullable=False, default=0)
    received_date: Mapped[date] = mapped_column(nullable=False)
    commercial_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    generic_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    receipt_id: Mapped[int | None] = mapped_column(ForeignKey("receipts.id"), nullable=True)

    def __repr__(self) -> str:
        return f"<Lot {self.id} {self.lot_number} qty={self.quantity_on_hand}>"
