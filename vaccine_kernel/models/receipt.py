"""
Module: vaccine_kernel.models.receipt
Responsibility: ORM persistence for shipment receipts (immutable history).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - doses_passed_inspection + doses_failed_inspection == quantity_received.
    - quantity_received <= quantity_sent.
    - idempotency_key is unique when present.
"""

from datetime import date

from sqlalchemy import CheckConstraint, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vaccine_kernel.db.base import TrackedBase


class Receipt(TrackedBase):
    """One received shipment, split into passed and failed inspection doses."""

    __tablename__ = "receipts"

    __table_args__ = (
        CheckConstraint(
            "doses_passed_inspection + doses_failed_inspection = quantity_received",
            name="ck_receipt_inspection_split",
        ),
        CheckConstraint(
            "quantity_received <= quantity_sent",
            name="ck_receipt_received_within_sent",
        ),
    )

    vaccine_id: Mapped[int] = mapped_column(ForeignKey("vaccines.id"), nullable=False)
    lot_number: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity_sent: Mapped[int] = mapped_column(nullable=False)
    quantity_received: Mapped[int] = mapped_column(nullable=False)
    doses_passed_inspection: Mapped[int] = mapped_column(nullable=False)
    doses_failed_inspection: Mapped[int] = mapped_column(nullable=False)
    discrepancy_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    received_date: Mapped[date] = mapped_column(nullable=False)
    expiration_date: Mapped[date] = mapped_column(nullable=False)
    idempotency_key: Mapped[str | None] = mapped_column(
        String(200), nullable=True, unique=True
    )

    def __repr__(self) -> str:
        return f"<Receipt {self.id} {self.lot_number} received={self.quantity_received}>"
