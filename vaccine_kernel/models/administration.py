"""
Module: vaccine_kernel.models.administration
Responsibility: ORM persistence for administration events.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import date

from sqlalchemy import CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from vaccine_kernel.db.base import TrackedBase


class AdministrationEvent(TrackedBase):
    """Doses given to patients from one lot on one day."""

    __tablename__ = "administration_events"

    __table_args__ = (
        CheckConstraint("doses_administered >= 1", name="ck_administration_positive"),
        Index("idx_administration_date", "administration_date"),
    )

    lot_id: Mapped[int] = mapped_column(ForeignKey("lots.id"), nullable=False)
    doses_administered: Mapped[int] = mapped_column(nullable=False)
    administration_date: Mapped[date] = mapped_column(nullable=False)
