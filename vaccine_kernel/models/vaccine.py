"""
Module: vaccine_kernel.models.vaccine
Responsibility: ORM persistence for catalog entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    A vaccine row is never rewritten once a lot references it; lots copy the
    names at receive time.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from vaccine_kernel.db.base import TrackedBase


class Vaccine(TrackedBase):
    """Catalog entry (commercial product plus generic name)."""

    __tablename__ = "vaccines"

    commercial_name: Mapped[str] = mapped_column(String(200), nullable=False)
    generic_name: Mapped[str] = mapped_column(String(200), nullable=False)

    def __repr__(self) -> str:
        return f"<Vaccine {self.id} {self.commercial_name}>"
