"""
Module: vaccine_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the integer primary key convention, the type annotation map for consistent
    column types, and the TrackedBase mixin for row timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, storage/, domain/, or outer layers.

Invariants enforced:
    - Integer primary keys: records are identified by positive integers
      assigned by the database on INSERT.
    - Calendar dates: ``date`` maps to ``Date`` so expiry comparisons stay at
      day granularity.

Failure modes:
    - IntegrityError if a model INSERTs an explicit duplicate id.
"""

from datetime import date, datetime
from typing import ClassVar

from sqlalchemy import Date, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an autoincrementing integer.
        - date maps to Date, datetime to DateTime(timezone=True).
        - int maps to Integer (SQLite only autoincrements INTEGER keys).
    """

    type_annotation_map: ClassVar[dict] = {
        date: Date(),
        datetime: DateTime(timezone=True),
        int: Integer,
    }

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )


class TrackedBase(Base):
    """
    Abstract base with row timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and auto-updates on every UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
