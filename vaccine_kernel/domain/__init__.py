"""
Pure domain layer.

This module contains immutable records, policy thresholds and the clock
abstraction, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (except SystemClock)
"""

from vaccine_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from vaccine_kernel.domain.policy import (
    DEFAULT_POLICY,
    EXPIRING_WINDOW_DAYS,
    LOW_STOCK_DISPLAY_LIMIT,
    LOW_STOCK_THRESHOLD,
    InventoryPolicy,
)
from vaccine_kernel.domain.records import (
    AdministrationEvent,
    AlertSeverity,
    Lot,
    LotStatus,
    Receipt,
    Vaccine,
)

__all__ = [
    "AdministrationEvent",
    "AlertSeverity",
    "Clock",
    "DEFAULT_POLICY",
    "DeterministicClock",
    "EXPIRING_WINDOW_DAYS",
    "InventoryPolicy",
    "LOW_STOCK_DISPLAY_LIMIT",
    "LOW_STOCK_THRESHOLD",
    "Lot",
    "LotStatus",
    "Receipt",
    "SystemClock",
    "Vaccine",
]
