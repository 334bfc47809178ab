"""
Inventory policy thresholds.

The expiry window and low-stock threshold are fixed policy in the clinic
workflow.  They are named here and bundled in ``InventoryPolicy`` so a
deployment can override them through ``vaccine_config`` without touching
engine code.
"""

from dataclasses import asdict, dataclass
from typing import Any, Self

EXPIRING_WINDOW_DAYS = 30
LOW_STOCK_THRESHOLD = 10
LOW_STOCK_DISPLAY_LIMIT = 5


@dataclass(frozen=True)
class InventoryPolicy:
    """
    Thresholds used by classification and ranking.

    Contract:
        - A lot whose days-to-expiry is in ``[0, expiring_window_days]`` is
          expiring.
        - A lot with ``quantity_on_hand <= low_stock_threshold`` is low stock.
        - Ranked low-stock listings hold at most ``low_stock_display_limit``
          lots.
    """

    expiring_window_days: int = EXPIRING_WINDOW_DAYS
    low_stock_threshold: int = LOW_STOCK_THRESHOLD
    low_stock_display_limit: int = LOW_STOCK_DISPLAY_LIMIT

    def __post_init__(self):
        if self.expiring_window_days < 0:
            raise ValueError("expiring_window_days cannot be negative")
        if self.low_stock_threshold < 0:
            raise ValueError("low_stock_threshold cannot be negative")
        if self.low_stock_display_limit < 1:
            raise ValueError("low_stock_display_limit must be at least 1")

    @classmethod
    def with_defaults(cls) -> Self:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create a policy from a mapping; unknown keys raise ``TypeError``."""
        return cls(**data)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


DEFAULT_POLICY = InventoryPolicy()
