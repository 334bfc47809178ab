"""Inventory Module."""

from vaccine_modules.inventory.locks import LotLockRegistry
from vaccine_modules.inventory.service import InventoryService, validate_shipment

__all__ = [
    "InventoryService",
    "LotLockRegistry",
    "validate_shipment",
]
