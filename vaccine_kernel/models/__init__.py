"""ORM models for the SQL storage backend."""

from vaccine_kernel.models.administration import AdministrationEvent
from vaccine_kernel.models.lot import Lot
from vaccine_kernel.models.receipt import Receipt
from vaccine_kernel.models.vaccine import Vaccine

__all__ = [
    "AdministrationEvent",
    "Lot",
    "Receipt",
    "Vaccine",
]
