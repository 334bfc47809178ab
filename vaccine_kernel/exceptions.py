"""
Typed Exception Hierarchy for the Vaccine Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers render errors next to the form field or record that caused them.
Parsing message strings for that is fragile, so every error:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (field name, missing identifier, operation)

Example - RIGHT way:
    try:
        service.record_administration(lot_id=7, doses_administered=6)
    except ValidationError as e:
        form.show_error(e.field, e.reason)
    except LotNotFoundError as e:
        banner(f"Lot {e.entity_id} no longer exists")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    VaccineKernelError (base)
    |
    +-- ValidationError
    |
    +-- NotFoundError
    |   +-- LotNotFoundError
    |   +-- VaccineNotFoundError
    |   +-- ReceiptNotFoundError
    |
    +-- StorageError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                  | When Raised
------------|-----------------------|---------------------------------------
Validation  | VALIDATION_FAILED     | One operation precondition violated
------------|-----------------------|---------------------------------------
Not found   | LOT_NOT_FOUND         | Lot id unknown to storage
            | VACCINE_NOT_FOUND     | Vaccine id unknown to storage
            | RECEIPT_NOT_FOUND     | Receipt id unknown to storage
------------|-----------------------|---------------------------------------
Storage     | STORAGE_FAILURE       | Opaque failure from the storage backend

===============================================================================
PROPAGATION
===============================================================================

All three categories propagate to the immediate caller.  The kernel performs
no retries.  A StorageError raised by a storage implementation reaches the
caller as the same object.
"""

from typing import Any


class VaccineKernelError(Exception):
    """
    Base exception for all vaccine kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "VACCINE_KERNEL_ERROR"


class ValidationError(VaccineKernelError):
    """
    A single operation precondition was violated.

    One instance names exactly one offending field so the caller can attach
    the message to the matching input.
    """

    code: str = "VALIDATION_FAILED"

    def __init__(self, field: str, reason: str, value: Any = None):
        self.field = field
        self.reason = reason
        self.value = value
        super().__init__(f"Invalid {field}: {reason}")


# Not-found exceptions


class NotFoundError(VaccineKernelError):
    """Referenced record does not exist in storage."""

    code: str = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class LotNotFoundError(NotFoundError):
    """Lot with given ID was not found."""

    code: str = "LOT_NOT_FOUND"

    def __init__(self, lot_id: Any):
        super().__init__("Lot", lot_id)


class VaccineNotFoundError(NotFoundError):
    """Vaccine with given ID was not found."""

    code: str = "VACCINE_NOT_FOUND"

    def __init__(self, vaccine_id: Any):
        super().__init__("Vaccine", vaccine_id)


class ReceiptNotFoundError(NotFoundError):
    """Receipt with given ID was not found."""

    code: str = "RECEIPT_NOT_FOUND"

    def __init__(self, receipt_id: Any):
        super().__init__("Receipt", receipt_id)


# Storage exceptions


class StorageError(VaccineKernelError):
    """
    Opaque failure reported by a storage collaborator.

    The kernel does not interpret it; ``operation`` names the storage call
    that failed and ``detail`` carries the backend's message.
    """

    code: str = "STORAGE_FAILURE"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage operation {operation} failed: {detail}")
