"""
Inventory listing: search, status filter and sort over lot snapshots.

Pure functions, zero I/O.  The status filter uses the independent
predicates, so a lot that is expiring and low on stock shows up under both
filters, while ``ok`` means neither expiring/expired nor low on stock.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from vaccine_kernel.domain.policy import DEFAULT_POLICY, InventoryPolicy
from vaccine_kernel.domain.records import Lot, LotStatus
from vaccine_kernel.exceptions import ValidationError
from vaccine_engines.classification import (
    days_to_expiry,
    is_expired,
    is_expiring,
    is_low_stock,
)

SORTABLE_FIELDS = frozenset({
    "commercial_name",
    "generic_name",
    "lot_number",
    "expiration_date",
    "received_date",
    "quantity_on_hand",
})


def search_lots(lots: Sequence[Lot], term: str | None) -> tuple[Lot, ...]:
    """Case-insensitive substring match on commercial, generic and lot number."""
    if not term:
        return tuple(lots)
    needle = term.lower()
    return tuple(
        lot for lot in lots
        if needle in lot.commercial_name.lower()
        or needle in lot.generic_name.lower()
        or needle in lot.lot_number.lower()
    )


def matches_status(
    lot: Lot,
    status: LotStatus,
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> bool:
    if status is LotStatus.EXPIRED:
        return is_expired(lot, now)
    if status is LotStatus.EXPIRING:
        return is_expiring(lot, now, policy)
    if status is LotStatus.LOW_STOCK:
        return is_low_stock(lot, policy)
    return (
        days_to_expiry(lot, now) > policy.expiring_window_days
        and not is_low_stock(lot, policy)
    )


def filter_by_status(
    lots: Sequence[Lot],
    status: LotStatus | str | None,
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> tuple[Lot, ...]:
    """Keep lots matching ``status``; ``None`` or ``""`` keeps everything."""
    if not status:
        return tuple(lots)
    try:
        wanted = LotStatus(status)
    except ValueError:
        raise ValidationError("status", f"unknown status filter {status!r}", status)
    return tuple(lot for lot in lots if matches_status(lot, wanted, now, policy))


def _sort_key(field: str):
    def key(lot: Lot) -> Any:
        value = getattr(lot, field)
        if isinstance(value, str):
            return value.lower()
        return value

    return key


def sort_lots(
    lots: Sequence[Lot],
    field: str = "commercial_name",
    descending: bool = False,
) -> tuple[Lot, ...]:
    """Sort by one lot field; strings compare case-insensitively."""
    if field not in SORTABLE_FIELDS:
        raise ValidationError("sort_field", f"cannot sort by {field!r}", field)
    return tuple(sorted(lots, key=_sort_key(field), reverse=descending))


def administrable_lots(
    lots: Sequence[Lot],
    now: date | datetime,
) -> tuple[Lot, ...]:
    """Lots doses can be drawn from: stock on hand and not yet expired."""
    return tuple(
        lot for lot in lots
        if lot.quantity_on_hand > 0 and not is_expired(lot, now)
    )


def list_inventory(
    lots: Sequence[Lot],
    now: date | datetime,
    search: str | None = None,
    status: LotStatus | str | None = None,
    sort_field: str = "commercial_name",
    descending: bool = False,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> tuple[Lot, ...]:
    """Search, then filter, then sort."""
    found = search_lots(lots, search)
    filtered = filter_by_status(found, status, now, policy)
    return sort_lots(filtered, sort_field, descending)
