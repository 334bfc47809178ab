"""
Module: vaccine_engines.classification
Responsibility:
    Derive a lot's status (ok / expiring / expired / low-stock) and the
    dashboard alerts and low-stock ranking built on it.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import vaccine_kernel.domain.

Invariants enforced:
    - Purity: ``now`` is always an argument; no clock access.
    - Decision order of ``classify`` is Expired, Expiring, LowStock, Ok.
      A lot that is both expiring and low on stock is Expiring.
    - ``low_stock_ranked`` uses a stable sort, so equal quantities keep
      their input order.

Failure modes:
    - None.  Inputs are assumed well-formed; malformed records are a
      storage concern.

Usage:
    from vaccine_engines.classification import classify, alerts_for
    from datetime import date

    status = classify(lot, date(2024, 1, 1))      # LotStatus.EXPIRING
    alerts = alerts_for(lots, date(2024, 1, 1))    # (Alert(...), ...)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from vaccine_kernel.domain.policy import DEFAULT_POLICY, InventoryPolicy
from vaccine_kernel.domain.records import AlertSeverity, Lot, LotStatus
from vaccine_kernel.logging_config import get_logger
from vaccine_engines.tracer import traced_engine

logger = get_logger("engines.classification")

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Alert:
    """
    One dashboard alert for a non-empty status category.

    ``count`` is the number of lots in the category.
    """

    status: LotStatus
    severity: AlertSeverity
    count: int
    title: str
    message: str


@dataclass(frozen=True)
class StatusCounts:
    """
    Lot counts per alert category.

    Categories are independent: a lot that is expiring and low on stock
    counts in both.
    """

    expired: int = 0
    expiring: int = 0
    low_stock: int = 0


def days_to_expiry(lot: Lot, now: date | datetime) -> int:
    """
    Whole days until the lot expires, rounded up.

    The expiration date is read as midnight at the start of that day, in
    ``now``'s timezone.  With a plain ``date`` for ``now`` the result is the
    calendar-day difference.  Negative once the lot has expired.
    """
    if isinstance(now, datetime):
        expiry = datetime.combine(lot.expiration_date, time.min, tzinfo=now.tzinfo)
        # ceil(delta / 1 day) in exact integer arithmetic
        return -((now - expiry) // _ONE_DAY)
    return (lot.expiration_date - now).days


def is_expired(lot: Lot, now: date | datetime) -> bool:
    return days_to_expiry(lot, now) < 0


def is_expiring(
    lot: Lot,
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> bool:
    return 0 <= days_to_expiry(lot, now) <= policy.expiring_window_days


def is_low_stock(lot: Lot, policy: InventoryPolicy = DEFAULT_POLICY) -> bool:
    return lot.quantity_on_hand <= policy.low_stock_threshold


def classify(
    lot: Lot,
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> LotStatus:
    """
    Status of one lot; first match wins.

    1. days to expiry < 0                         -> EXPIRED
    2. days to expiry <= expiring window (30)     -> EXPIRING
    3. quantity on hand <= low-stock threshold    -> LOW_STOCK
    4. otherwise                                  -> OK
    """
    days = days_to_expiry(lot, now)
    if days < 0:
        return LotStatus.EXPIRED
    if days <= policy.expiring_window_days:
        return LotStatus.EXPIRING
    if lot.quantity_on_hand <= policy.low_stock_threshold:
        return LotStatus.LOW_STOCK
    return LotStatus.OK


def status_counts(
    lots: Iterable[Lot],
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> StatusCounts:
    """Count expired, expiring and low-stock lots (independent categories)."""
    expired = expiring = low_stock = 0
    for lot in lots:
        if is_expired(lot, now):
            expired += 1
        if is_expiring(lot, now, policy):
            expiring += 1
        if is_low_stock(lot, policy):
            low_stock += 1
    return StatusCounts(expired=expired, expiring=expiring, low_stock=low_stock)


@traced_engine("classification", "1.0", fingerprint_fields=("now",))
def alerts_for(
    lots: Sequence[Lot],
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> tuple[Alert, ...]:
    """
    Alerts for the non-empty categories, ordered Expired, Expiring, LowStock.

    Expired alerts are errors; the other two are warnings.  A category with
    zero lots produces no alert.
    """
    counts = status_counts(lots, now, policy)
    alerts: list[Alert] = []

    if counts.expired > 0:
        alerts.append(Alert(
            status=LotStatus.EXPIRED,
            severity=AlertSeverity.ERROR,
            count=counts.expired,
            title="Expired Vaccines",
            message=(
                f"{counts.expired} vaccine lots have expired and need "
                "immediate attention."
            ),
        ))

    if counts.expiring > 0:
        alerts.append(Alert(
            status=LotStatus.EXPIRING,
            severity=AlertSeverity.WARNING,
            count=counts.expiring,
            title="Expiring Soon",
            message=(
                f"{counts.expiring} vaccine lots will expire within "
                f"{policy.expiring_window_days} days."
            ),
        ))

    if counts.low_stock > 0:
        alerts.append(Alert(
            status=LotStatus.LOW_STOCK,
            severity=AlertSeverity.WARNING,
            count=counts.low_stock,
            title="Low Stock Alert",
            message=(
                f"{counts.low_stock} vaccine lots are running low on inventory."
            ),
        ))

    logger.debug("alerts_computed", extra={
        "lot_count": len(lots),
        "alert_count": len(alerts),
        "expired": counts.expired,
        "expiring": counts.expiring,
        "low_stock": counts.low_stock,
    })
    return tuple(alerts)


@traced_engine("classification", "1.0")
def low_stock_ranked(
    lots: Sequence[Lot],
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> tuple[Lot, ...]:
    """
    Low-stock lots, lowest quantity first, at most ``low_stock_display_limit``.

    ``sorted`` is stable, so ties keep input order.
    """
    low = [lot for lot in lots if is_low_stock(lot, policy)]
    ranked = sorted(low, key=lambda lot: lot.quantity_on_hand)
    return tuple(ranked[: policy.low_stock_display_limit])
