"""
Module: vaccine_engines.reporting
Responsibility:
    Aggregate lots and administration events into the monthly summary, the
    per-vaccine breakdown and the dashboard metrics.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Per-lot status comes from ``vaccine_engines.classification``.

Invariants enforced:
    - Purity: same inputs always produce the same report; ``now`` is passed
      in.
    - Monthly administered doses include events on both window boundaries.
    - Expiry and stock counts are current-state counts over all lots, not
      filtered by the reporting month.
    - Breakdown rows follow first-occurrence order of commercial names.

Failure modes:
    - ValueError from ``month_window`` for a month outside 1..12.
"""

from __future__ import annotations

import calendar
import dataclasses
from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum

from vaccine_kernel.domain.policy import DEFAULT_POLICY, InventoryPolicy
from vaccine_kernel.domain.records import AdministrationEvent, Lot, LotStatus
from vaccine_kernel.logging_config import get_logger
from vaccine_engines.classification import (
    Alert,
    alerts_for,
    classify,
    low_stock_ranked,
    status_counts,
)
from vaccine_engines.tracer import traced_engine

logger = get_logger("engines.reporting")


# =========================================================================
# Report types
# =========================================================================


@dataclasses.dataclass(frozen=True)
class MonthWindow:
    """Inclusive calendar-month window used to select administration events."""

    start: date
    end: date

    @property
    def value(self) -> str:
        """``YYYY-MM`` key, as used in export file names."""
        return self.start.strftime("%Y-%m")

    @property
    def label(self) -> str:
        """Human label, e.g. ``December 2023``."""
        return self.start.strftime("%B %Y")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclasses.dataclass(frozen=True)
class MonthlySummary:
    total_inventory: int
    total_lots: int
    monthly_administered: int
    expiring_soon: int
    expired: int
    low_stock: int


@dataclasses.dataclass(frozen=True)
class VaccineBreakdownRow:
    vaccine_name: str
    lot_count: int
    total_doses: int
    expiring_soon_count: int
    expired_count: int


@dataclasses.dataclass(frozen=True)
class DashboardMetrics:
    """Dashboard cards, alerts and the ranked low-stock list."""

    total_doses: int
    administered_doses: int
    expiring_soon: int
    expired: int
    low_stock: int
    alerts: tuple[Alert, ...]
    low_stock_lots: tuple[Lot, ...]


# =========================================================================
# Month helpers
# =========================================================================


def month_window(year: int, month: int) -> MonthWindow:
    """First and last day of a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    last_day = calendar.monthrange(year, month)[1]
    return MonthWindow(start=date(year, month, 1), end=date(year, month, last_day))


def parse_month(value: str) -> MonthWindow:
    """Parse a ``YYYY-MM`` key into its window."""
    year_text, _, month_text = value.partition("-")
    return month_window(int(year_text), int(month_text))


def recent_months(now: date | datetime, count: int = 12) -> tuple[MonthWindow, ...]:
    """The ``count`` most recent month windows, current month first."""
    year, month = now.year, now.month
    windows: list[MonthWindow] = []
    for _ in range(count):
        windows.append(month_window(year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return tuple(windows)


def events_in_window(
    events: Sequence[AdministrationEvent],
    month_start: date,
    month_end: date,
) -> tuple[AdministrationEvent, ...]:
    return tuple(
        e for e in events if month_start <= e.administration_date <= month_end
    )


# =========================================================================
# Aggregates
# =========================================================================


@traced_engine(
    "reporting", "1.0", fingerprint_fields=("month_start", "month_end", "now")
)
def monthly_summary(
    lots: Sequence[Lot],
    administration_events: Sequence[AdministrationEvent],
    month_start: date,
    month_end: date,
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> MonthlySummary:
    """
    Inventory totals plus doses administered within ``[month_start, month_end]``.
    """
    counts = status_counts(lots, now, policy)
    administered = sum(
        e.doses_administered
        for e in events_in_window(administration_events, month_start, month_end)
    )
    summary = MonthlySummary(
        total_inventory=sum(lot.quantity_on_hand for lot in lots),
        total_lots=len(lots),
        monthly_administered=administered,
        expiring_soon=counts.expiring,
        expired=counts.expired,
        low_stock=counts.low_stock,
    )
    logger.info("monthly_summary_computed", extra={
        "month_start": month_start.isoformat(),
        "month_end": month_end.isoformat(),
        "total_lots": summary.total_lots,
        "monthly_administered": summary.monthly_administered,
    })
    return summary


@traced_engine("reporting", "1.0", fingerprint_fields=("now",))
def vaccine_breakdown(
    lots: Sequence[Lot],
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> tuple[VaccineBreakdownRow, ...]:
    """
    One row per commercial name, in order of first appearance.

    Each lot adds to at most one of the expiring/expired counts, using the
    same first-match order as ``classify``.
    """
    groups: dict[str, dict[str, int]] = {}
    for lot in lots:
        group = groups.setdefault(
            lot.commercial_name,
            {"lots": 0, "doses": 0, "expiring": 0, "expired": 0},
        )
        group["lots"] += 1
        group["doses"] += lot.quantity_on_hand

        status = classify(lot, now, policy)
        if status is LotStatus.EXPIRED:
            group["expired"] += 1
        elif status is LotStatus.EXPIRING:
            group["expiring"] += 1

    return tuple(
        VaccineBreakdownRow(
            vaccine_name=name,
            lot_count=g["lots"],
            total_doses=g["doses"],
            expiring_soon_count=g["expiring"],
            expired_count=g["expired"],
        )
        for name, g in groups.items()
    )


def dashboard_metrics(
    lots: Sequence[Lot],
    administration_events: Sequence[AdministrationEvent],
    now: date | datetime,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> DashboardMetrics:
    """All-time administered doses plus current-state counts and alerts."""
    counts = status_counts(lots, now, policy)
    return DashboardMetrics(
        total_doses=sum(lot.quantity_on_hand for lot in lots),
        administered_doses=sum(e.doses_administered for e in administration_events),
        expiring_soon=counts.expiring,
        expired=counts.expired,
        low_stock=counts.low_stock,
        alerts=alerts_for(lots, now, policy),
        low_stock_lots=low_stock_ranked(lots, policy),
    )


# =========================================================================
# Renderer (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain data for JSON serialization.

    Handles:
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
