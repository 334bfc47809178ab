"""
Reporting Module Service (``vaccine_modules.reporting.service``).

Responsibility
--------------
Read-only orchestration of the dashboard, the monthly report, the vaccine
breakdown, the inventory listing and report export.  Pulls snapshots from
the storage collaborator and hands them to the pure engines in
``vaccine_engines``.

Architecture position
---------------------
**Modules layer**.  Constructor: ``storage`` + ``clock`` + ``policy``.
``now`` defaults to the injected clock so reports are reproducible under a
``DeterministicClock``.

Invariants enforced
-------------------
* Read-only: no storage writes.
* One storage snapshot per report, so every figure in a report describes
  the same state.

Failure modes
-------------
* ``StorageError`` from the collaborator propagates.
* ``ValueError`` for a month outside 1..12.
* ``ValidationError`` for an unknown status filter or sort field.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from vaccine_kernel.domain.clock import Clock, SystemClock
from vaccine_kernel.domain.policy import InventoryPolicy
from vaccine_kernel.domain.records import AdministrationEvent, Lot, LotStatus
from vaccine_kernel.logging_config import get_logger
from vaccine_kernel.storage.base import StorageCollaborator
from vaccine_engines.listing import list_inventory
from vaccine_engines.reporting import (
    DashboardMetrics,
    MonthlySummary,
    MonthWindow,
    VaccineBreakdownRow,
    dashboard_metrics,
    month_window,
    monthly_summary,
    recent_months,
    render_to_dict,
    vaccine_breakdown,
)
from vaccine_modules.reporting.export import (
    breakdown_to_csv,
    build_report_document,
    export_file_name,
    to_json,
    write_export,
)

logger = get_logger("modules.reporting.service")


@dataclass(frozen=True)
class MonthlyReport:
    """Summary and breakdown for one month, with the instant they describe."""

    window: MonthWindow
    generated_at: datetime
    summary: MonthlySummary
    breakdown: tuple[VaccineBreakdownRow, ...]


class ReportingService:
    """Read-only reporting over a storage collaborator."""

    def __init__(
        self,
        storage: StorageCollaborator,
        clock: Clock | None = None,
        policy: InventoryPolicy | None = None,
    ):
        self._storage = storage
        self._clock = clock or SystemClock()
        self._policy = policy or InventoryPolicy.with_defaults()

    def _now(self, now: datetime | None) -> datetime:
        return now or self._clock.now()

    def report_months(self, count: int = 12) -> tuple[MonthWindow, ...]:
        return recent_months(self._clock.now(), count)

    def dashboard(self, now: datetime | None = None) -> DashboardMetrics:
        at = self._now(now)
        metrics = dashboard_metrics(
            self._storage.list_lots(),
            self._storage.list_administration_events(),
            at,
            self._policy,
        )
        logger.info("dashboard_generated", extra={
            "as_of": at.isoformat(),
            "total_doses": metrics.total_doses,
            "alert_count": len(metrics.alerts),
        })
        return metrics

    def monthly_report(
        self,
        year: int,
        month: int,
        now: datetime | None = None,
    ) -> MonthlyReport:
        """Summary and breakdown for a calendar month."""
        return self._monthly_report(month_window(year, month), self._now(now))[0]

    def _monthly_report(
        self, window: MonthWindow, at: datetime
    ) -> tuple[MonthlyReport, tuple[Lot, ...], tuple[AdministrationEvent, ...]]:
        lots = tuple(self._storage.list_lots())
        events = tuple(self._storage.list_administration_events())
        report = MonthlyReport(
            window=window,
            generated_at=at,
            summary=monthly_summary(
                lots, events, window.start, window.end, at, self._policy
            ),
            breakdown=vaccine_breakdown(lots, at, self._policy),
        )
        logger.info("monthly_report_generated", extra={
            "month": window.value,
            "as_of": at.isoformat(),
            "breakdown_rows": len(report.breakdown),
        })
        return report, lots, events

    def breakdown(self, now: datetime | None = None) -> tuple[VaccineBreakdownRow, ...]:
        return vaccine_breakdown(
            self._storage.list_lots(), self._now(now), self._policy
        )

    def inventory(
        self,
        search: str | None = None,
        status: LotStatus | str | None = None,
        sort_field: str = "commercial_name",
        descending: bool = False,
        now: datetime | None = None,
    ) -> tuple[Lot, ...]:
        """Searched, status-filtered and sorted inventory listing."""
        return list_inventory(
            self._storage.list_lots(),
            self._now(now),
            search=search,
            status=status,
            sort_field=sort_field,
            descending=descending,
            policy=self._policy,
        )

    # =========================================================================
    # Export
    # =========================================================================

    def export_document(
        self,
        year: int,
        month: int,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        report, lots, events = self._monthly_report(
            month_window(year, month), self._now(now)
        )
        return build_report_document(
            report.window,
            report.generated_at,
            report.summary,
            report.breakdown,
            lots,
            events,
        )

    def export_json(
        self,
        year: int,
        month: int,
        directory: Path | None = None,
        now: datetime | None = None,
    ) -> str | Path:
        """JSON export text, or the written file when ``directory`` is given."""
        content = to_json(self.export_document(year, month, now))
        if directory is None:
            return content
        window = month_window(year, month)
        return write_export(Path(directory) / export_file_name(window), content)

    def export_csv(
        self,
        year: int,
        month: int,
        directory: Path | None = None,
        now: datetime | None = None,
    ) -> str | Path:
        """Vaccine breakdown as CSV, or the written file when ``directory`` is given."""
        report = self.monthly_report(year, month, now)
        content = breakdown_to_csv(report.breakdown)
        if directory is None:
            return content
        return write_export(
            Path(directory) / export_file_name(report.window, "csv"), content
        )

    @staticmethod
    def to_dict(obj: object) -> Any:
        return render_to_dict(obj)


def as_of(day: date) -> datetime:
    """Noon UTC on ``day``; the instant scripts use for a date-only ``--as-of``."""
    return datetime(day.year, day.month, day.day, 12, tzinfo=UTC)
