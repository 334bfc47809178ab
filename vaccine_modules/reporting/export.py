"""
Report export: JSON document and CSV breakdown.

The JSON document carries the month label, generation timestamp, monthly
summary, vaccine breakdown, the full inventory snapshot and the
administration events that fall inside the month.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from vaccine_kernel.domain.records import AdministrationEvent, Lot
from vaccine_kernel.logging_config import get_logger
from vaccine_engines.reporting import (
    MonthlySummary,
    MonthWindow,
    VaccineBreakdownRow,
    events_in_window,
    render_to_dict,
)

logger = get_logger("modules.reporting.export")

BREAKDOWN_COLUMNS = (
    "vaccine_name",
    "lot_count",
    "total_doses",
    "expiring_soon_count",
    "expired_count",
)


def export_file_name(window: MonthWindow, extension: str = "json") -> str:
    return f"vaccine-report-{window.value}.{extension}"


def build_report_document(
    window: MonthWindow,
    generated_at: datetime,
    summary: MonthlySummary,
    breakdown: Sequence[VaccineBreakdownRow],
    lots: Sequence[Lot],
    administration_events: Sequence[AdministrationEvent],
) -> dict[str, Any]:
    """Assemble the export document; administration is limited to ``window``."""
    return {
        "month": window.label,
        "generated_at": generated_at.isoformat(),
        "summary": render_to_dict(summary),
        "vaccine_breakdown": render_to_dict(tuple(breakdown)),
        "inventory": render_to_dict(tuple(lots)),
        "administration": render_to_dict(
            events_in_window(administration_events, window.start, window.end)
        ),
    }


def to_json(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2)


def breakdown_to_csv(rows: Sequence[VaccineBreakdownRow]) -> str:
    """Render breakdown rows as CSV with a header line."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(BREAKDOWN_COLUMNS)
    for row in rows:
        writer.writerow([getattr(row, column) for column in BREAKDOWN_COLUMNS])
    return buffer.getvalue()


def write_export(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info("report_exported", extra={
        "path": str(path),
        "bytes": len(content.encode("utf-8")),
    })
    return path
