"""Reporting Module: dashboard, monthly reports and export."""

from vaccine_modules.reporting.export import (
    breakdown_to_csv,
    build_report_document,
    export_file_name,
)
from vaccine_modules.reporting.service import (
    MonthlyReport,
    ReportingService,
    as_of,
)

__all__ = [
    "MonthlyReport",
    "ReportingService",
    "as_of",
    "breakdown_to_csv",
    "build_report_document",
    "export_file_name",
]
