"""
Pure calculation engines for vaccine inventory.

- classification: per-lot status, alerts, low-stock ranking
- reporting: monthly summary, vaccine breakdown, dashboard metrics
- listing: search / filter / sort of lot snapshots
"""

from vaccine_engines.classification import (
    Alert,
    StatusCounts,
    alerts_for,
    classify,
    days_to_expiry,
    is_expired,
    is_expiring,
    is_low_stock,
    low_stock_ranked,
    status_counts,
)
from vaccine_engines.reporting import (
    DashboardMetrics,
    MonthlySummary,
    MonthWindow,
    VaccineBreakdownRow,
    dashboard_metrics,
    month_window,
    monthly_summary,
    recent_months,
    vaccine_breakdown,
)

__all__ = [
    "Alert",
    "DashboardMetrics",
    "MonthWindow",
    "MonthlySummary",
    "StatusCounts",
    "VaccineBreakdownRow",
    "alerts_for",
    "classify",
    "dashboard_metrics",
    "days_to_expiry",
    "is_expired",
    "is_expiring",
    "is_low_stock",
    "low_stock_ranked",
    "month_window",
    "monthly_summary",
    "recent_months",
    "status_counts",
    "vaccine_breakdown",
]
