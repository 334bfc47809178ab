"""Tests for ReportingService: dashboard, monthly report, listing and export."""

import csv
import io
import json
from datetime import UTC, date, datetime

import pytest

from vaccine_kernel.domain.policy import InventoryPolicy
from vaccine_modules.inventory import InventoryService
from vaccine_modules.reporting import (
    ReportingService,
    as_of,
    breakdown_to_csv,
    export_file_name,
)
from vaccine_engines.reporting import month_window


class TestDashboard:

    def test_fixture_dashboard(self, reporting_service):
        metrics = reporting_service.dashboard()
        assert metrics.total_doses == 522
        assert metrics.administered_doses == 52
        assert len(metrics.alerts) == 3

    def test_reflects_administration(self, memory_storage, deterministic_clock):
        inventory = InventoryService(memory_storage, deterministic_clock)
        reporting = ReportingService(memory_storage, deterministic_clock)
        inventory.record_administration(4, 10)
        metrics = reporting.dashboard()
        assert metrics.total_doses == 512
        assert metrics.administered_doses == 62

    def test_policy_changes_counts(self, memory_storage, deterministic_clock):
        strict = InventoryPolicy(expiring_window_days=200, low_stock_threshold=0)
        metrics = ReportingService(memory_storage, deterministic_clock, strict).dashboard()
        assert metrics.low_stock == 1
        assert metrics.expiring_soon == 3


class TestMonthlyReport:

    def test_december(self, reporting_service):
        report = reporting_service.monthly_report(2023, 12)
        assert report.window.label == "December 2023"
        assert report.summary.monthly_administered == 25
        assert report.summary.total_inventory == 522
        assert [row.vaccine_name for row in report.breakdown][:2] == [
            "Comirnaty", "Fluzone High-Dose",
        ]
        assert report.generated_at == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_explicit_now_overrides_clock(self, reporting_service):
        later = datetime(2024, 2, 1, 12, tzinfo=UTC)
        report = reporting_service.monthly_report(2023, 12, now=later)
        assert report.summary.expired == 3

    def test_bad_month(self, reporting_service):
        with pytest.raises(ValueError):
            reporting_service.monthly_report(2024, 13)

    def test_report_months(self, reporting_service):
        months = reporting_service.report_months()
        assert months[0].value == "2024-01"
        assert len(months) == 12

    def test_logged(self, reporting_service, captured_logs):
        reporting_service.monthly_report(2023, 11)
        record = next(
            r for r in captured_logs() if r["message"] == "monthly_report_generated"
        )
        assert record["month"] == "2023-11"
        assert record["breakdown_rows"] == 5


class TestInventoryListing:

    def test_search_filter_sort(self, reporting_service):
        lots = reporting_service.inventory(
            status="low-stock", sort_field="quantity_on_hand"
        )
        assert [lot.id for lot in lots] == [6, 7, 5, 3]

    def test_breakdown(self, reporting_service):
        assert len(reporting_service.breakdown()) == 5


class TestExport:

    def test_document_shape(self, reporting_service):
        document = reporting_service.export_document(2023, 12)
        assert set(document) == {
            "month", "generated_at", "summary", "vaccine_breakdown",
            "inventory", "administration",
        }
        assert document["month"] == "December 2023"
        assert document["generated_at"] == "2024-01-01T12:00:00+00:00"
        assert document["summary"]["monthly_administered"] == 25
        assert len(document["inventory"]) == 8
        assert [e["id"] for e in document["administration"]] == [1, 2]
        assert document["administration"][0]["administration_date"] == "2023-12-04"

    def test_json_text_parses(self, reporting_service):
        text = reporting_service.export_json(2023, 11)
        document = json.loads(text)
        assert sorted(e["id"] for e in document["administration"]) == [3, 5]

    def test_json_written_to_directory(self, reporting_service, tmp_path):
        path = reporting_service.export_json(2023, 12, directory=tmp_path)
        assert path.name == "vaccine-report-2023-12.json"
        assert json.loads(path.read_text())["month"] == "December 2023"

    def test_csv(self, reporting_service, tmp_path):
        path = reporting_service.export_csv(2023, 12, directory=tmp_path)
        assert path.name == "vaccine-report-2023-12.csv"
        rows = list(csv.DictReader(io.StringIO(path.read_text())))
        assert rows[0] == {
            "vaccine_name": "Comirnaty",
            "lot_count": "2",
            "total_doses": "160",
            "expiring_soon_count": "1",
            "expired_count": "1",
        }
        assert len(rows) == 5

    def test_csv_empty_breakdown_has_header(self):
        assert breakdown_to_csv(()) == (
            "vaccine_name,lot_count,total_doses,expiring_soon_count,expired_count\n"
        )

    def test_file_name(self):
        assert export_file_name(month_window(2024, 3), "csv") == "vaccine-report-2024-03.csv"


def test_as_of_is_noon_utc():
    assert as_of(date(2024, 1, 1)) == datetime(2024, 1, 1, 12, tzinfo=UTC)
