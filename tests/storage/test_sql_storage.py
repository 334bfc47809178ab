"""
SqlStorage tests against an in-memory SQLite database.

Verifies round trips through the ORM, id assignment, the unique
idempotency key, and that SQLAlchemy failures surface as StorageError
with the session still usable afterwards.
"""

from datetime import UTC, date, datetime

import pytest

from vaccine_kernel.db.engine import session_scope
from vaccine_kernel.domain.records import Receipt, Vaccine
from vaccine_kernel.exceptions import StorageError
from vaccine_kernel.storage.sql import SqlStorage
from vaccine_engines.reporting import month_window, monthly_summary
from vaccine_modules.inventory import InventoryService


def _receipt(key: str | None) -> Receipt:
    return Receipt(
        id=None,
        vaccine_id=2,
        lot_number="U7600CC",
        quantity_sent=20,
        quantity_received=20,
        doses_passed_inspection=20,
        doses_failed_inspection=0,
        received_date=date(2024, 1, 3),
        expiration_date=date(2024, 10, 31),
        idempotency_key=key,
    )


class TestRoundTrip:

    def test_seeded_records_match_fixtures(self, sql_storage, fixture_set):
        assert list(sql_storage.list_vaccines()) == list(fixture_set.vaccines)
        assert list(sql_storage.list_lots()) == list(fixture_set.lots)
        assert list(sql_storage.list_receipts()) == list(fixture_set.receipts)
        assert list(sql_storage.list_administration_events()) == list(
            fixture_set.administration_events
        )

    def test_monthly_summary_over_sql(self, sql_storage):
        window = month_window(2023, 12)
        summary = monthly_summary(
            sql_storage.list_lots(),
            sql_storage.list_administration_events(),
            window.start, window.end,
            datetime(2024, 1, 1, 12, tzinfo=UTC),
        )
        assert summary.total_inventory == 522
        assert summary.monthly_administered == 25

    def test_lookups(self, sql_storage):
        assert sql_storage.get_lot(7).lot_number == "Y019876"
        assert sql_storage.get_lot(70) is None
        assert sql_storage.get_vaccine(4).commercial_name == "Engerix-B"
        assert sql_storage.get_receipt(2).doses_failed_inspection == 5
        assert sql_storage.find_lot_by_receipt(1).id == 4
        assert sql_storage.find_lot_by_receipt(99) is None

    def test_update_lot(self, sql_storage):
        lot = sql_storage.get_lot(8)
        sql_storage.save_lot(lot.with_quantity(90))
        assert sql_storage.get_lot(8).quantity_on_hand == 90
        assert len(sql_storage.list_lots()) == 8

    def test_delete_administration_event(self, sql_storage):
        sql_storage.delete_administration_event(5)
        sql_storage.delete_administration_event(99)
        assert [e.id for e in sql_storage.list_administration_events()] == [1, 2, 3, 4]


class TestIdempotencyKey:

    def test_assigns_next_id(self, sql_storage):
        saved = sql_storage.save_receipt(_receipt("po-100"))
        assert saved.id == 3
        assert sql_storage.find_receipt_by_idempotency_key("po-100") == saved

    def test_duplicate_key_raises_storage_error(self, sql_storage):
        sql_storage.save_receipt(_receipt("po-100"))
        with pytest.raises(StorageError) as exc_info:
            sql_storage.save_receipt(_receipt("po-100"))
        assert exc_info.value.operation == "save_receipt"
        assert exc_info.value.code == "STORAGE_FAILURE"

    def test_session_usable_after_failure(self, sql_storage, captured_logs):
        sql_storage.save_receipt(_receipt("po-100"))
        with pytest.raises(StorageError):
            sql_storage.save_receipt(_receipt("po-100"))
        assert len(sql_storage.list_receipts()) == 3
        failure = next(
            r for r in captured_logs() if r["message"] == "storage_operation_failed"
        )
        assert failure["operation"] == "save_receipt"

    def test_null_keys_do_not_collide(self, sql_storage):
        sql_storage.save_receipt(_receipt(None))
        sql_storage.save_receipt(_receipt(None))
        assert len(sql_storage.list_receipts()) == 4


class TestServiceOverSql:

    def test_receive_and_administer(self, sql_storage, deterministic_clock):
        service = InventoryService(sql_storage, deterministic_clock)
        lot = service.receive_shipment(
            vaccine_id=2,
            lot_number="U7600CC",
            quantity_sent=20,
            quantity_received=18,
            doses_passed=17,
            expiration_date=date(2024, 10, 31),
            received_date=date(2024, 1, 3),
            discrepancy_reason="Two vials missing",
            idempotency_key="po-200",
        )
        assert lot.id == 9
        assert lot.commercial_name == "Fluzone High-Dose"

        after = service.record_administration(lot.id, 7)
        assert after.quantity_on_hand == 10
        assert sql_storage.get_lot(9).quantity_on_hand == 10

        replay = service.receive_shipment(
            vaccine_id=2,
            lot_number="U7600CC",
            quantity_sent=20,
            quantity_received=18,
            doses_passed=17,
            expiration_date=date(2024, 10, 31),
            received_date=date(2024, 1, 3),
            discrepancy_reason="Two vials missing",
            idempotency_key="po-200",
        )
        assert replay.id == 9
        assert len(sql_storage.list_receipts()) == 3


def test_flush_only_mode_defers_commit(sql_session):
    storage = SqlStorage(sql_session, auto_commit=False)
    storage.save_receipt(_receipt("po-300"))
    sql_session.rollback()
    assert storage.find_receipt_by_idempotency_key("po-300") is None


class TestSessionScope:

    def test_commits_on_exit(self, sql_session):
        with session_scope() as session:
            SqlStorage(session, auto_commit=False).save_vaccine(
                Vaccine(None, "Varivax", "Varicella")
            )
        with session_scope() as session:
            names = [v.commercial_name for v in SqlStorage(session).list_vaccines()]
        assert names == ["Varivax"]

    def test_rolls_back_on_error(self, sql_session):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                SqlStorage(session, auto_commit=False).save_vaccine(
                    Vaccine(None, "Varivax", "Varicella")
                )
                raise RuntimeError("abort")
        with session_scope() as session:
            assert SqlStorage(session).list_vaccines() == []
