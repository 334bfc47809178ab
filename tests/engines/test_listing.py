"""Tests for inventory search, status filter, sort and administrable lots."""

from datetime import UTC, date, datetime

import pytest

from vaccine_kernel.domain.records import LotStatus
from vaccine_kernel.exceptions import ValidationError
from vaccine_engines.listing import (
    administrable_lots,
    filter_by_status,
    list_inventory,
    search_lots,
    sort_lots,
)

NOON = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class TestSearch:

    def test_matches_commercial_name_case_insensitive(self, fixture_set):
        found = search_lots(fixture_set.lots, "gardasil")
        assert [lot.id for lot in found] == [4, 7]

    def test_matches_generic_name(self, fixture_set):
        found = search_lots(fixture_set.lots, "hepatitis")
        assert [lot.id for lot in found] == [5]

    def test_matches_lot_number(self, fixture_set):
        assert [lot.id for lot in search_lots(fixture_set.lots, "u75")] == [3, 8]

    @pytest.mark.parametrize("term", [None, ""])
    def test_empty_term_keeps_all(self, fixture_set, term):
        assert len(search_lots(fixture_set.lots, term)) == 8

    def test_no_match(self, fixture_set):
        assert search_lots(fixture_set.lots, "rabies") == ()


class TestStatusFilter:

    @pytest.mark.parametrize(
        "status, expected",
        [
            ("expired", [1]),
            ("expiring", [2, 5]),
            ("low-stock", [3, 5, 6, 7]),
            ("ok", [4, 8]),
            (LotStatus.EXPIRING, [2, 5]),
        ],
    )
    def test_fixture_filters(self, fixture_set, status, expected):
        found = filter_by_status(fixture_set.lots, status, NOON)
        assert [lot.id for lot in found] == expected

    def test_no_filter(self, fixture_set):
        assert len(filter_by_status(fixture_set.lots, None, NOON)) == 8

    def test_unknown_status_rejected(self, fixture_set):
        with pytest.raises(ValidationError) as exc_info:
            filter_by_status(fixture_set.lots, "recalled", NOON)
        assert exc_info.value.field == "status"


class TestSort:

    def test_default_sort_by_commercial_name(self, fixture_set):
        names = [lot.commercial_name for lot in sort_lots(fixture_set.lots)]
        assert names == sorted(names, key=str.lower)

    def test_sort_by_expiration_descending(self, fixture_set):
        lots = sort_lots(fixture_set.lots, "expiration_date", descending=True)
        assert lots[0].id == 4
        assert lots[-1].id == 1

    def test_sort_by_quantity(self, fixture_set):
        lots = sort_lots(fixture_set.lots, "quantity_on_hand")
        assert [lot.quantity_on_hand for lot in lots][:3] == [0, 3, 6]

    def test_unknown_field_rejected(self, fixture_set):
        with pytest.raises(ValidationError) as exc_info:
            sort_lots(fixture_set.lots, "id; drop table")
        assert exc_info.value.field == "sort_field"


class TestAdministrableLots:

    def test_fixture_administrable(self, fixture_set):
        lots = administrable_lots(fixture_set.lots, NOON)
        assert [lot.id for lot in lots] == [2, 3, 4, 5, 7, 8]

    def test_lot_expiring_today_still_administrable(self, make_lot):
        lot = make_lot(expiration_date=date(2024, 1, 1), quantity_on_hand=5)
        assert administrable_lots([lot], NOON) == (lot,)


def test_list_inventory_combines_steps(fixture_set):
    lots = list_inventory(
        fixture_set.lots, NOON,
        search="fluzone", status="low-stock", sort_field="lot_number",
    )
    assert [lot.id for lot in lots] == [3]
