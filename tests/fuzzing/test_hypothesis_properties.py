"""
Hypothesis property tests for classification, ranking and aggregation.

Properties:
- classify agrees with the independent predicates and the first-match order
- ranked low stock is bounded, ordered and drawn from the input
- breakdown rows partition the lots and their doses
- monthly administered doses equal the in-window event sum
- receive validation accepts exactly the well-formed shipments
"""

from datetime import UTC, date, datetime, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from vaccine_kernel.domain.policy import InventoryPolicy
from vaccine_kernel.domain.records import AdministrationEvent, Lot, LotStatus
from vaccine_kernel.exceptions import ValidationError
from vaccine_engines.classification import (
    classify,
    days_to_expiry,
    is_expired,
    is_expiring,
    is_low_stock,
    low_stock_ranked,
    status_counts,
)
from vaccine_engines.reporting import month_window, monthly_summary, vaccine_breakdown
from vaccine_modules.inventory import validate_shipment

NAMES = ["Comirnaty", "Fluzone High-Dose", "Gardasil 9", "Engerix-B", "Prevnar 20"]

nows = st.datetimes(
    min_value=datetime(2020, 1, 1), max_value=datetime(2030, 12, 31),
    timezones=st.just(UTC),
)


@st.composite
def lots(draw, lot_id=None):
    return Lot(
        id=lot_id if lot_id is not None else draw(st.integers(1, 10_000)),
        vaccine_id=draw(st.integers(1, 5)),
        lot_number=draw(st.text("ABCDEFXYZ0123456789", min_size=1, max_size=8)),
        expiration_date=draw(st.dates(date(2019, 1, 1), date(2032, 12, 31))),
        quantity_on_hand=draw(st.integers(0, 500)),
        received_date=date(2019, 1, 1),
        commercial_name=draw(st.sampled_from(NAMES)),
    )


@st.composite
def lot_lists(draw, max_size=30):
    size = draw(st.integers(0, max_size))
    return [draw(lots(lot_id=i + 1)) for i in range(size)]


policies = st.builds(
    InventoryPolicy,
    expiring_window_days=st.integers(0, 120),
    low_stock_threshold=st.integers(0, 50),
    low_stock_display_limit=st.integers(1, 10),
)


class TestClassificationProperties:

    @given(lot=lots(), now=nows, policy=policies)
    def test_first_match_order(self, lot, now, policy):
        status = classify(lot, now, policy)
        if is_expired(lot, now):
            assert status == LotStatus.EXPIRED
        elif is_expiring(lot, now, policy):
            assert status == LotStatus.EXPIRING
        elif is_low_stock(lot, policy):
            assert status == LotStatus.LOW_STOCK
        else:
            assert status == LotStatus.OK

    @given(lot=lots(), now=nows)
    def test_expired_and_expiring_disjoint(self, lot, now):
        assert not (is_expired(lot, now) and is_expiring(lot, now))

    @given(lot=lots(), now=nows)
    def test_days_match_date_difference_at_midnight(self, lot, now):
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        assert days_to_expiry(lot, midnight) == (lot.expiration_date - midnight.date()).days

    @given(lot=lots(), now=nows)
    def test_days_nonincreasing_over_time(self, lot, now):
        assert days_to_expiry(lot, now + timedelta(hours=7)) <= days_to_expiry(lot, now)

    @given(items=lot_lists(), now=nows, policy=policies)
    def test_counts_match_predicates(self, items, now, policy):
        counts = status_counts(items, now, policy)
        assert counts.expired == sum(is_expired(l, now) for l in items)
        assert counts.expiring == sum(is_expiring(l, now, policy) for l in items)
        assert counts.low_stock == sum(is_low_stock(l, policy) for l in items)


class TestRankingProperties:

    @given(items=lot_lists(), policy=policies)
    def test_bounded_sorted_subset(self, items, policy):
        ranked = low_stock_ranked(items, policy)
        assert len(ranked) <= policy.low_stock_display_limit
        assert all(is_low_stock(l, policy) for l in ranked)
        quantities = [l.quantity_on_hand for l in ranked]
        assert quantities == sorted(quantities)
        ids = {l.id for l in items}
        assert all(l.id in ids for l in ranked)

    @given(items=lot_lists(), policy=policies)
    def test_takes_lowest(self, items, policy):
        ranked = low_stock_ranked(items, policy)
        low = sorted(
            l.quantity_on_hand for l in items if is_low_stock(l, policy)
        )
        assert [l.quantity_on_hand for l in ranked] == low[: policy.low_stock_display_limit]


class TestAggregationProperties:

    @given(items=lot_lists(), now=nows)
    def test_breakdown_partitions_lots(self, items, now):
        rows = vaccine_breakdown(items, now)
        assert sum(r.lot_count for r in rows) == len(items)
        assert sum(r.total_doses for r in rows) == sum(l.quantity_on_hand for l in items)
        assert len({r.vaccine_name for r in rows}) == len(rows)
        for row in rows:
            assert row.expiring_soon_count + row.expired_count <= row.lot_count

    @settings(max_examples=50)
    @given(
        days=st.lists(st.dates(date(2023, 10, 1), date(2024, 2, 29)), max_size=25),
        month=st.integers(10, 14),
    )
    def test_monthly_administered_is_window_sum(self, days, month):
        year = 2023 if month <= 12 else 2024
        window = month_window(year, month if month <= 12 else month - 12)
        events = [
            AdministrationEvent(i + 1, 1, i + 1, day) for i, day in enumerate(days)
        ]
        summary = monthly_summary(
            [], events, window.start, window.end, datetime(2024, 3, 1, tzinfo=UTC)
        )
        assert summary.monthly_administered == sum(
            e.doses_administered for e in events if window.contains(e.administration_date)
        )


class TestShipmentValidationProperties:

    @given(
        sent=st.integers(-5, 60),
        received=st.integers(-5, 60),
        passed=st.integers(-5, 60),
        shelf_days=st.integers(-10, 400),
        reason=st.sampled_from([None, "", "  ", "damaged"]),
    )
    def test_accepts_exactly_well_formed(self, sent, received, passed, shelf_days, reason):
        received_date = date(2024, 1, 1)
        expected_ok = (
            sent >= 1
            and 0 <= received <= sent
            and 0 <= passed <= received
            and shelf_days > 0
            and (sent == received or reason == "damaged")
        )
        try:
            validate_shipment(
                lot_number="L1",
                quantity_sent=sent,
                quantity_received=received,
                doses_passed=passed,
                expiration_date=received_date + timedelta(days=shelf_days),
                received_date=received_date,
                discrepancy_reason=reason,
            )
            accepted = True
        except ValidationError:
            accepted = False
        assert accepted == expected_ok
