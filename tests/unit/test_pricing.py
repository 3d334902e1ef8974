from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from booking_engine.domain.entities.car import Car
from booking_engine.domain.errors import ValidationError
from booking_engine.domain.services.pricing import compute_breakdown, split_advance
from booking_engine.domain.value_objects.datetime_range import DatetimeRange

START = datetime(2026, 5, 1, 10, 0, tzinfo=timezone.utc)


def _car(price="1000.00", discount_price=None) -> Car:
    return Car(
        id=1,
        price=Decimal(price),
        discount_price=Decimal(discount_price) if discount_price else None,
    )


class TestRentalDays:
    def test_exact_days(self):
        assert DatetimeRange(START, START + timedelta(days=3)).rental_days == 3

    def test_partial_day_rounds_up(self):
        assert DatetimeRange(START, START + timedelta(hours=25)).rental_days == 2

    def test_short_rental_bills_one_day(self):
        assert DatetimeRange(START, START + timedelta(hours=2)).rental_days == 1

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationError):
            DatetimeRange(START, START)


class TestComputeBreakdown:
    def test_discounted_rate_wins_over_list_price(self):
        breakdown = compute_breakdown(_car("2500.00", "2200.00"), 2)
        assert breakdown.base_price == Decimal("4400.00")

    def test_zero_discount_price_falls_back_to_list_price(self):
        breakdown = compute_breakdown(_car("2500.00", "0"), 1)
        assert breakdown.base_price == Decimal("2500.00")

    def test_add_ons_and_discount(self):
        breakdown = compute_breakdown(
            _car(), 2, Decimal("500"), Decimal("100"), Decimal("500")
        )
        assert breakdown.base_price == Decimal("2000.00")
        assert breakdown.total_before_discount == Decimal("2600.00")
        assert breakdown.total_price == Decimal("2100.00")
        assert breakdown.advance_amount == Decimal("1050.00")
        assert breakdown.remaining_amount == Decimal("1050.00")

    def test_discount_is_clamped_to_total(self):
        breakdown = compute_breakdown(_car("100.00"), 1, discount_amount=Decimal("999"))
        assert breakdown.discount_amount == Decimal("100.00")
        assert breakdown.total_price == Decimal("0.00")
        assert breakdown.advance_amount + breakdown.remaining_amount == Decimal("0.00")

    def test_negative_add_on_is_rejected(self):
        with pytest.raises(ValidationError):
            compute_breakdown(_car(), 1, insurance_amount=Decimal("-1"))

    def test_zero_days_is_rejected(self):
        with pytest.raises(ValidationError):
            compute_breakdown(_car(), 0)

    def test_same_inputs_same_breakdown(self):
        first = compute_breakdown(_car(), 3, Decimal("250"))
        assert compute_breakdown(_car(), 3, Decimal("250")) == first


class TestSplitAdvance:
    def test_even_total(self):
        assert split_advance(Decimal("2500.00")) == (Decimal("1250.00"), Decimal("1250.00"))

    def test_half_unit_rounds_up(self):
        advance, remaining = split_advance(Decimal("1001.00"))
        assert advance == Decimal("501.00")
        assert remaining == Decimal("500.00")

    def test_parts_always_sum_to_total(self):
        total = Decimal("1234.57")
        advance, remaining = split_advance(total)
        assert advance == Decimal("617.00")
        assert advance + remaining == total
