"""Tests for fare calculation."""

from __future__ import annotations

import pytest

from airport.contracts.enums import TicketClass
from airport.services.pricing import class_fare, quote_price


class TestClassFare:
    @pytest.mark.parametrize(
        "ticket_class, expected",
        [(TicketClass.ECONOMY, 120.0), ("business", 300.0), ("first", 600.0)],
    )
    def test_multipliers(self, ticket_class, expected):
        assert class_fare(120.0, ticket_class) == expected

    def test_unknown_class(self):
        with pytest.raises(ValueError):
            class_fare(100.0, "premium")


class TestQuotePrice:
    def test_single_economy(self):
        quote = quote_price(100.0)
        assert quote.base_price == 100.0
        assert quote.class_multiplier == 1.0
        assert quote.taxes == 10.0
        assert quote.fees == 5.0
        assert quote.discount == 0.0
        assert quote.total_price == 115.0
        assert quote.currency == "USD"

    def test_group_first_class(self):
        quote = quote_price(100.0, "first", passenger_count=3)
        assert quote.base_price == 1500.0
        assert quote.passenger_count == 3
        assert quote.total_price == 1725.0

    def test_frequent_flyer_discount_applies_to_total(self):
        quote = quote_price(100.0, frequent_flyer=True)
        assert quote.discount == 11.5
        assert quote.total_price == 103.5

    def test_breakdown(self):
        breakdown = quote_price(200.0, "business").breakdown
        assert breakdown.base_fare == 500.0
        assert breakdown.fuel_surcharge == 10.0
        assert breakdown.taxes == 50.0
        assert breakdown.airport_tax == 25.0
        assert breakdown.fees == 25.0

    def test_rounding_to_cents(self):
        quote = quote_price(0.333)
        assert quote.base_price == 0.33
        assert quote.taxes == 0.03
        assert quote.fees == 0.02
        assert quote.total_price == 0.38
