"""Pricing engine tests."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from cartflow import pricing as P
from cartflow._types import money


@dataclass(frozen=True)
class Line:
    unit_price: Decimal
    quantity: int


def lines(*pairs):
    return [Line(money(p), q) for p, q in pairs]


class TestSubtotal:
    def test_empty_cart_prices_to_zero(self):
        breakdown = P.price([])
        assert breakdown == P.PriceBreakdown.empty()

    def test_subtotal_sums_price_times_quantity(self):
        assert P.subtotal_of(lines(("10", 2), ("5", 1))) == Decimal("25.00")

    def test_subtotal_is_cent_quantized(self):
        assert P.subtotal_of(lines(("0.1", 3))) == Decimal("0.30")


class TestDiscount:
    def test_fixed_discount_example(self):
        breakdown = P.price(lines(("10", 2), ("5", 1)), P.DiscountSpec.fixed(5))
        assert breakdown.subtotal == Decimal("25.00")
        assert breakdown.discount == Decimal("5.00")
        assert breakdown.tax == Decimal("0.00")
        assert breakdown.total == Decimal("20.00")

    def test_fixed_discount_is_capped_at_subtotal(self):
        breakdown = P.price(lines(("10", 1)), P.DiscountSpec.fixed(50))
        assert breakdown.discount == Decimal("10.00")
        assert breakdown.total == Decimal("0.00")

    def test_negative_fixed_discount_counts_as_zero(self):
        breakdown = P.price(lines(("10", 1)), P.DiscountSpec.fixed(-3))
        assert breakdown.discount == Decimal("0.00")
        assert breakdown.total == Decimal("10.00")

    @pytest.mark.parametrize(
        "percent, expected",
        [
            (10, "2.50"),
            (100, "25.00"),
            (150, "25.00"),
            (0, "0.00"),
            (-20, "0.00"),
        ],
    )
    def test_percentage_discount_is_clamped(self, percent, expected):
        breakdown = P.price(lines(("10", 2), ("5", 1)), P.DiscountSpec.percentage(percent))
        assert breakdown.discount == Decimal(expected)
        assert breakdown.total >= 0

    def test_percentage_rounds_half_up_to_cents(self):
        # 12.5% of 0.20 = 0.025
        breakdown = P.price(lines(("0.20", 1)), P.DiscountSpec.percentage("12.5"))
        assert breakdown.discount == Decimal("0.03")

    def test_discount_never_goes_negative(self):
        breakdown = P.price(lines(("-5", 1)), P.DiscountSpec.fixed(2))
        assert breakdown.discount == Decimal("0.00")
        assert breakdown.total == Decimal("0.00")

    def test_no_discount_by_default(self):
        assert P.price(lines(("9.99", 1))).discount == Decimal("0.00")


class TestTax:
    def test_no_tax_placeholder_is_zero(self):
        assert P.NO_TAX(Decimal("100"), Decimal("0")) == Decimal("0.00")

    def test_custom_tax_policy_is_added_to_total(self):
        def vat(subtotal, discount):
            return (subtotal - discount) * Decimal("0.20")

        breakdown = P.price(lines(("10", 2), ("5", 1)), P.DiscountSpec.fixed(5), vat)
        assert breakdown.tax == Decimal("4.00")
        assert breakdown.total == Decimal("24.00")

    def test_negative_tax_is_clamped(self):
        breakdown = P.price(lines(("10", 1)), tax=lambda subtotal, discount: Decimal("-3"))
        assert breakdown.tax == Decimal("0.00")
        assert breakdown.total == Decimal("10.00")


class TestBreakdown:
    def test_total_identity_holds(self):
        breakdown = P.price(lines(("3.33", 3), ("0.01", 7)), P.DiscountSpec.percentage(33))
        assert breakdown.total == breakdown.subtotal + breakdown.tax - breakdown.discount

    def test_payload_is_numeric(self):
        payload = P.price(lines(("10", 2), ("5", 1)), P.DiscountSpec.fixed(5)).as_payload()
        assert payload == {"subtotal": 25.0, "tax": 0.0, "discount": 5.0, "total": 20.0}
