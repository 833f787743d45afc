"""
Pricing engine — pure functions from line items + discount to a breakdown.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from cartflow._types import Money, ZERO, money
from cartflow.pricing._types import (
    Priced,
    DiscountMode,
    DiscountSpec,
    NO_DISCOUNT,
    PriceBreakdown,
)
from cartflow.pricing._tax import TaxPolicy, NO_TAX

_HUNDRED = Decimal(100)


def subtotal_of(items: Iterable[Priced]) -> Money:
    """Σ(unit_price × quantity). No items ⇒ 0."""
    return money(sum((item.unit_price * item.quantity for item in items), ZERO))


def discount_of(spec: DiscountSpec, subtotal: Money) -> Money:
    """
    Monetary discount for a subtotal.

    Clamped to [0, subtotal] for both modes; never rejected.
    """
    magnitude = max(spec.magnitude, ZERO)
    match spec.mode:
        case DiscountMode.FIXED:
            raw = magnitude
        case DiscountMode.PERCENTAGE:
            raw = subtotal * magnitude / _HUNDRED
    return min(money(raw), max(subtotal, ZERO))


def price(
    items: Iterable[Priced],
    discount: DiscountSpec = NO_DISCOUNT,
    tax: TaxPolicy = NO_TAX,
) -> PriceBreakdown:
    """
    Compute the price breakdown for a set of lines.

    Single source of truth for displayed, receipt and submitted totals.
    Safe to call on every render: no state, no side effects.

    Example:
        P.price(cart.items, P.DiscountSpec.fixed(5))
        # PriceBreakdown(subtotal=25.00, tax=0.00, discount=5.00, total=20.00)
    """
    subtotal = subtotal_of(items)
    off = discount_of(discount, subtotal)
    levy = max(money(tax(subtotal, off)), ZERO)

    total = subtotal + levy - off

    return PriceBreakdown(
        subtotal=subtotal,
        tax=levy,
        discount=off,
        total=max(total, ZERO),
    )


__all__ = ("subtotal_of", "discount_of", "price")
