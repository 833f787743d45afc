"""
Pricing — line items + discount → price breakdown.

    from cartflow import pricing as P

    breakdown = P.price(cart.items, P.DiscountSpec.percentage(10))
    breakdown.total  # subtotal + tax - discount, never negative
"""

from cartflow.pricing._types import (
    Priced,
    DiscountMode,
    DiscountSpec,
    NO_DISCOUNT,
    PriceBreakdown,
)
from cartflow.pricing._tax import TaxPolicy, NoTax, NO_TAX
from cartflow.pricing._engine import subtotal_of, discount_of, price

__all__ = (
    # Types
    "Priced",
    "DiscountMode",
    "DiscountSpec",
    "NO_DISCOUNT",
    "PriceBreakdown",
    # Tax
    "TaxPolicy",
    "NoTax",
    "NO_TAX",
    # Engine
    "subtotal_of",
    "discount_of",
    "price",
)
