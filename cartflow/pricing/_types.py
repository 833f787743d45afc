"""
Pricing types — discount terms and price breakdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

from cartflow._types import Money, ZERO, money


# ═══════════════════════════════════════════════════════════════════════════════
# Priced — anything the engine can total
# ═══════════════════════════════════════════════════════════════════════════════


class Priced(Protocol):
    """A line with a unit price and a quantity (LineItem, OrderLine, ...)."""

    @property
    def unit_price(self) -> Money: ...

    @property
    def quantity(self) -> int: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Discount
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountMode(Enum):
    """How a discount magnitude is interpreted."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


@dataclass(frozen=True, slots=True)
class DiscountSpec:
    """
    Discount mode + magnitude.

    Note: magnitude is not validated here. Negative values count as 0 and
    anything above the subtotal is clamped when the breakdown is computed.
    """

    mode: DiscountMode = DiscountMode.FIXED
    magnitude: Decimal = ZERO

    @classmethod
    def fixed(cls, amount: Decimal | int | float | str) -> DiscountSpec:
        return cls(DiscountMode.FIXED, Decimal(str(amount)))

    @classmethod
    def percentage(cls, percent: Decimal | int | float | str) -> DiscountSpec:
        return cls(DiscountMode.PERCENTAGE, Decimal(str(percent)))


NO_DISCOUNT = DiscountSpec()


# ═══════════════════════════════════════════════════════════════════════════════
# Price Breakdown
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    """
    Derived totals. Always produced by `price()`, never edited.

    Invariant: total == subtotal + tax - discount and total >= 0.
    """

    subtotal: Money
    tax: Money
    discount: Money
    total: Money

    @classmethod
    def empty(cls) -> PriceBreakdown:
        return cls(ZERO, ZERO, ZERO, ZERO)

    def as_payload(self) -> dict[str, float]:
        """Numeric wire form used by order payloads."""
        return {
            "subtotal": float(money(self.subtotal)),
            "tax": float(money(self.tax)),
            "discount": float(money(self.discount)),
            "total": float(money(self.total)),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Priced",
    "DiscountMode",
    "DiscountSpec",
    "NO_DISCOUNT",
    "PriceBreakdown",
)
