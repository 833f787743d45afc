"""
Tax policy — pluggable, currently a fixed-zero placeholder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from cartflow._types import Money, ZERO


class TaxPolicy(Protocol):
    """Computes tax for a subtotal after the discount has been derived."""

    def __call__(self, subtotal: Money, discount: Money) -> Money: ...


@dataclass(frozen=True, slots=True)
class NoTax:
    """
    Placeholder policy: tax is always zero.

    Note: No jurisdiction rules exist yet. Replace by passing another
    TaxPolicy to `price()`; callers never compute tax themselves.
    """

    def __call__(self, subtotal: Money, discount: Money) -> Money:
        return ZERO


NO_TAX: TaxPolicy = NoTax()


__all__ = ("TaxPolicy", "NoTax", "NO_TAX")
