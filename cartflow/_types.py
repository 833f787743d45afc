"""
Core types for cartflow.

Re-exports from kungfu + money and tenant aliases.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Monetary amount. Always quantized to cents before it leaves the engine."""

type TenantId = str | int
"""Owning tenant (the storefront's `client_id`)."""

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | float | str) -> Money:
    """
    Coerce to a cent-quantized Decimal.

    Floats go through str() so 12.99 stays 12.99 instead of its binary expansion.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    "Money",
    "TenantId",
    # Money helpers
    "CENT",
    "ZERO",
    "money",
)
