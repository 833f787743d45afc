"""
cartflow — cart and checkout engine for POS and storefront clients.

    from cartflow import cart as K      # Line items, stock ceilings, persistence
    from cartflow import pricing as P   # Subtotal, discount, tax, total
    from cartflow import wizard as W    # Guarded checkout / booking flows
    from cartflow import submit as X    # Retries, rate limits, idempotency
    from cartflow import orders as O    # Receipts and bookings endpoints
"""

from cartflow import pricing
from cartflow import cart
from cartflow import payment
from cartflow import submit
from cartflow import wizard
from cartflow import orders
from cartflow import config
from cartflow._types import (
    Lazy,
    Money,
    TenantId,
    money,
)

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "cart",
    "payment",
    "submit",
    "wizard",
    "orders",
    "config",
    "Lazy",
    "Money",
    "TenantId",
    "money",
)
