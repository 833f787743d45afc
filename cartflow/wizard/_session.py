"""
Checkout session — the draft collected by a wizard.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from cartflow.cart import CartStore
from cartflow.payment import PaymentMethod
from cartflow.pricing import DiscountSpec, NO_DISCOUNT, PriceBreakdown, TaxPolicy, NO_TAX, price
from cartflow.wizard._types import StaffPreference

if TYPE_CHECKING:
    from cartflow.wizard._flow import Flow


@dataclass(slots=True)
class CustomerDraft:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    postal_code: str = ""
    notes: str = ""

    @property
    def full_address(self) -> str:
        """Single-line address as the receipts endpoint stores it."""
        if not self.address:
            return ""
        locality = " ".join(p for p in (self.city.strip(), self.postal_code.strip()) if p)
        return f"{self.address.strip()}, {locality}" if locality else self.address.strip()


@dataclass(slots=True)
class BookingDraft:
    service_ref: int | str | None = None
    staff_preference: StaffPreference = StaffPreference.ANY
    staff_ref: int | str | None = None
    date: str = ""  # YYYY-MM-DD
    time: str = ""  # HH:MM


@dataclass(slots=True)
class CheckoutSession:
    """
    State owned by one Wizard. Discarded on success or cancellation.

    Note: cart is a reference, not a copy. Cancelling the session never
    touches it.
    """

    flow: Flow
    step: Enum
    cart: CartStore | None = None
    customer: CustomerDraft = field(default_factory=CustomerDraft)
    booking: BookingDraft = field(default_factory=BookingDraft)
    payment_method: PaymentMethod | None = None
    discount: DiscountSpec = NO_DISCOUNT
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def breakdown(self, tax: TaxPolicy = NO_TAX) -> PriceBreakdown:
        """Totals for display. Same function the submission uses."""
        items = self.cart.items if self.cart is not None else ()
        return price(items, self.discount, tax)


__all__ = ("CustomerDraft", "BookingDraft", "CheckoutSession")
