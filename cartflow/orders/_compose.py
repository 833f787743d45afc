"""
Composition — a finished CheckoutSession becomes a wire submission.

Totals come from pricing.price() and the payment status from
payment.resolve_status(), both evaluated exactly once here.
"""

from __future__ import annotations

import uuid

from cartflow._types import TenantId
from cartflow.payment import PaymentMethod, resolve_order_status, resolve_status
from cartflow.pricing import NO_TAX, TaxPolicy, price
from cartflow.wizard import CheckoutSession, Origin, StaffPreference
from cartflow.orders._types import BookingSubmission, OrderLine, OrderSubmission


def new_local_ref() -> str:
    """Client-side reference of a submission; reused as its idempotency key."""
    return f"tmp-{uuid.uuid4().hex}"


def default_notes(origin: Origin, business: str | None = None) -> str:
    if origin is Origin.WEBSITE:
        return f"Online order from {business or 'website'}"
    return ""


def compose_order(
    session: CheckoutSession,
    *,
    tenant: TenantId,
    origin: Origin | None = None,
    notes: str | None = None,
    business: str | None = None,
    tax: TaxPolicy = NO_TAX,
    local_ref: str | None = None,
) -> OrderSubmission:
    """
    Example:
        sub = compose_order(wizard.session, tenant=42, business="Glow Salon")
        sub.to_payload()["payment_status"]   # "paid" for card

    origin defaults to the session's flow origin. The customer's own notes
    win over the generated default.
    """
    origin = origin or session.flow.origin or Origin.POS
    method = session.payment_method or session.flow.default_payment or PaymentMethod.CASH
    items = session.cart.items if session.cart is not None else ()
    customer = session.customer

    if notes is None:
        notes = customer.notes.strip() or default_notes(origin, business)

    return OrderSubmission(
        tenant=tenant,
        origin=origin,
        lines=tuple(OrderLine.from_line_item(item) for item in items),
        totals=price(items, session.discount, tax),
        payment_method=method,
        payment_status=resolve_status(method),
        order_status=resolve_order_status(method, online=origin is Origin.WEBSITE),
        local_ref=local_ref or new_local_ref(),
        customer_name=customer.name.strip(),
        customer_email=customer.email.strip(),
        customer_phone=customer.phone.strip(),
        customer_address=customer.full_address,
        notes=notes,
    )


def compose_booking(
    session: CheckoutSession,
    *,
    tenant: TenantId,
    local_ref: str | None = None,
) -> BookingSubmission:
    booking = session.booking
    customer = session.customer
    if booking.service_ref is None:
        raise ValueError("booking session has no service selected")
    return BookingSubmission(
        tenant=tenant,
        service_id=booking.service_ref,
        customer_name=customer.name.strip(),
        customer_email=customer.email.strip(),
        customer_phone=customer.phone.strip(),
        booking_date=booking.date.strip(),
        booking_time=booking.time.strip(),
        local_ref=local_ref or new_local_ref(),
        staff_preference=booking.staff_preference,
        staff_id=booking.staff_ref if booking.staff_preference is StaffPreference.SPECIFIC else None,
        notes=customer.notes.strip(),
    )


__all__ = ("new_local_ref", "default_notes", "compose_order", "compose_booking")
