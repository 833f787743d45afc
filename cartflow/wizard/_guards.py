"""
Guards — per-step validation predicates over a CheckoutSession.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date, time

from kungfu import Result, Ok, Error

from cartflow.wizard._session import CheckoutSession
from cartflow.wizard._types import StaffPreference, ValidationError

type Guard = Callable[[CheckoutSession], Result[None, ValidationError]]

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _verdict(session: CheckoutSession, missing: list[str], invalid: list[str]) -> Result[None, ValidationError]:
    if missing or invalid:
        return Error(ValidationError(session.step, tuple(missing), tuple(invalid)))
    return Ok(None)


def customer_fields(*required: str) -> Guard:
    """
    All listed customer fields non-empty; email well-formed when required.
    """

    def guard(session: CheckoutSession) -> Result[None, ValidationError]:
        missing = [f for f in required if _blank(getattr(session.customer, f))]
        invalid: list[str] = []
        if "email" in required and "email" not in missing:
            if not _EMAIL.match(session.customer.email.strip()):
                invalid.append("email")
        return _verdict(session, missing, invalid)

    return guard


def payment_chosen(session: CheckoutSession) -> Result[None, ValidationError]:
    return _verdict(session, ["payment_method"] if session.payment_method is None else [], [])


def cart_not_empty(session: CheckoutSession) -> Result[None, ValidationError]:
    empty = session.cart is None or session.cart.is_empty
    return _verdict(session, ["cart"] if empty else [], [])


def service_selected(session: CheckoutSession) -> Result[None, ValidationError]:
    return _verdict(session, ["service_ref"] if _blank(session.booking.service_ref) else [], [])


def staff_resolved(session: CheckoutSession) -> Result[None, ValidationError]:
    """A staff member is required only when the preference is 'specific'."""
    booking = session.booking
    needs_staff = booking.staff_preference is StaffPreference.SPECIFIC
    return _verdict(session, ["staff_ref"] if needs_staff and _blank(booking.staff_ref) else [], [])


def schedule_set(session: CheckoutSession) -> Result[None, ValidationError]:
    booking = session.booking
    missing = [f for f in ("date", "time") if _blank(getattr(booking, f))]
    invalid: list[str] = []
    if "date" not in missing:
        try:
            date.fromisoformat(booking.date.strip())
        except ValueError:
            invalid.append("date")
    if "time" not in missing:
        try:
            time.fromisoformat(booking.time.strip())
        except ValueError:
            invalid.append("time")
    return _verdict(session, missing, invalid)


def always(session: CheckoutSession) -> Result[None, ValidationError]:
    return Ok(None)


__all__ = (
    "Guard",
    "customer_fields",
    "payment_chosen",
    "cart_not_empty",
    "service_selected",
    "staff_resolved",
    "schedule_set",
    "always",
)
