"""
Wizard — explicit state machine over a Flow.

Every move is a lookup in the flow's transition table followed by the
step's guard. Errors are values; the session is only mutated on success.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from enum import Enum
from typing import Any, Protocol

from kungfu import Result, Ok, Error

from cartflow.cart import CartStore
from cartflow.payment import PaymentMethod
from cartflow.pricing import DiscountSpec, NO_DISCOUNT
from cartflow.submit._types import ClassifiedError
from cartflow.wizard._flow import Flow
from cartflow.wizard._session import BookingDraft, CheckoutSession, CustomerDraft
from cartflow.wizard._types import Event, IllegalTransition, ValidationError, WizardError

logger = logging.getLogger(__name__)


class Placer[T](Protocol):
    """Whatever turns a finished session into a server-side record."""

    async def place(self, session: CheckoutSession) -> Result[T, ClassifiedError]: ...


_CUSTOMER_FIELDS = frozenset(f.name for f in fields(CustomerDraft))
_BOOKING_FIELDS = frozenset(f.name for f in fields(BookingDraft))


# ═══════════════════════════════════════════════════════════════════════════════
# Wizard
# ═══════════════════════════════════════════════════════════════════════════════


class Wizard[S: Enum]:
    """
    Drives one CheckoutSession through a Flow.

    Example:
        wizard = Wizard(W.purchase_flow(), cart)
        wizard.update_customer(name="Ada", email="ada@example.com", ...)
        match wizard.advance():
            case Ok(step):
                ...
            case Error(e):
                show(e.message)

        match await wizard.submit(orders_api):
            case Ok(receipt):
                wizard.acknowledge()   # clears the cart

    Note: cancel() drops the session but never the cart. Every operation on
    a cancelled wizard is an IllegalTransition until restart().
    """

    def __init__(self, flow: Flow[S], cart: CartStore | None = None) -> None:
        self.flow = flow
        self.cart = cart
        self.session: CheckoutSession | None = self._fresh()
        self.placed: Any = None

    def _fresh(self) -> CheckoutSession:
        return CheckoutSession(
            flow=self.flow,
            step=self.flow.initial,
            cart=self.cart,
            payment_method=self.flow.default_payment,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def step(self) -> S | None:
        return self.session.step if self.session is not None else None  # type: ignore[return-value]

    @property
    def is_cancelled(self) -> bool:
        return self.session is None

    @property
    def is_submitted(self) -> bool:
        return self.session is not None and self.session.step is self.flow.terminal

    def validate(self) -> Result[None, WizardError]:
        """Run the current step's guard without moving."""
        if self.session is None:
            return Error(IllegalTransition(None, reason="session was cancelled"))
        return self.flow.guard_for(self.session.step)(self.session)

    def can_advance(self) -> bool:
        if self.session is None:
            return False
        if self.flow.target(self.session.step, Event.ADVANCE) is None:
            return False
        return isinstance(self.validate(), Ok)

    # ───────────────────────────────────────────────────────────────────────────
    # Transitions
    # ───────────────────────────────────────────────────────────────────────────

    def _lookup(self, event: Event) -> Result[tuple[CheckoutSession, S], IllegalTransition]:
        session = self.session
        if session is None:
            return Error(IllegalTransition(None, event, "session was cancelled"))
        target = self.flow.target(session.step, event)
        if target is None:
            return Error(IllegalTransition(session.step, event))
        return Ok((session, target))

    def advance(self) -> Result[S, WizardError]:
        match self._lookup(Event.ADVANCE):
            case Ok((session, target)):
                pass
            case Error(e):
                return Error(e)

        match self.flow.guard_for(session.step)(session):
            case Error(invalid):
                logger.debug("%s: guard rejected %s: %s", self.flow.name, session.step.value, invalid.fields)
                return Error(invalid)
            case Ok(_):
                pass

        logger.debug("%s: %s → %s", self.flow.name, session.step.value, target.value)
        session.step = target
        return Ok(target)

    def retreat(self) -> Result[S, IllegalTransition]:
        """Move back one step. Entered data is kept."""
        match self._lookup(Event.RETREAT):
            case Ok((session, target)):
                logger.debug("%s: %s ← %s", self.flow.name, target.value, session.step.value)
                session.step = target
                return Ok(target)
            case Error(e):
                return Error(e)

    def cancel(self) -> None:
        if self.session is not None:
            logger.debug("%s: session %s cancelled", self.flow.name, self.session.id)
        self.session = None
        self.placed = None

    def restart(self) -> CheckoutSession:
        """Fresh session on the same flow and cart, e.g. for the next customer."""
        self.session = self._fresh()
        self.placed = None
        return self.session

    async def submit[T](self, placer: Placer[T]) -> Result[T, ClassifiedError | WizardError]:
        """
        Validate every step, then place the session.

        Only allowed from the pre-terminal step. On failure the session
        stays where it was with every field intact.
        """
        match self._lookup(Event.SUBMIT):
            case Ok((session, target)):
                pass
            case Error(e):
                return Error(e)

        for guard in self.flow.guards_through(session.step):
            match guard(session):
                case Error(invalid):
                    logger.debug("%s: submit blocked: %s", self.flow.name, invalid.fields)
                    return Error(invalid)
                case Ok(_):
                    pass

        result = await placer.place(session)
        match result:
            case Ok(value):
                session.step = target
                if self.session is session:
                    self.placed = value
                else:
                    logger.info("%s: session %s was replaced while submitting", self.flow.name, session.id)
                logger.info("%s: session %s submitted", self.flow.name, session.id)
                return Ok(value)
            case Error(e):
                logger.info("%s: session %s submission failed: %s", self.flow.name, session.id, e)
                return Error(e)

    def acknowledge(self) -> Result[None, IllegalTransition]:
        """User confirmed the success screen: the cart is cleared."""
        if not self.is_submitted:
            return Error(IllegalTransition(self.step, reason="nothing submitted to acknowledge"))
        if self.cart is not None:
            self.cart.clear()
        return Ok(None)

    # ───────────────────────────────────────────────────────────────────────────
    # Field edits
    # ───────────────────────────────────────────────────────────────────────────

    def _editable(self) -> Result[CheckoutSession, IllegalTransition]:
        if self.session is None:
            return Error(IllegalTransition(None, reason="session was cancelled"))
        if self.session.step is self.flow.terminal:
            return Error(IllegalTransition(self.session.step, reason="session already submitted"))
        return Ok(self.session)

    def update_customer(self, **values: str) -> Result[CustomerDraft, IllegalTransition]:
        unknown = set(values) - _CUSTOMER_FIELDS
        if unknown:
            raise TypeError(f"Unknown customer fields: {sorted(unknown)}")
        match self._editable():
            case Ok(session):
                for name, value in values.items():
                    setattr(session.customer, name, value)
                return Ok(session.customer)
            case Error(e):
                return Error(e)

    def update_booking(self, **values: Any) -> Result[BookingDraft, IllegalTransition]:
        unknown = set(values) - _BOOKING_FIELDS
        if unknown:
            raise TypeError(f"Unknown booking fields: {sorted(unknown)}")
        match self._editable():
            case Ok(session):
                for name, value in values.items():
                    setattr(session.booking, name, value)
                return Ok(session.booking)
            case Error(e):
                return Error(e)

    def choose_payment(self, method: PaymentMethod | None) -> Result[None, IllegalTransition]:
        match self._editable():
            case Ok(session):
                session.payment_method = method
                return Ok(None)
            case Error(e):
                return Error(e)

    def set_discount(self, discount: DiscountSpec = NO_DISCOUNT) -> Result[None, IllegalTransition]:
        match self._editable():
            case Ok(session):
                session.discount = discount
                return Ok(None)
            case Error(e):
                return Error(e)


__all__ = ("Placer", "Wizard")
