"""
Flow — ordered steps, guards and an explicit transition table.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from cartflow.payment import PaymentMethod
from cartflow.wizard._types import BookingStep, Event, Origin, PurchaseStep
from cartflow.wizard._guards import (
    Guard,
    always,
    cart_not_empty,
    customer_fields,
    payment_chosen,
    schedule_set,
    service_selected,
    staff_resolved,
)

# Mandatory customer fields per surface
STOREFRONT_FIELDS = ("name", "email", "phone", "address", "city", "postal_code")
POS_FIELDS = ("name", "phone")
BOOKING_FIELDS = ("name", "email", "phone")


type Transitions[S] = Mapping[tuple[S, Event], S]


def linear_transitions[S: Enum](steps: tuple[S, ...]) -> dict[tuple[S, Event], S]:
    """
    Transition table of a strictly linear flow.

    steps[-1] is terminal and only reachable from steps[-2] via SUBMIT.
    ADVANCE moves forward up to steps[-2]; RETREAT moves back from any
    non-initial, non-terminal step. Nothing leaves the terminal step.
    """
    if len(steps) < 2:
        raise ValueError("A flow needs at least one step before its terminal step")
    table: dict[tuple[S, Event], S] = {}
    working = steps[:-1]
    for current, following in zip(working, working[1:]):
        table[(current, Event.ADVANCE)] = following
        table[(following, Event.RETREAT)] = current
    table[(working[-1], Event.SUBMIT)] = steps[-1]
    return table


@dataclass(frozen=True, slots=True)
class Flow[S: Enum]:
    """
    One wizard flavor: purchase (storefront / POS) or booking.

    guards[step] runs before ADVANCE out of step, and before SUBMIT every
    guard from the initial to the pre-terminal step runs again.
    """

    name: str
    steps: tuple[S, ...]
    guards: Mapping[S, Guard]
    transitions: Transitions[S]
    origin: Origin | None = None
    default_payment: PaymentMethod | None = None

    @classmethod
    def linear(
        cls,
        name: str,
        steps: tuple[S, ...],
        guards: Mapping[S, Guard],
        *,
        origin: Origin | None = None,
        default_payment: PaymentMethod | None = None,
    ) -> Flow[S]:
        return cls(
            name=name,
            steps=steps,
            guards=guards,
            transitions=linear_transitions(steps),
            origin=origin,
            default_payment=default_payment,
        )

    @property
    def initial(self) -> S:
        return self.steps[0]

    @property
    def terminal(self) -> S:
        return self.steps[-1]

    @property
    def pre_terminal(self) -> S:
        return self.steps[-2]

    @property
    def is_booking(self) -> bool:
        return self.origin is None

    def target(self, step: S, event: Event) -> S | None:
        return self.transitions.get((step, event))

    def guard_for(self, step: S) -> Guard:
        return self.guards.get(step, always)

    def guards_through(self, step: S) -> tuple[Guard, ...]:
        """Guards of every step from the initial one up to and including step."""
        index = self.steps.index(step)
        return tuple(self.guard_for(s) for s in self.steps[: index + 1])


def purchase_flow(
    required: tuple[str, ...] = STOREFRONT_FIELDS,
    *,
    origin: Origin = Origin.WEBSITE,
    default_payment: PaymentMethod | None = None,
) -> Flow[PurchaseStep]:
    """
    customer-info → payment → confirmation → submitted

    Storefront defaults to card payment, the POS to cash.
    """
    if default_payment is None:
        default_payment = PaymentMethod.CASH if origin is Origin.POS else PaymentMethod.CARD
    return Flow.linear(
        f"purchase:{origin.value}",
        tuple(PurchaseStep),
        {
            PurchaseStep.CUSTOMER_INFO: customer_fields(*required),
            PurchaseStep.PAYMENT: payment_chosen,
            PurchaseStep.CONFIRMATION: cart_not_empty,
        },
        origin=origin,
        default_payment=default_payment,
    )


def pos_flow() -> Flow[PurchaseStep]:
    return purchase_flow(POS_FIELDS, origin=Origin.POS)


def booking_flow(required: tuple[str, ...] = BOOKING_FIELDS) -> Flow[BookingStep]:
    """service-selection → staff-preference → schedule → customer-info → submitted"""
    return Flow.linear(
        "booking",
        tuple(BookingStep),
        {
            BookingStep.SERVICE_SELECTION: service_selected,
            BookingStep.STAFF_PREFERENCE: staff_resolved,
            BookingStep.SCHEDULE: schedule_set,
            BookingStep.CUSTOMER_INFO: customer_fields(*required),
        },
    )


__all__ = (
    "STOREFRONT_FIELDS",
    "POS_FIELDS",
    "BOOKING_FIELDS",
    "Transitions",
    "linear_transitions",
    "Flow",
    "purchase_flow",
    "pos_flow",
    "booking_flow",
)
