"""
Wizard — guarded multi-step checkout and booking flows.

    from cartflow import wizard as W

    wizard = W.Wizard(W.purchase_flow(W.POS_FIELDS, origin=W.Origin.POS), cart)
    wizard.update_customer(name="Walk-in", phone="555-0100")
    wizard.advance()          # customer-info → payment
    wizard.advance()          # payment → confirmation
    await wizard.submit(api)  # confirmation → submitted

Flows:

    purchase:  customer-info → payment → confirmation → submitted
    booking:   service-selection → staff-preference → schedule
               → customer-info → submitted
"""

from cartflow.wizard._types import (
    PurchaseStep,
    BookingStep,
    Event,
    Origin,
    StaffPreference,
    ValidationError,
    IllegalTransition,
    WizardError,
)
from cartflow.wizard._session import (
    CustomerDraft,
    BookingDraft,
    CheckoutSession,
)
from cartflow.wizard._guards import (
    Guard,
    customer_fields,
    payment_chosen,
    cart_not_empty,
    service_selected,
    staff_resolved,
    schedule_set,
)
from cartflow.wizard._flow import (
    STOREFRONT_FIELDS,
    POS_FIELDS,
    BOOKING_FIELDS,
    Transitions,
    linear_transitions,
    Flow,
    purchase_flow,
    pos_flow,
    booking_flow,
)
from cartflow.wizard._machine import Placer, Wizard

__all__ = (
    # Types
    "PurchaseStep",
    "BookingStep",
    "Event",
    "Origin",
    "StaffPreference",
    "ValidationError",
    "IllegalTransition",
    "WizardError",
    # Session
    "CustomerDraft",
    "BookingDraft",
    "CheckoutSession",
    # Guards
    "Guard",
    "customer_fields",
    "payment_chosen",
    "cart_not_empty",
    "service_selected",
    "staff_resolved",
    "schedule_set",
    # Flows
    "STOREFRONT_FIELDS",
    "POS_FIELDS",
    "BOOKING_FIELDS",
    "Transitions",
    "linear_transitions",
    "Flow",
    "purchase_flow",
    "pos_flow",
    "booking_flow",
    # Machine
    "Placer",
    "Wizard",
)
