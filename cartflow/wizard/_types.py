"""
Wizard types — steps, events, validation and transition errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from cartflow.submit._types import ClassifiedError, ErrorKind


# ═══════════════════════════════════════════════════════════════════════════════
# Steps — one enum per flow, in order
# ═══════════════════════════════════════════════════════════════════════════════


class PurchaseStep(Enum):
    CUSTOMER_INFO = "customer-info"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    SUBMITTED = "submitted"


class BookingStep(Enum):
    SERVICE_SELECTION = "service-selection"
    STAFF_PREFERENCE = "staff-preference"
    SCHEDULE = "schedule"
    CUSTOMER_INFO = "customer-info"
    SUBMITTED = "submitted"


class Event(Enum):
    """Inputs to the state machine."""

    ADVANCE = auto()
    RETREAT = auto()
    SUBMIT = auto()


class Origin(Enum):
    """Which surface placed an order."""

    POS = "pos"
    WEBSITE = "website"


class StaffPreference(Enum):
    ANY = "any"
    SPECIFIC = "specific"


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════

_LABELS = {
    "name": "name",
    "email": "email",
    "phone": "phone number",
    "address": "address",
    "city": "city",
    "postal_code": "postal code",
    "payment_method": "payment method",
    "service_ref": "service",
    "staff_ref": "staff member",
    "date": "date",
    "time": "time",
    "cart": "cart items",
}


@dataclass(frozen=True, slots=True)
class ValidationError:
    """
    A step's guard rejected the session. Never reaches the network.

    missing: required fields that are empty.
    invalid: fields present but malformed.
    """

    step: Enum
    missing: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return self.missing + self.invalid

    @property
    def message(self) -> str:
        parts: list[str] = []
        if self.missing:
            parts.append(
                "Please fill in all required fields: "
                + ", ".join(_LABELS.get(f, f) for f in self.missing)
            )
        if self.invalid:
            parts.append(
                "Please correct: " + ", ".join(_LABELS.get(f, f) for f in self.invalid)
            )
        return ". ".join(parts) or "Invalid input"

    def classified(self) -> ClassifiedError:
        return ClassifiedError(
            kind=ErrorKind.VALIDATION,
            message=self.message,
            details=self.fields,
        )


@dataclass(frozen=True, slots=True)
class IllegalTransition:
    """
    No entry for (step, event) in the flow's transition table.

    event is None for field edits on a cancelled or finished session.
    """

    step: Enum | None
    event: Event | None = None
    reason: str = ""

    @property
    def message(self) -> str:
        where = self.step.value if self.step is not None else "cancelled session"
        action = self.event.name.lower() if self.event is not None else "edit"
        text = f"Cannot {action} from {where}"
        return f"{text}: {self.reason}" if self.reason else text

    def classified(self) -> ClassifiedError:
        return ClassifiedError(kind=ErrorKind.VALIDATION, message=self.message)


type WizardError = ValidationError | IllegalTransition


__all__ = (
    "PurchaseStep",
    "BookingStep",
    "Event",
    "Origin",
    "StaffPreference",
    "ValidationError",
    "IllegalTransition",
    "WizardError",
)
