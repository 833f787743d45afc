"""
Order and booking submissions, and the records the server returns.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cartflow._types import Money, TenantId, ZERO, money
from cartflow.cart import ItemKind, LineItem
from cartflow.payment import OrderStatus, PaymentMethod, PaymentStatus
from cartflow.pricing import PriceBreakdown
from cartflow.wizard import Origin, StaffPreference


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderLine:
    """One receipt line. Exactly one of product_id / service_id is set for catalog lines."""

    name: str
    price: Money
    quantity: int
    total: Money
    product_id: int | str | None = None
    service_id: int | str | None = None

    @classmethod
    def from_line_item(cls, item: LineItem) -> OrderLine:
        ref = item.catalog_ref
        return cls(
            name=item.name,
            price=item.unit_price,
            quantity=item.quantity,
            total=item.line_total,
            product_id=ref if item.kind is ItemKind.PRODUCT else None,
            service_id=ref if item.kind is ItemKind.SERVICE else None,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "total": float(self.total),
        }
        if self.product_id is not None:
            payload["product_id"] = self.product_id
        if self.service_id is not None:
            payload["service_id"] = self.service_id
        return payload


@dataclass(frozen=True, slots=True)
class OrderSubmission:
    """
    Everything the receipts endpoint needs, frozen at composition time.

    local_ref doubles as the idempotency key of the submission.
    """

    tenant: TenantId
    origin: Origin
    lines: tuple[OrderLine, ...]
    totals: PriceBreakdown
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    order_status: OrderStatus
    local_ref: str
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    notes: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "client_id": self.tenant,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "customer_address": self.customer_address,
            "items": [line.to_payload() for line in self.lines],
            **self.totals.as_payload(),
            "payment_method": self.payment_method.value,
            "payment_status": self.payment_status.value,
            "order_status": self.order_status.value,
            "source": self.origin.value,
            "notes": self.notes,
            "local_ref": self.local_ref,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Bookings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BookingSubmission:
    tenant: TenantId
    service_id: int | str
    customer_name: str
    customer_email: str
    customer_phone: str
    booking_date: str
    booking_time: str
    local_ref: str
    staff_preference: StaffPreference = StaffPreference.ANY
    staff_id: int | str | None = None
    notes: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "service_id": self.service_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "booking_date": self.booking_date,
            "booking_time": self.booking_time,
            "notes": self.notes,
            "staff_preference": self.staff_preference.value,
            "staff_id": self.staff_id,
            "client_id": self.tenant,
            "local_ref": self.local_ref,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Server records
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Receipt:
    """Created (or updated) receipt as echoed by the server."""

    receipt_number: str
    receipt_id: int | str | None = None
    total: Money = ZERO
    payment_status: str | None = None
    order_status: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], receipt_number: Any = None) -> Receipt:
        number = receipt_number if receipt_number is not None else record.get("receipt_number")
        if number is None:
            raise ValueError("receipt has no receipt_number")
        total = record.get("total")
        return cls(
            receipt_number=str(number),
            receipt_id=record.get("id"),
            total=money(total) if total is not None else ZERO,
            payment_status=record.get("payment_status"),
            order_status=record.get("order_status"),
            raw=dict(record),
        )


@dataclass(frozen=True, slots=True)
class BookingConfirmation:
    booking_id: int | str
    staff_id: int | str | None = None
    duration: int | None = None
    price: Money | None = None
    status: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> BookingConfirmation:
        if record.get("id") is None:
            raise ValueError("booking has no id")
        duration = record.get("duration")
        price = record.get("price")
        return cls(
            booking_id=record["id"],
            staff_id=record.get("staff_id"),
            duration=int(duration) if duration is not None else None,
            price=money(price) if price is not None else None,
            status=record.get("status"),
            raw=dict(record),
        )


__all__ = (
    "OrderLine",
    "OrderSubmission",
    "BookingSubmission",
    "Receipt",
    "BookingConfirmation",
)
