"""
Payment — method → status stamped on an order at submission time.
"""

from __future__ import annotations

from enum import Enum


class PaymentMethod(Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"
    OTHER = "other"
    COD = "cod"  # cash on delivery


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PAID = "paid"


class OrderStatus(Enum):
    """Fulfilment state of a receipt, as the receipts endpoint stores it."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def resolve_status(method: PaymentMethod) -> PaymentStatus:
    """
    Payment status for a freshly placed order.

    Note: Evaluated once, when the submission is composed. A stored status
    is never re-derived from the method afterwards.
    """
    match method:
        case PaymentMethod.COD:
            return PaymentStatus.PENDING
        case PaymentMethod.CARD:
            return PaymentStatus.PAID
        case _:
            return PaymentStatus.COMPLETED


def resolve_order_status(method: PaymentMethod, *, online: bool = False) -> OrderStatus:
    """
    Counter sales are handed over on the spot unless paid on delivery.
    Online orders are only fulfilled up front when paid by card.
    """
    match method:
        case PaymentMethod.COD:
            return OrderStatus.PENDING
        case PaymentMethod.CARD:
            return OrderStatus.DELIVERED
        case _ if online:
            return OrderStatus.PENDING
        case _:
            return OrderStatus.DELIVERED


__all__ = (
    "PaymentMethod",
    "PaymentStatus",
    "OrderStatus",
    "resolve_status",
    "resolve_order_status",
)
