"""
Orders — compose submissions from a finished session and send them.

    from cartflow import orders as O

    api = O.OrdersApi(client, tenant=42, business="Glow Salon")

    await wizard.submit(api)                       # via Placer protocol
    await api.create_order(O.compose_order(session, tenant=42))
    await api.update_order_status(17, order_status=OrderStatus.SHIPPED)

Endpoints:

    POS order        POST /receipts            (bearer token)
    storefront order POST /receipts/public
    booking          POST /bookings/customer
    status update    PUT  /receipts/{id}/status
"""

from cartflow.orders._types import (
    OrderLine,
    OrderSubmission,
    BookingSubmission,
    Receipt,
    BookingConfirmation,
)
from cartflow.orders._compose import (
    new_local_ref,
    default_notes,
    compose_order,
    compose_booking,
)
from cartflow.orders._api import (
    RECEIPTS_PATH,
    PUBLIC_RECEIPTS_PATH,
    BOOKINGS_PATH,
    receipts_path,
    unwrap,
    parse_created_receipt,
    OrdersApi,
)

__all__ = (
    # Types
    "OrderLine",
    "OrderSubmission",
    "BookingSubmission",
    "Receipt",
    "BookingConfirmation",
    # Composition
    "new_local_ref",
    "default_notes",
    "compose_order",
    "compose_booking",
    # API
    "RECEIPTS_PATH",
    "PUBLIC_RECEIPTS_PATH",
    "BOOKINGS_PATH",
    "receipts_path",
    "unwrap",
    "parse_created_receipt",
    "OrdersApi",
)
