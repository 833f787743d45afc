"""
Orders API — receipts and bookings endpoints over a SubmissionClient.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from decimal import InvalidOperation
from typing import Any

from kungfu import Result, Ok, Error

from cartflow._types import TenantId
from cartflow.payment import OrderStatus, PaymentStatus
from cartflow.pricing import NO_TAX, TaxPolicy
from cartflow.submit import ClassifiedError, Delivery, ErrorKind, Request, SubmissionClient, server_message
from cartflow.wizard import CheckoutSession, Origin
from cartflow.orders._types import BookingConfirmation, BookingSubmission, OrderSubmission, Receipt
from cartflow.orders._compose import compose_booking, compose_order

logger = logging.getLogger(__name__)

RECEIPTS_PATH = "/receipts"
PUBLIC_RECEIPTS_PATH = "/receipts/public"
BOOKINGS_PATH = "/bookings/customer"


def receipts_path(origin: Origin) -> str:
    """POS receipts need staff auth; storefront orders go to the public endpoint."""
    return RECEIPTS_PATH if origin is Origin.POS else PUBLIC_RECEIPTS_PATH


# ═══════════════════════════════════════════════════════════════════════════════
# Response parsing
# ═══════════════════════════════════════════════════════════════════════════════


def _malformed(delivery: Delivery, reason: str) -> ClassifiedError:
    logger.warning("Malformed success body (status %s): %s", delivery.status, reason)
    return ClassifiedError(
        kind=ErrorKind.CLIENT,
        message="Unexpected response from server",
        status=delivery.status,
        attempts=delivery.attempts,
        details=(reason,),
    )


def unwrap[T](
    delivery: Delivery,
    parse: Callable[[Mapping[str, Any]], T],
) -> Result[T, ClassifiedError]:
    """
    {success, message, data} envelope → parsed record.

    A 2xx with `success: false` carries the server's message as a CLIENT
    error; a body that cannot be parsed is a CLIENT error too, never an
    exception.
    """
    body = delivery.body
    if not isinstance(body, Mapping):
        return Error(_malformed(delivery, "body is not a JSON object"))

    if body.get("success") is False:
        message, details = server_message(body)
        return Error(ClassifiedError(
            kind=ErrorKind.CLIENT,
            message=message or "Request was rejected",
            status=delivery.status,
            attempts=delivery.attempts,
            details=details,
        ))

    data = body.get("data")
    if not isinstance(data, Mapping):
        return Error(_malformed(delivery, "missing data object"))

    try:
        return Ok(parse(data))
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        return Error(_malformed(delivery, str(e) or type(e).__name__))


def parse_created_receipt(data: Mapping[str, Any]) -> Receipt:
    record = data.get("receipt")
    if not isinstance(record, Mapping):
        record = data
    return Receipt.from_record(record, data.get("receipt_number"))


# ═══════════════════════════════════════════════════════════════════════════════
# OrdersApi
# ═══════════════════════════════════════════════════════════════════════════════


class OrdersApi:
    """
    Typed facade over the order endpoints.

    Example:
        api = OrdersApi(client, tenant=42, business="Glow Salon")
        match await wizard.submit(api):
            case Ok(Receipt(receipt_number=number)):
                show_receipt(number)
            case Error(e):
                show_error(e.message)

    Note: Implements the wizard's Placer protocol via place(); the session
    id is the in-flight key, the submission's local_ref the idempotency key.
    """

    def __init__(
        self,
        client: SubmissionClient,
        tenant: TenantId,
        *,
        business: str | None = None,
        tax: TaxPolicy = NO_TAX,
    ) -> None:
        self.client = client
        self.tenant = tenant
        self.business = business
        self.tax = tax

    # ─── raw endpoints ────────────────────────────────────────────────────────

    async def create_order(
        self, submission: OrderSubmission, *, session_key: str | None = None
    ) -> Result[Receipt, ClassifiedError]:
        request = Request(
            "POST",
            receipts_path(submission.origin),
            submission.to_payload(),
            idempotency_key=submission.local_ref,
            session_key=session_key,
        )
        match await self.client.submit(request):
            case Ok(delivery):
                result = unwrap(delivery, parse_created_receipt)
            case Error(e):
                return Error(e)
        match result:
            case Ok(receipt):
                logger.info(
                    "Order %s placed as receipt %s (%s, total %s)",
                    submission.local_ref,
                    receipt.receipt_number,
                    submission.origin.value,
                    submission.totals.total,
                )
        return result

    async def create_booking(
        self, submission: BookingSubmission, *, session_key: str | None = None
    ) -> Result[BookingConfirmation, ClassifiedError]:
        request = Request(
            "POST",
            BOOKINGS_PATH,
            submission.to_payload(),
            idempotency_key=submission.local_ref,
            session_key=session_key,
        )
        match await self.client.submit(request):
            case Ok(delivery):
                result = unwrap(delivery, BookingConfirmation.from_record)
            case Error(e):
                return Error(e)
        match result:
            case Ok(confirmation):
                logger.info(
                    "Booking %s confirmed as %s on %s %s",
                    submission.local_ref,
                    confirmation.booking_id,
                    submission.booking_date,
                    submission.booking_time,
                )
        return result

    async def update_order_status(
        self,
        receipt_id: int | str,
        *,
        order_status: OrderStatus | None = None,
        payment_status: PaymentStatus | None = None,
    ) -> Result[Receipt, ClassifiedError]:
        """Fulfilment update of an existing receipt. Omitted fields keep their value."""
        if order_status is None and payment_status is None:
            raise ValueError("update_order_status needs order_status or payment_status")
        body: dict[str, Any] = {}
        if order_status is not None:
            body["order_status"] = order_status.value
        if payment_status is not None:
            body["payment_status"] = payment_status.value
        request = Request(
            "PUT",
            f"{RECEIPTS_PATH}/{receipt_id}/status",
            body,
            session_key=f"receipt-{receipt_id}",
        )
        match await self.client.submit(request):
            case Ok(delivery):
                return unwrap(delivery, Receipt.from_record)
            case Error(e):
                return Error(e)

    # ─── session-level ────────────────────────────────────────────────────────

    async def place_order(self, session: CheckoutSession) -> Result[Receipt, ClassifiedError]:
        submission = compose_order(session, tenant=self.tenant, business=self.business, tax=self.tax)
        return await self.create_order(submission, session_key=session.id)

    async def place_booking(self, session: CheckoutSession) -> Result[BookingConfirmation, ClassifiedError]:
        submission = compose_booking(session, tenant=self.tenant)
        return await self.create_booking(submission, session_key=session.id)

    async def place(self, session: CheckoutSession) -> Result[Receipt | BookingConfirmation, ClassifiedError]:
        if session.flow.is_booking:
            return await self.place_booking(session)
        return await self.place_order(session)


__all__ = (
    "RECEIPTS_PATH",
    "PUBLIC_RECEIPTS_PATH",
    "BOOKINGS_PATH",
    "receipts_path",
    "unwrap",
    "parse_created_receipt",
    "OrdersApi",
)
