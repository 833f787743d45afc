"""
Storefront — public order with card payment, then a service booking.

Run: uv run python -m examples.storefront_booking
"""

from kungfu import Ok, Error

from cartflow import cart as K
from cartflow import orders as O
from cartflow import submit as X
from cartflow import wizard as W
from examples._infra import CATALOG, FakeBackend, banner, no_wait, run


async def main() -> None:
    backend = FakeBackend()
    client = X.SubmissionClient(backend, sleep=no_wait)
    api = O.OrdersApi(client, tenant=42, business="Glow Salon")

    banner("Storefront Order")

    cart = K.CartStore.open("glow-salon", K.MemoryCartRepository())
    cart.add_item(CATALOG["conditioner"])
    cart.add_item(CATALOG["conditioner"])

    checkout = W.Wizard(W.purchase_flow(), cart)
    checkout.update_customer(
        name="Ada Lovelace",
        email="ada@example.com",
        phone="555-0100",
        address="1 Main St",
        city="Springfield",
        postal_code="12345",
    )
    checkout.advance()
    checkout.advance()

    match await checkout.submit(api):
        case Ok(receipt):
            print(f"   ✓ {receipt.receipt_number}: payment {receipt.payment_status}, order {receipt.order_status}")
        case Error(e):
            print(f"   ✗ {e.message}")

    banner("Booking")

    booking = W.Wizard(W.booking_flow())
    booking.update_booking(service_ref=CATALOG["haircut"].ref, date="2026-11-02", time="25:00")
    booking.advance()
    booking.advance()
    match booking.advance():
        case Error(e):
            print(f"   ✗ {e.message}")
    booking.update_booking(time="10:30")
    booking.advance()
    booking.update_customer(name="Grace", email="grace@example.com", phone="555-0111")

    match await booking.submit(api):
        case Ok(confirmation):
            print(f"   ✓ Booking #{confirmation.booking_id} with staff {confirmation.staff_id}, {confirmation.duration} min")
        case Error(e):
            print(f"   ✗ {e.message}")


if __name__ == "__main__":
    run(main)
