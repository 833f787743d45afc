"""
POS checkout — cart, stock ceiling, wizard, resilient submission.

Run: uv run python -m examples.pos_checkout
"""

from kungfu import Ok, Error

from cartflow import cart as K
from cartflow import orders as O
from cartflow import submit as X
from cartflow import wizard as W
from cartflow.pricing import DiscountSpec
from examples._infra import CATALOG, FakeBackend, banner, no_wait, run


async def main() -> None:
    banner("POS Checkout")

    cart = K.CartStore.open("glow-salon", K.MemoryCartRepository())

    # 1. Fill the cart; the fourth shampoo hits the stock ceiling
    print("1. Cart:")
    for _ in range(4):
        match cart.add_item(CATALOG["shampoo"]):
            case Ok(line):
                print(f"   + {line.name} × {line.quantity}")
            case Error(limit):
                print(f"   ✗ {limit.message}")
    cart.add_item(CATALOG["haircut"])
    cart.increment(CATALOG["shampoo"].key, -1)

    # 2. Walk the wizard
    print("\n2. Wizard:")
    wizard = W.Wizard(W.pos_flow(), cart)
    match wizard.advance():
        case Error(e):
            print(f"   ✗ {e.message}")
    wizard.update_customer(name="Walk-in", phone="555-0199")
    wizard.set_discount(DiscountSpec.percentage(10))
    wizard.advance()
    wizard.advance()
    totals = wizard.session.breakdown()
    print(f"   step: {wizard.step.value}, total {totals.total} (discount {totals.discount})")

    # 3. Submit through a flaky server
    print("\n3. Submit (server down twice):")
    backend = FakeBackend(outages=[503, "timeout"])
    client = X.SubmissionClient(backend, credentials=lambda: "staff-token", sleep=no_wait)
    api = O.OrdersApi(client, tenant=42)

    match await wizard.submit(api):
        case Ok(receipt):
            print(f"   ✓ Receipt {receipt.receipt_number}, total {receipt.total}")
            wizard.acknowledge()
        case Error(e):
            print(f"   ✗ {e.message}")

    print(f"\n   Cart empty after acknowledge: {cart.is_empty}")


if __name__ == "__main__":
    run(main)
