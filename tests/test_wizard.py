"""Checkout and booking wizard state machine."""

import asyncio

from kungfu import Ok, Error
import pytest

from cartflow import wizard as W
from cartflow.payment import PaymentMethod
from cartflow.pricing import DiscountSpec
from cartflow.submit import ClassifiedError, ErrorKind


class FakePlacer:
    """Records placed sessions and answers with scripted results."""

    def __init__(self, *results):
        self.results = list(results) or [Ok("R-0001")]
        self.placed = []

    async def place(self, session):
        self.placed.append(session)
        return self.results.pop(0)


STOREFRONT_CUSTOMER = dict(
    name="Ada Lovelace",
    email="ada@example.com",
    phone="555-0100",
    address="1 Main St",
    city="Springfield",
    postal_code="12345",
)


@pytest.fixture
def storefront(cart):
    return W.Wizard(W.purchase_flow(), cart)


@pytest.fixture
def ready(storefront, cart, shampoo):
    """Storefront wizard parked on the confirmation step with one item."""
    cart.add_item(shampoo)
    storefront.update_customer(**STOREFRONT_CUSTOMER)
    storefront.advance()
    storefront.advance()
    assert storefront.step is W.PurchaseStep.CONFIRMATION
    return storefront


class TestTransitionTable:
    def test_purchase_table(self):
        table = W.linear_transitions(tuple(W.PurchaseStep))
        assert table == {
            (W.PurchaseStep.CUSTOMER_INFO, W.Event.ADVANCE): W.PurchaseStep.PAYMENT,
            (W.PurchaseStep.PAYMENT, W.Event.ADVANCE): W.PurchaseStep.CONFIRMATION,
            (W.PurchaseStep.PAYMENT, W.Event.RETREAT): W.PurchaseStep.CUSTOMER_INFO,
            (W.PurchaseStep.CONFIRMATION, W.Event.RETREAT): W.PurchaseStep.PAYMENT,
            (W.PurchaseStep.CONFIRMATION, W.Event.SUBMIT): W.PurchaseStep.SUBMITTED,
        }

    def test_nothing_leaves_terminal(self):
        flow = W.booking_flow()
        assert all(step is not flow.terminal for step, _ in flow.transitions)

    def test_flow_needs_two_steps(self):
        with pytest.raises(ValueError):
            W.linear_transitions((W.PurchaseStep.SUBMITTED,))


class TestPurchaseFlow:
    def test_cannot_advance_without_customer_info(self, storefront):
        result = storefront.advance()

        assert isinstance(result, Error)
        assert isinstance(result.value, W.ValidationError)
        assert set(result.value.missing) == {"name", "email", "phone", "address", "city", "postal_code"}
        assert storefront.step is W.PurchaseStep.CUSTOMER_INFO

    def test_one_missing_field_still_blocks(self, storefront):
        storefront.update_customer(**{**STOREFRONT_CUSTOMER, "postal_code": "  "})
        assert not storefront.can_advance()
        assert storefront.advance().value.missing == ("postal_code",)

    def test_malformed_email_is_invalid(self, storefront):
        storefront.update_customer(**{**STOREFRONT_CUSTOMER, "email": "ada-at-example"})
        error = storefront.advance().value
        assert error.invalid == ("email",)
        assert "email" in error.message
        assert error.classified().kind is ErrorKind.VALIDATION

    def test_advance_with_complete_info(self, storefront):
        storefront.update_customer(**STOREFRONT_CUSTOMER)
        assert storefront.can_advance()
        assert storefront.advance().value is W.PurchaseStep.PAYMENT

    def test_pos_requires_only_name_and_phone(self, cart):
        wizard = W.Wizard(W.pos_flow(), cart)
        wizard.update_customer(name="Walk-in", phone="555-0199")
        assert isinstance(wizard.advance(), Ok)

    def test_payment_defaults_per_surface(self, cart):
        assert W.Wizard(W.purchase_flow(), cart).session.payment_method is PaymentMethod.CARD
        assert W.Wizard(W.pos_flow(), cart).session.payment_method is PaymentMethod.CASH

    def test_payment_step_requires_a_method(self, storefront):
        storefront.update_customer(**STOREFRONT_CUSTOMER)
        storefront.advance()
        storefront.choose_payment(None)
        assert storefront.advance().value.missing == ("payment_method",)

    def test_retreat_keeps_data(self, storefront):
        storefront.update_customer(**STOREFRONT_CUSTOMER)
        storefront.advance()
        storefront.choose_payment(PaymentMethod.COD)

        assert isinstance(storefront.retreat(), Ok)
        assert storefront.step is W.PurchaseStep.CUSTOMER_INFO
        assert storefront.session.customer.name == "Ada Lovelace"
        assert storefront.session.payment_method is PaymentMethod.COD

    def test_cannot_retreat_from_initial_step(self, storefront):
        result = storefront.retreat()
        assert isinstance(result.value, W.IllegalTransition)

    def test_cannot_advance_past_confirmation(self, ready):
        result = ready.advance()
        assert isinstance(result.value, W.IllegalTransition)
        assert ready.step is W.PurchaseStep.CONFIRMATION

    def test_breakdown_reflects_discount(self, ready):
        ready.set_discount(DiscountSpec.percentage(100))
        assert ready.session.breakdown().total == 0


class TestSubmit:
    async def test_submit_only_from_pre_terminal(self, storefront):
        placer = FakePlacer()
        result = await storefront.submit(placer)
        assert isinstance(result.value, W.IllegalTransition)
        assert placer.placed == []

    async def test_success_moves_to_submitted(self, ready):
        placer = FakePlacer(Ok("R-0042"))

        result = await ready.submit(placer)

        assert result.value == "R-0042"
        assert ready.is_submitted
        assert ready.placed == "R-0042"
        assert placer.placed == [ready.session]

    async def test_failure_keeps_session_intact(self, ready):
        failure = ClassifiedError(kind=ErrorKind.TRANSIENT, message="Server down")
        placer = FakePlacer(Error(failure))

        result = await ready.submit(placer)

        assert result.value is failure
        assert ready.step is W.PurchaseStep.CONFIRMATION
        assert ready.session.customer.email == "ada@example.com"

    async def test_empty_cart_blocks_submit(self, ready, cart):
        cart.clear()
        placer = FakePlacer()

        result = await ready.submit(placer)

        assert isinstance(result.value, W.ValidationError)
        assert result.value.missing == ("cart",)
        assert placer.placed == []

    async def test_earlier_guards_run_again(self, ready):
        ready.update_customer(email="")
        result = await ready.submit(FakePlacer())
        assert result.value.missing == ("email",)

    async def test_no_edits_after_submission(self, ready):
        await ready.submit(FakePlacer())
        assert isinstance(ready.update_customer(name="Eve").value, W.IllegalTransition)
        assert isinstance(ready.retreat().value, W.IllegalTransition)

    async def test_acknowledge_clears_cart(self, ready, cart):
        await ready.submit(FakePlacer())
        assert isinstance(ready.acknowledge(), Ok)
        assert cart.is_empty

    def test_acknowledge_before_submit_is_illegal(self, ready, cart):
        assert isinstance(ready.acknowledge(), Error)
        assert not cart.is_empty

    async def test_restart_after_success(self, ready):
        await ready.submit(FakePlacer())
        old_id = ready.session.id

        session = ready.restart()

        assert session.id != old_id
        assert ready.step is W.PurchaseStep.CUSTOMER_INFO
        assert session.customer.name == ""


class TestCancel:
    def test_cancel_leaves_cart_alone(self, ready, cart):
        ready.cancel()
        assert ready.is_cancelled
        assert len(cart) == 1

    async def test_everything_is_illegal_after_cancel(self, ready):
        ready.cancel()
        assert isinstance(ready.advance().value, W.IllegalTransition)
        assert isinstance(ready.retreat().value, W.IllegalTransition)
        assert isinstance(ready.update_customer(name="x").value, W.IllegalTransition)
        assert isinstance((await ready.submit(FakePlacer())).value, W.IllegalTransition)
        assert ready.advance().value.message.startswith("Cannot advance from cancelled session")

    def test_restart_revives_cancelled_wizard(self, ready):
        ready.cancel()
        ready.restart()
        assert ready.step is W.PurchaseStep.CUSTOMER_INFO

    async def test_late_success_does_not_touch_restarted_session(self, ready, cart):
        release = asyncio.Event()

        class HeldPlacer:
            async def place(self, session):
                await release.wait()
                return Ok("R-0001")

        pending = asyncio.create_task(ready.submit(HeldPlacer()))
        await asyncio.sleep(0)
        ready.cancel()
        fresh = ready.restart()
        release.set()

        assert isinstance(await pending, Ok)
        assert ready.session is fresh
        assert ready.placed is None
        assert ready.step is W.PurchaseStep.CUSTOMER_INFO
        assert isinstance(ready.acknowledge(), Error)
        assert len(cart) == 1

    def test_unknown_field_is_a_programming_error(self, storefront):
        with pytest.raises(TypeError):
            storefront.update_customer(nickname="Ada")


class TestBookingFlow:
    @pytest.fixture
    def booking(self):
        return W.Wizard(W.booking_flow())

    def test_service_must_be_selected(self, booking):
        assert booking.advance().value.missing == ("service_ref",)

    def test_any_staff_needs_no_staff_ref(self, booking):
        booking.update_booking(service_ref=7)
        booking.advance()
        assert booking.advance().value is W.BookingStep.SCHEDULE

    def test_specific_staff_needs_staff_ref(self, booking):
        booking.update_booking(service_ref=7, staff_preference=W.StaffPreference.SPECIFIC)
        booking.advance()
        assert booking.advance().value.missing == ("staff_ref",)
        booking.update_booking(staff_ref=3)
        assert isinstance(booking.advance(), Ok)

    @pytest.mark.parametrize(
        "date, time, missing, invalid",
        [
            ("", "", ("date", "time"), ()),
            ("2026-13-01", "10:00", (), ("date",)),
            ("2026-11-02", "25:00", (), ("time",)),
            ("2026-11-02", "10:30", (), ()),
        ],
    )
    def test_schedule_guard(self, booking, date, time, missing, invalid):
        booking.update_booking(service_ref=7, date=date, time=time)
        booking.advance()
        booking.advance()
        assert booking.step is W.BookingStep.SCHEDULE

        result = booking.advance()

        if missing or invalid:
            assert result.value.missing == missing
            assert result.value.invalid == invalid
        else:
            assert isinstance(result, Ok)

    async def test_full_booking(self, booking):
        booking.update_booking(service_ref=7, date="2026-11-02", time="10:30")
        booking.update_customer(name="Grace", email="grace@example.com", phone="555-0111")
        for _ in range(3):
            assert isinstance(booking.advance(), Ok)
        assert booking.step is W.BookingStep.CUSTOMER_INFO

        result = await booking.submit(FakePlacer(Ok({"id": 1})))

        assert result.value == {"id": 1}
        assert booking.step is W.BookingStep.SUBMITTED
