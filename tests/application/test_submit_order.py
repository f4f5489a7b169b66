"""Integration tests for the SubmitOrder use case.

Uses in-memory fakes, no file I/O.
"""

import asyncio
import base64
import dataclasses

import pytest

from portal.application.cart_service import CartService
from portal.application.submit_order import SubmitOrderHandler
from portal.domain.exceptions import (
    DataIntegrityError,
    NotificationError,
    PersistenceError,
    SubmissionInProgressError,
    ValidationError,
)
from portal.domain.model.order import OrderStatus
from portal.domain.model.value_objects import Money, TaxRate
from tests.builders import make_client
from tests.fakes import (
    FakeCartRepository,
    FakeEmailDispatcher,
    FakeOrderRepository,
    FakeRenderer,
)

OPS = "ops@example.com"


def _setup(
    order_repo: FakeOrderRepository | None = None,
    renderer: FakeRenderer | None = None,
    dispatcher: FakeEmailDispatcher | None = None,
    fill: bool = True,
    cart_repo: FakeCartRepository | None = None,
    line_check=None,
):
    """Build handler with fakes and a cart owned by alice."""
    cart = CartService(cart_repo or FakeCartRepository())
    cart.restore("alice")
    if fill and cart.is_empty:
        cart.set_quantity("p1", "v1", 1, Money.of("100.00"), TaxRate.REDUCED, "Flour", "25kg")
        cart.set_quantity("p2", "v1", 1, Money.of("50.00"), TaxRate.STANDARD, "Oil", "5l")
    order_repo = order_repo or FakeOrderRepository()
    renderer = renderer or FakeRenderer()
    dispatcher = dispatcher or FakeEmailDispatcher()
    handler = SubmitOrderHandler(
        cart, order_repo, renderer, dispatcher, OPS, line_check=line_check
    )
    return handler, cart, order_repo, dispatcher


class TestSubmitHappyPath:

    def test_persists_pending_order_with_totals(self):
        handler, _, order_repo, _ = _setup()
        result = asyncio.run(handler.handle(make_client()))

        order = asyncio.run(order_repo.get_by_id(result.order_id))
        assert order.status == OrderStatus.PENDING
        assert order.totals.subtotal == Money.of("150.00")
        assert order.totals.vat7_total == Money.of("7.00")
        assert order.totals.vat19_total == Money.of("9.50")
        assert order.grand_total == Money.of("166.50")
        assert result.grand_total == "€166.50"
        assert result.notified is True

    def test_copies_client_profile(self):
        handler, _, order_repo, _ = _setup()
        result = asyncio.run(handler.handle(make_client()))
        order = asyncio.run(order_repo.get_by_id(result.order_id))
        assert order.client.company_name == "Alice GmbH"
        assert order.client.address == "Main St 1"

    def test_sends_email_with_document(self):
        handler, _, _, dispatcher = _setup()
        result = asyncio.run(handler.handle(make_client()))
        (mail,) = dispatcher.sent
        assert mail["recipient"] == OPS
        assert result.order_id in mail["subject"]
        assert mail["params"]["total"] == "166.50"
        assert mail["params"]["vat7_total"] == "7.00"
        assert len(mail["params"]["order_details"]) == 2
        attachment = mail["attachment"]
        assert attachment.filename == f"order-{result.order_id}.pdf"
        assert base64.b64decode(attachment.content_base64) == f"order {result.order_id}".encode()

    def test_clears_cart(self):
        handler, cart, _, _ = _setup()
        asyncio.run(handler.handle(make_client()))
        assert cart.is_empty

    def test_displayed_total_equals_persisted_total(self):
        handler, cart, order_repo, _ = _setup(fill=False)
        cart.set_quantity("p1", "v1", 3, Money.of("0.33"), TaxRate.STANDARD, "Salt", "1g")
        cart.set_quantity("p2", "v1", 7, Money.of("1.99"), TaxRate.REDUCED, "Yeast", "7g")
        shown = cart.totals().rounded()
        result = asyncio.run(handler.handle(make_client()))
        order = asyncio.run(order_repo.get_by_id(result.order_id))
        assert order.totals == shown
        assert order.grand_total == shown.grand_total


class TestSubmitPreconditions:

    def test_empty_cart_rejected(self):
        handler, _, order_repo, _ = _setup(fill=False)
        with pytest.raises(ValidationError, match="cart is empty"):
            asyncio.run(handler.handle(make_client()))
        assert order_repo.list_all() == []

    def test_empty_cart_checked_before_client(self):
        handler, _, _, _ = _setup(fill=False)
        with pytest.raises(ValidationError, match="cart is empty"):
            asyncio.run(handler.handle(None))

    def test_anonymous_rejected(self):
        handler, cart, order_repo, _ = _setup()
        with pytest.raises(ValidationError, match="log in"):
            asyncio.run(handler.handle(None))
        assert order_repo.list_all() == []
        assert not cart.is_empty

    def test_client_must_own_cart(self):
        handler, _, order_repo, _ = _setup()
        with pytest.raises(ValidationError, match="log in"):
            asyncio.run(handler.handle(make_client("bob")))
        assert order_repo.list_all() == []

    def test_incomplete_profile_rejected(self):
        handler, _, order_repo, _ = _setup()
        client = dataclasses.replace(make_client(), company_name="  ")
        with pytest.raises(ValidationError, match="company name"):
            asyncio.run(handler.handle(client))
        assert order_repo.list_all() == []

    def test_unpriced_line_rejected(self):
        def line_check(line):
            if line.product_id == "p2":
                raise DataIntegrityError("No category A price for product 'Oil', variant '5l'")

        handler, cart, order_repo, _ = _setup(line_check=line_check)
        with pytest.raises(DataIntegrityError, match="Oil"):
            asyncio.run(handler.handle(make_client()))
        assert order_repo.list_all() == []
        assert len(cart.lines) == 2


class TestSubmitFailures:

    def test_scenario_e_notification_failure_keeps_order_and_cart(self):
        handler, cart, order_repo, _ = _setup(dispatcher=FakeEmailDispatcher(fail=True))
        lines_before = cart.lines

        with pytest.raises(NotificationError) as excinfo:
            asyncio.run(handler.handle(make_client()))

        (order,) = order_repo.list_all()
        assert order.status == OrderStatus.PENDING
        assert excinfo.value.order_id == order.id
        assert cart.lines == lines_before
        assert not handler.is_sending

    def test_renderer_failure_is_a_notification_error(self):
        handler, cart, order_repo, _ = _setup(renderer=FakeRenderer(fail=True))
        with pytest.raises(NotificationError, match="was saved"):
            asyncio.run(handler.handle(make_client()))
        assert len(order_repo.list_all()) == 1
        assert not cart.is_empty

    def test_retry_after_notification_failure_reuses_order(self):
        dispatcher = FakeEmailDispatcher(fail=True)
        handler, cart, order_repo, _ = _setup(dispatcher=dispatcher)
        with pytest.raises(NotificationError):
            asyncio.run(handler.handle(make_client()))

        dispatcher.fail = False
        result = asyncio.run(handler.handle(make_client()))

        (order,) = order_repo.list_all()
        assert result.order_id == order.id
        assert len(dispatcher.sent) == 1
        assert cart.is_empty

    def test_retry_from_new_session_reuses_order(self):
        cart_repo = FakeCartRepository()
        order_repo = FakeOrderRepository()
        handler, _, _, _ = _setup(order_repo=order_repo, cart_repo=cart_repo,
                                  dispatcher=FakeEmailDispatcher(fail=True))
        with pytest.raises(NotificationError):
            asyncio.run(handler.handle(make_client()))

        handler, cart, _, dispatcher = _setup(order_repo=order_repo, cart_repo=cart_repo)
        result = asyncio.run(handler.handle(make_client()))

        (order,) = order_repo.list_all()
        assert result.order_id == order.id
        assert len(dispatcher.sent) == 1
        assert cart.is_empty
        assert cart_repo.stored is None

    def test_changed_cart_after_failure_creates_new_order(self):
        dispatcher = FakeEmailDispatcher(fail=True)
        handler, cart, order_repo, _ = _setup(dispatcher=dispatcher)
        with pytest.raises(NotificationError):
            asyncio.run(handler.handle(make_client()))

        cart.set_quantity("p1", "v1", 2, Money.of("100.00"), TaxRate.REDUCED, "Flour", "25kg")
        dispatcher.fail = False
        asyncio.run(handler.handle(make_client()))
        assert len(order_repo.list_all()) == 2

    def test_persistence_failure(self):
        handler, cart, _, dispatcher = _setup(order_repo=FakeOrderRepository(fail=True))
        with pytest.raises(PersistenceError, match="could not be saved"):
            asyncio.run(handler.handle(make_client()))
        assert not cart.is_empty
        assert dispatcher.sent == []


class TestSubmitReentrancy:

    def test_second_submission_while_sending_rejected(self):
        gate = asyncio.Event()

        class SlowDispatcher(FakeEmailDispatcher):
            async def send(self, *args, **kwargs):
                await gate.wait()
                await super().send(*args, **kwargs)

        handler, _, order_repo, _ = _setup(dispatcher=SlowDispatcher())

        async def scenario():
            first = asyncio.create_task(handler.handle(make_client()))
            await asyncio.sleep(0)
            assert handler.is_sending
            with pytest.raises(SubmissionInProgressError):
                await handler.handle(make_client())
            gate.set()
            return await first

        result = asyncio.run(scenario())
        assert [o.id for o in order_repo.list_all()] == [result.order_id]
        assert not handler.is_sending

    def test_mutation_during_send_keeps_cart(self):
        gate = asyncio.Event()

        class SlowDispatcher(FakeEmailDispatcher):
            async def send(self, *args, **kwargs):
                await gate.wait()
                await super().send(*args, **kwargs)

        handler, cart, order_repo, _ = _setup(dispatcher=SlowDispatcher())

        async def scenario():
            task = asyncio.create_task(handler.handle(make_client()))
            await asyncio.sleep(0)
            cart.set_quantity("p3", "v1", 1, Money.of("1.00"), TaxRate.STANDARD, "Salt", "1kg")
            gate.set()
            return await task

        result = asyncio.run(scenario())
        order = asyncio.run(order_repo.get_by_id(result.order_id))
        assert len(order.lines) == 2
        assert len(cart.lines) == 3
