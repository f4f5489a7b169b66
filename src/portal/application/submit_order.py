"""Application service: Submit Order use case.

Turns the session's cart into a persisted order and notifies the
operations mailbox.

Steps:
1. Check preconditions (non-empty cart, authenticated client with a
   complete profile, every line still priced by the catalog).  Nothing
   is written if they fail.
2. Snapshot the cart and compute rounded totals.
3. Persist a ``pending`` order.  The cart's submission token travels
   with it, so a retry of the same cart never creates a second order.
4. Render the order document and e-mail it.
5. Clear the cart.

If step 4 fails the order stays persisted and the cart stays populated;
the caller gets a NotificationError and may simply submit again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from portal.application.cart_service import CartService
from portal.application.dto import SubmissionResultDTO
from portal.domain.exceptions import (
    NotificationError,
    PersistenceError,
    SubmissionInProgressError,
    ValidationError,
)
from portal.domain.gateway.document_renderer import OrderDocumentRenderer
from portal.domain.gateway.email_dispatcher import Attachment, EmailDispatcher
from portal.domain.model.cart import CartLine
from portal.domain.model.client import Client
from portal.domain.model.order import Order
from portal.domain.repository.order_repository import OrderRepository
from portal.domain.service.totals_calculator import calculate_totals

log = logging.getLogger(__name__)


class SubmitOrderHandler:

    def __init__(
        self,
        cart: CartService,
        order_repo: OrderRepository,
        renderer: OrderDocumentRenderer,
        dispatcher: EmailDispatcher,
        recipient: str,
        line_check: Callable[[CartLine], None] | None = None,
    ) -> None:
        self._cart = cart
        self._order_repo = order_repo
        self._renderer = renderer
        self._dispatcher = dispatcher
        self._recipient = recipient
        self._line_check = line_check
        self._sending = False

    @property
    def is_sending(self) -> bool:
        return self._sending

    async def handle(self, client: Client | None) -> SubmissionResultDTO:
        if self._sending:
            raise SubmissionInProgressError("Your order is already being sent")
        client = self._check_preconditions(client)

        self._sending = True
        try:
            return await self._submit(client)
        finally:
            self._sending = False

    # --- Steps ----------------------------------------------------------------

    def _check_preconditions(self, client: Client | None) -> Client:
        if self._cart.is_empty:
            raise ValidationError("Your cart is empty")
        if client is None or client.client_id != self._cart.owner:
            raise ValidationError("Please log in before sending an order")
        missing = client.missing_profile_fields()
        if missing:
            raise ValidationError(
                f"Your profile is incomplete (missing: {', '.join(missing)})"
            )
        if self._line_check is not None:
            for line in self._cart.lines:
                self._line_check(line)
        return client

    async def _submit(self, client: Client) -> SubmissionResultDTO:
        lines = self._cart.snapshot()
        totals = calculate_totals(lines).rounded()
        token = self._cart.submission_token()

        order = Order.create(lines, client, totals, idempotency_key=token)
        order_id = await self._persist(order)
        order = order.with_id(order_id)

        await self._notify(order)

        if self._cart.pending_token == token:
            self._cart.clear()
        else:
            log.info("Cart changed while order %s was sent; keeping it", order_id)

        return SubmissionResultDTO(
            order_id=order_id,
            grand_total=str(order.grand_total),
            notified=True,
        )

    async def _persist(self, order: Order) -> str:
        try:
            order_id = await self._order_repo.create(order)
        except PersistenceError:
            raise
        except Exception as exc:
            log.error("Storing order for %s failed: %s", order.client.username, exc)
            raise PersistenceError(
                "Your order could not be saved. Please try again."
            ) from exc
        log.info(
            "Order %s stored for %s (total %s)",
            order_id, order.client.username, order.grand_total,
        )
        return order_id

    async def _notify(self, order: Order) -> None:
        order_id = order.stored_id
        try:
            document = await self._renderer.render(
                order_id, order.lines, order.totals, order.grand_total, order.client
            )
            await self._dispatcher.send(
                self._recipient,
                f"New order {order_id} from {order.client.company_name}",
                self._template_params(order),
                Attachment(
                    filename=f"order-{order_id}{self._renderer.extension}",
                    content_base64=document,
                    mime_type=self._renderer.mime_type,
                ),
            )
        except Exception as exc:
            log.error("Notification for order %s failed: %s", order_id, exc)
            raise NotificationError(
                f"Order #{order_id} was saved, but the confirmation could not be "
                f"sent. Please try sending again or contact us.",
                order_id=order_id,
            ) from exc
        log.info("Order %s sent to %s", order_id, self._recipient)

    # --- Mapping --------------------------------------------------------------

    def _template_params(self, order: Order) -> dict:
        client = order.client
        return {
            "to_email": self._recipient,
            "from_name": client.company_name,
            "order_id": order.stored_id,
            "order_details": [
                {
                    "productName": line.product_name,
                    "size": line.size,
                    "quantity": line.quantity.value,
                    "price": f"{line.unit_price.rounded().amount:.2f}",
                    "subtotal": f"{line.line_total.rounded().amount:.2f}",
                }
                for line in order.lines
            ],
            "subtotal": f"{order.totals.subtotal.amount:.2f}",
            "vat7_total": f"{order.totals.vat7_total.amount:.2f}",
            "vat19_total": f"{order.totals.vat19_total.amount:.2f}",
            "total": f"{order.grand_total.amount:.2f}",
            "customer_details": {
                "company": client.company_name,
                "contact": client.contact_number or "Not provided",
                "address": client.address or "Not provided",
                "email": client.email or "Not provided",
                "category": client.category,
            },
        }
