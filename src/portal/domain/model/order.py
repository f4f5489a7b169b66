"""Order aggregate — an immutable record of a submitted cart.

Orders are created by the submission pipeline and never changed by it.
Status transitions belong to administrative tooling.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from portal.domain.exceptions import DataIntegrityError, ValidationError
from portal.domain.model.cart import CartLine
from portal.domain.model.client import Client
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money, Quantity, TaxRate


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderLine:
    """Captures the price of a cart line at submission time."""

    product_id: str
    product_name: str
    variant_id: str
    size: str
    quantity: Quantity
    unit_price: Money  # locked at submission time
    tax_rate: TaxRate

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def tax_amount(self) -> Money:
        return self.line_total.scaled(self.tax_rate.factor)

    @staticmethod
    def from_cart_line(line: CartLine) -> OrderLine:
        return OrderLine(
            product_id=line.product_id,
            product_name=line.product_name,
            variant_id=line.variant_id,
            size=line.size,
            quantity=line.quantity,
            unit_price=line.unit_price,
            tax_rate=line.tax_rate,
        )


@dataclass(frozen=True)
class ClientSnapshot:
    """Client profile fields copied verbatim into the order."""

    username: str
    company_name: str
    category: str
    address: str = ""
    contact_number: str = ""
    email: str = ""

    @staticmethod
    def from_client(client: Client) -> ClientSnapshot:
        return ClientSnapshot(
            username=client.client_id,
            company_name=client.company_name,
            category=client.category.value,
            address=client.address,
            contact_number=client.contact_number,
            email=client.email,
        )


@dataclass(frozen=True)
class Order:
    """Aggregate root for submitted orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    lines: tuple[OrderLine, ...]
    client: ClientSnapshot
    totals: OrderTotals
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    idempotency_key: str | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        lines: tuple[CartLine, ...] | list[CartLine],
        client: Client,
        totals: OrderTotals,
        idempotency_key: str | None = None,
    ) -> Order:
        """Create a new pending order from a cart snapshot.

        *totals* must already be rounded; the order keeps exactly the
        figures the client was shown.
        """
        if not lines:
            raise ValidationError("Order must contain at least one item")
        if totals.rounded() != totals:
            raise ValidationError("Order totals must be rounded to cents")

        return Order(
            id=None,
            lines=tuple(OrderLine.from_cart_line(line) for line in lines),
            client=ClientSnapshot.from_client(client),
            totals=totals,
            idempotency_key=idempotency_key,
        )

    def with_id(self, order_id: str) -> Order:
        return replace(self, id=order_id)

    # --- Computed properties --------------------------------------------------

    @property
    def stored_id(self) -> str:
        """The ID assigned by the repository."""
        if self.id is None:
            raise DataIntegrityError("Order has not been stored yet")
        return self.id

    @property
    def grand_total(self) -> Money:
        return self.totals.grand_total
