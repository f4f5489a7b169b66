"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.  Money is already
rounded and formatted here.
"""

from __future__ import annotations

from dataclasses import dataclass

from portal.domain.model.cart import CartLine
from portal.domain.model.order import OrderLine
from portal.domain.model.totals import OrderTotals


@dataclass(frozen=True)
class LineDTO:
    """Output: a single cart or order line as displayed to the user."""

    product_id: str
    product_name: str
    variant_id: str
    size: str
    quantity: int
    unit_price: str  # formatted, e.g. "€15.00"
    line_total: str
    tax_rate: int
    tax_amount: str

    @staticmethod
    def from_line(line: CartLine | OrderLine) -> LineDTO:
        return LineDTO(
            product_id=line.product_id,
            product_name=line.product_name,
            variant_id=line.variant_id,
            size=line.size,
            quantity=line.quantity.value,
            unit_price=str(line.unit_price),
            line_total=str(line.line_total),
            tax_rate=line.tax_rate.value,
            tax_amount=str(line.tax_amount),
        )


@dataclass(frozen=True)
class TotalsDTO:

    subtotal: str
    vat7_total: str
    vat19_total: str
    grand_total: str

    @staticmethod
    def from_totals(totals: OrderTotals) -> TotalsDTO:
        shown = totals.rounded()
        return TotalsDTO(
            subtotal=str(shown.subtotal),
            vat7_total=str(shown.vat7_total),
            vat19_total=str(shown.vat19_total),
            grand_total=str(shown.grand_total),
        )


@dataclass(frozen=True)
class CartDTO:

    owner: str | None
    items: list[LineDTO]
    totals: TotalsDTO


@dataclass(frozen=True)
class PriceListEntryDTO:
    """Output: one orderable variant with the client's effective price."""

    product_id: str
    product_name: str
    category_id: str
    variant_id: str
    size: str
    price: str
    tax_rate: int
    in_stock: bool


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    company_name: str
    username: str
    status: str
    items: list[LineDTO]
    totals: TotalsDTO
    created_at: str


@dataclass(frozen=True)
class SubmissionResultDTO:

    order_id: str
    grand_total: str
    notified: bool


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: one row of a client's order history."""

    id: str
    created_at: str
    status: str
    item_count: int
    grand_total: str
