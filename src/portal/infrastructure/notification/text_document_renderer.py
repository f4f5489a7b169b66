"""Plain-text order confirmation.

Stands in for a PDF renderer: the document lists client details, every
line, and the VAT breakdown, and is returned base64-encoded like any
other attachment payload.
"""

from __future__ import annotations

import base64
from datetime import datetime, timezone

from portal.domain.gateway.document_renderer import OrderDocumentRenderer
from portal.domain.model.order import ClientSnapshot, OrderLine
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money

_NOT_GIVEN = "Not provided"


class TextDocumentRenderer(OrderDocumentRenderer):

    mime_type = "text/plain"
    extension = ".txt"

    async def render(
        self,
        order_id: str,
        lines: tuple[OrderLine, ...],
        totals: OrderTotals,
        grand_total: Money,
        client: ClientSnapshot,
    ) -> str:
        text = "\n".join(self._lines(order_id, lines, totals, grand_total, client))
        return base64.b64encode(text.encode("utf-8")).decode("ascii")

    @staticmethod
    def _lines(
        order_id: str,
        lines: tuple[OrderLine, ...],
        totals: OrderTotals,
        grand_total: Money,
        client: ClientSnapshot,
    ) -> list[str]:
        out = [
            "ORDER CONFIRMATION",
            f"Order #{order_id}",
            datetime.now(timezone.utc).strftime("%Y-%m-%d"),
            "",
            f"Company:  {client.company_name or _NOT_GIVEN}",
            f"Username: {client.username or _NOT_GIVEN}",
            f"Phone:    {client.contact_number or _NOT_GIVEN}",
            f"Address:  {client.address or _NOT_GIVEN}",
            "",
            f"{'Product':<28} {'Size':<8} {'Qty':>5} {'Price':>10} {'Total':>11} {'VAT':>4}",
            "-" * 70,
        ]
        for line in lines:
            out.append(
                f"{line.product_name:<28} {line.size:<8} {line.quantity.value:>5} "
                f"{str(line.unit_price):>10} {str(line.line_total):>11} {line.tax_rate.value:>3}%"
            )
        out += [
            "-" * 70,
            f"{'Subtotal':<54} {str(totals.subtotal):>15}",
            f"{'VAT 7%':<54} {str(totals.vat7_total):>15}",
            f"{'VAT 19%':<54} {str(totals.vat19_total):>15}",
            f"{'Total':<54} {str(grand_total):>15}",
        ]
        return out
