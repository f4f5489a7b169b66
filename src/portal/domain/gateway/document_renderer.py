"""Abstract renderer producing the order confirmation document."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.order import ClientSnapshot, OrderLine
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money


class OrderDocumentRenderer(ABC):

    mime_type = "application/pdf"
    extension = ".pdf"

    @abstractmethod
    async def render(
        self,
        order_id: str,
        lines: tuple[OrderLine, ...],
        totals: OrderTotals,
        grand_total: Money,
        client: ClientSnapshot,
    ) -> str:
        """Return the document as a base64-encoded string."""
