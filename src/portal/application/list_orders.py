"""Application service: order history of one client (query)."""

from __future__ import annotations

from portal.application.dto import OrderSummaryDTO
from portal.domain.repository.order_repository import OrderRepository


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def handle(self, username: str) -> list[OrderSummaryDTO]:
        """Orders placed by *username*, newest first."""
        orders = await self._order_repo.list_for_client(username)
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [
            OrderSummaryDTO(
                id=order.stored_id,
                created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
                status=order.status.value,
                item_count=sum(line.quantity.value for line in order.lines),
                grand_total=str(order.grand_total),
            )
            for order in orders
        ]
