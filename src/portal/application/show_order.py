"""Application service: Show Order use case (query)."""

from __future__ import annotations

from portal.application.dto import LineDTO, OrderDTO, TotalsDTO
from portal.domain.exceptions import EntityNotFoundError
from portal.domain.model.client import normalize_username
from portal.domain.model.order import Order
from portal.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def handle(self, order_id: str, username: str) -> OrderDTO:
        """Return the order if it belongs to *username*.

        Another client's order is reported as not found.
        """
        order = await self._order_repo.get_by_id(order_id)
        if order is None or order.client.username != normalize_username(username):
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return self._to_dto(order)

    @staticmethod
    def _to_dto(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.stored_id,
            company_name=order.client.company_name,
            username=order.client.username,
            status=order.status.value,
            items=[LineDTO.from_line(line) for line in order.lines],
            totals=TotalsDTO.from_totals(order.totals),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )
