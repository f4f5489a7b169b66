"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    async def create(self, order: Order) -> str:
        """Persist a new order and return its globally unique ID.

        If an order with the same idempotency key already exists, its ID
        is returned and nothing is written.
        """

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    async def list_for_client(self, username: str) -> list[Order]:
        """Return all orders placed by *username*, in storage order."""
