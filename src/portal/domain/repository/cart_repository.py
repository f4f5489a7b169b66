"""Abstract local store for the cart of the current browsing context."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def load(self) -> Cart | None:
        """Return the persisted cart, or None if nothing is stored."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Replace the persisted cart with *cart*."""

    @abstractmethod
    def delete(self) -> None:
        """Erase the persisted cart."""
