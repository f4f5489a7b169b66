"""Application service: the persisted cart of one session.

Wraps the Cart aggregate so that every mutation is written to the local
cart store straight away and a reload restores the exact same lines.
The store holds a single cart, tagged with its owner; a cart found
under another owner is wiped, never merged.
"""

from __future__ import annotations

import logging
import uuid

from portal.domain.model.cart import Cart, CartLine
from portal.domain.model.client import normalize_username
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money, TaxRate
from portal.domain.repository.cart_repository import CartRepository
from portal.domain.service.totals_calculator import calculate_totals

log = logging.getLogger(__name__)


class CartService:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo
        self._cart = Cart()

    # --- Identity -------------------------------------------------------------

    @property
    def owner(self) -> str | None:
        return self._cart.owner

    def restore(self, owner: str) -> None:
        """Load the persisted cart if it belongs to *owner*, else wipe it."""
        owner = normalize_username(owner)
        stored = self._cart_repo.load()
        if stored is not None and stored.owner == owner:
            self._cart = stored
            log.debug("Restored %d cart line(s) for %s", len(stored.lines), owner)
        else:
            if stored is not None:
                log.info("Discarding persisted cart of %s", stored.owner)
            self._cart_repo.delete()
            self._cart = Cart(owner=owner)

    def switch_owner(self, owner: str | None) -> None:
        """Hand the cart to another identity, clearing it first."""
        owner = normalize_username(owner) if owner else None
        if owner == self._cart.owner:
            return
        self.clear()
        self._cart.owner = owner

    # --- Mutations ------------------------------------------------------------

    def set_quantity(
        self,
        product_id: str,
        variant_id: str,
        quantity: int,
        unit_price: Money,
        tax_rate: TaxRate,
        product_name: str,
        size: str,
    ) -> bool:
        changed = self._cart.set_quantity(
            product_id, variant_id, quantity, unit_price, tax_rate, product_name, size
        )
        if changed:
            self._persist()
        return changed

    def add_item(
        self,
        product_id: str,
        variant_id: str,
        quantity: int,
        unit_price: Money,
        tax_rate: TaxRate,
        product_name: str,
        size: str,
    ) -> bool:
        changed = self._cart.add_item(
            product_id, variant_id, quantity, unit_price, tax_rate, product_name, size
        )
        if changed:
            self._persist()
        return changed

    def remove_item(self, product_id: str, variant_id: str) -> bool:
        changed = self._cart.remove_item(product_id, variant_id)
        if changed:
            self._persist()
        return changed

    def clear(self) -> None:
        self._cart.clear()
        self._cart_repo.delete()

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        return self._cart.lines

    @property
    def is_empty(self) -> bool:
        return self._cart.is_empty

    def get(self, product_id: str, variant_id: str) -> CartLine | None:
        return self._cart.get(product_id, variant_id)

    def snapshot(self) -> tuple[CartLine, ...]:
        return self._cart.snapshot()

    def totals(self) -> OrderTotals:
        return calculate_totals(self._cart.lines)

    # --- Submission token -----------------------------------------------------

    @property
    def pending_token(self) -> str | None:
        """The token issued for the current content, if any."""
        return self._cart.submission_token

    def submission_token(self) -> str:
        """Token identifying the current cart content as one submission.

        The token is stored with the cart, so a retry from a later session
        finds the order already persisted under it.
        """
        if self._cart.submission_token is None:
            self._cart.submission_token = uuid.uuid4().hex
            self._cart_repo.save(self._cart)
        return self._cart.submission_token

    # --- Internal helpers -----------------------------------------------------

    def _persist(self) -> None:
        self._cart_repo.save(self._cart)
