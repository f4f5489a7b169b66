"""Cart aggregate: the client's order in progress.

Each (product, variant) pair is either absent or present with a positive
quantity; there is no other state.  Quantities passed to
``set_quantity`` are absolute; ``add_item`` is the only additive path.

A cart may carry the submission token of its current content.  Any
change to the lines drops it, so a token always names one exact cart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from portal.domain.exceptions import ValidationError
from portal.domain.model.value_objects import Money, Quantity, TaxRate

log = logging.getLogger(__name__)

LineKey = tuple[str, str]


@dataclass(frozen=True)
class CartLine:
    """A priced cart line.

    ``unit_price`` is the price actually charged (after discount).
    Totals are derived from the line itself so they are recomputed on
    every quantity change.
    """

    product_id: str
    product_name: str
    variant_id: str
    size: str
    quantity: Quantity
    unit_price: Money
    tax_rate: TaxRate

    def __post_init__(self) -> None:
        if not self.product_id or not self.variant_id:
            raise ValidationError("Cart line needs a product and a variant")
        if not isinstance(self.quantity, Quantity):
            raise ValidationError("Cart line quantity must be a Quantity")
        if not isinstance(self.unit_price, Money):
            raise ValidationError("Cart line unit price must be Money")
        if not isinstance(self.tax_rate, TaxRate):
            raise ValidationError("Cart line tax rate must be a TaxRate")

    @property
    def key(self) -> LineKey:
        return (self.product_id, self.variant_id)

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def tax_amount(self) -> Money:
        return self.line_total.scaled(self.tax_rate.factor)


@dataclass
class Cart:

    owner: str | None = None
    _lines: dict[LineKey, CartLine] = field(default_factory=dict)
    submission_token: str | None = None

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
        """Set the absolute quantity of a line.

        Returns True if the cart changed.  Negative quantities are
        ignored; zero removes the line.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(quantity).__name__}"
            )
        if quantity < 0:
            log.warning(
                "Ignoring negative quantity %d for %s/%s", quantity, product_id, variant_id
            )
            return False

        key = (product_id, variant_id)
        if quantity == 0:
            return self._changed(self._lines.pop(key, None) is not None)

        line = CartLine(
            product_id=product_id,
            product_name=product_name,
            variant_id=variant_id,
            size=size,
            quantity=Quantity(quantity),
            unit_price=unit_price,
            tax_rate=tax_rate,
        )
        if self._lines.get(key) == line:
            return False
        self._lines[key] = line
        return self._changed(True)

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
        """Add *quantity* units, summing into an existing line."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(quantity).__name__}"
            )
        if quantity <= 0:
            raise ValidationError("Quantity to add must be positive")
        existing = self._lines.get((product_id, variant_id))
        if existing is not None:
            quantity += existing.quantity.value
        return self.set_quantity(
            product_id, variant_id, quantity, unit_price, tax_rate, product_name, size
        )

    def remove_item(self, product_id: str, variant_id: str) -> bool:
        return self._changed(self._lines.pop((product_id, variant_id), None) is not None)

    def clear(self) -> None:
        self._lines.clear()
        self.submission_token = None

    def restore(self, lines: list[CartLine]) -> None:
        """Replace the content with previously persisted lines."""
        self._lines = {line.key: line for line in lines}

    # --- Queries --------------------------------------------------------------

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get(self, product_id: str, variant_id: str) -> CartLine | None:
        return self._lines.get((product_id, variant_id))

    def snapshot(self) -> tuple[CartLine, ...]:
        """Immutable copy of the lines; later mutations don't affect it."""
        return tuple(self._lines.values())

    # --- Internal helpers -----------------------------------------------------

    def _changed(self, changed: bool) -> bool:
        if changed:
            self.submission_token = None
        return changed
