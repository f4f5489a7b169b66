"""Per-client, per-product discount rules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from portal.domain.exceptions import ValidationError
from portal.domain.model.value_objects import Money

HUNDRED = Decimal(100)


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class DiscountRule:
    """Overrides a catalog price for one (client, product) pair.

    ``value`` is a percentage (0-100) for PERCENTAGE rules and an amount
    for FIXED rules. Both kinds floor the resulting price at zero.
    """

    id: str
    client_id: str
    product_id: str
    kind: DiscountKind
    value: Decimal
    active: bool = True
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError(
                f"Discount value must be a Decimal, got {type(self.value).__name__}"
            )
        if self.value < 0:
            raise ValidationError(
                f"Discount value cannot be negative (rule {self.id})"
            )

    @property
    def exceeds_full_price(self) -> bool:
        return self.kind is DiscountKind.PERCENTAGE and self.value > HUNDRED

    def apply(self, base_price: Money) -> Money:
        if self.kind is DiscountKind.PERCENTAGE:
            factor = max(Decimal(0), 1 - self.value / HUNDRED)
            return base_price.scaled(factor)
        return base_price.minus_clamped(Money(self.value, base_price.currency))
