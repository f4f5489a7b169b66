"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from portal.domain.exceptions import ValidationError

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Amounts keep their full
    precision; ``rounded()`` is applied only where a value leaves the
    domain (display, persistence).
    """

    amount: Decimal
    currency: str = "EUR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def scaled(self, factor: Decimal) -> Money:
        """Multiply by a non-negative Decimal factor (tax rates, percentages)."""
        return Money(self.amount * factor, self.currency)

    def minus_clamped(self, other: Money) -> Money:
        """Subtract, flooring the result at zero."""
        self._assert_same_currency(other)
        return Money(max(Decimal("0"), self.amount - other.amount), self.currency)

    def rounded(self) -> Money:
        """Round to cents. Call once, at the output boundary."""
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP), self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"€{self.rounded().amount:.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that a cart or order line never holds zero
    or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


class TaxRate(Enum):
    """The two VAT rates a product can carry."""

    REDUCED = 7
    STANDARD = 19

    @property
    def factor(self) -> Decimal:
        return Decimal(self.value) / Decimal(100)

    @staticmethod
    def of(value: int | str) -> TaxRate:
        try:
            return TaxRate(int(value))
        except ValueError as exc:
            raise ValidationError(
                f"Tax rate must be 7 or 19, got {value!r}"
            ) from exc

    def __str__(self) -> str:
        return f"{self.value}%"


class ClientCategory(Enum):
    """Pricing tier selecting a column of a variant's price table."""

    A = "A"
    B = "B"
    C = "C"

    @staticmethod
    def of(value: str) -> ClientCategory:
        try:
            return ClientCategory(str(value).strip().upper())
        except ValueError as exc:
            raise ValidationError(
                f"Client category must be A, B or C, got {value!r}"
            ) from exc
