"""Order totals split by VAT bucket."""

from __future__ import annotations

from dataclasses import dataclass

from portal.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderTotals:
    """Subtotal plus the two tax buckets.

    Invariant: ``grand_total == subtotal + vat7_total + vat19_total``.
    The grand total is always derived, never stored separately, so the
    equality holds for whatever precision the components carry.
    """

    subtotal: Money
    vat7_total: Money
    vat19_total: Money

    @property
    def grand_total(self) -> Money:
        return self.subtotal + self.vat7_total + self.vat19_total

    def rounded(self) -> OrderTotals:
        """Round each component to cents exactly once.

        The grand total of the result is the exact sum of the rounded
        components, so displayed and persisted figures always add up.
        """
        return OrderTotals(
            subtotal=self.subtotal.rounded(),
            vat7_total=self.vat7_total.rounded(),
            vat19_total=self.vat19_total.rounded(),
        )
