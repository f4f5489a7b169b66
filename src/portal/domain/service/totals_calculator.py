"""Domain service: order totals.

Totals are a pure function of the lines and are recomputed on every
read.  Nothing here rounds; callers round once at the output boundary
via ``OrderTotals.rounded()``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money, TaxRate


class TaxedLine(Protocol):

    @property
    def line_total(self) -> Money: ...

    @property
    def tax_amount(self) -> Money: ...

    @property
    def tax_rate(self) -> TaxRate: ...


def calculate_totals(lines: Iterable[TaxedLine]) -> OrderTotals:
    subtotal = Money.zero()
    buckets = {rate: Money.zero() for rate in TaxRate}

    for line in lines:
        subtotal = subtotal + line.line_total
        buckets[line.tax_rate] = buckets[line.tax_rate] + line.tax_amount

    return OrderTotals(
        subtotal=subtotal,
        vat7_total=buckets[TaxRate.REDUCED],
        vat19_total=buckets[TaxRate.STANDARD],
    )
