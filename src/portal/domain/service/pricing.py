"""Domain service: unit price of a catalog variant for one client."""

from __future__ import annotations

from portal.domain.model.catalog import Product, Variant
from portal.domain.model.value_objects import ClientCategory, Money
from portal.domain.service.discount_resolver import DiscountResolver


def unit_price_for(
    product: Product,
    variant: Variant,
    category: ClientCategory,
    resolver: DiscountResolver,
) -> Money:
    """Catalog price for the client's category, after any discount.

    Raises DataIntegrityError if the variant has no price for the
    category and DiscountLookupError if the rules aren't loaded.
    """
    base = variant.price_for(category, product.name)
    return resolver.effective_price(product.id, base)
