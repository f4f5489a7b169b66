"""Catalog aggregates: products, their size variants, and categories.

The catalog is maintained by administrators elsewhere. The pricing core
only ever reads it, through a ``CatalogSnapshot`` taken at load time.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from portal.domain.exceptions import DataIntegrityError, EntityNotFoundError
from portal.domain.model.value_objects import ClientCategory, Money, TaxRate


@dataclass(frozen=True)
class Category:

    id: str
    name: str
    image_url: str | None = None


@dataclass(frozen=True)
class Variant:
    """One size of a product, priced per client category."""

    id: str
    size: str
    prices: dict[ClientCategory, Money]
    in_stock: bool = True

    def price_for(self, category: ClientCategory, product_name: str = "?") -> Money:
        """Return the catalog price for *category*.

        A missing column is a data error, never a free item.
        """
        price = self.prices.get(category)
        if price is None:
            raise DataIntegrityError(
                f"No category {category.value} price for product "
                f"'{product_name}', variant '{self.size}' ({self.id})"
            )
        return price


@dataclass(frozen=True)
class Product:

    id: str
    name: str
    category_id: str
    tax_rate: TaxRate
    variants: tuple[Variant, ...] = ()
    display_order: int = 0

    def variant(self, variant_id: str) -> Variant:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        raise EntityNotFoundError(
            f"Variant '{variant_id}' not found for product '{self.name}'"
        )


@dataclass(frozen=True)
class CatalogSnapshot:
    """Point-in-time, read-only view of products and categories."""

    products: tuple[Product, ...] = ()
    categories: tuple[Category, ...] = ()
    _by_id: dict[str, Product] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # frozen: the index is set through object.__setattr__
        object.__setattr__(self, "_by_id", {p.id: p for p in self.products})

    def has_product(self, product_id: str) -> bool:
        return product_id in self._by_id

    def get_product(self, product_id: str) -> Product:
        product = self._by_id.get(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found in catalog")
        return product

    def get_variant(self, product_id: str, variant_id: str) -> tuple[Product, Variant]:
        product = self.get_product(product_id)
        return product, product.variant(variant_id)

    def products_in_category(self, category_id: str | None = None) -> list[Product]:
        """Products sorted by manual display order, then name."""
        selected = [
            p for p in self.products
            if category_id is None or p.category_id == category_id
        ]
        return sorted(selected, key=lambda p: (p.display_order, p.name.lower()))

    def sorted_categories(self) -> list[Category]:
        return sorted(self.categories, key=lambda c: c.name.lower())
