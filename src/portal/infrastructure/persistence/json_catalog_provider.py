"""JSON-file-backed implementation of CatalogProvider.

Reads ``products.json`` and ``categories.json`` in the document shape
the admin tooling writes (camelCase keys, prices keyed by client
category).
"""

from __future__ import annotations

import json
from pathlib import Path

from portal.domain.exceptions import DataIntegrityError
from portal.domain.model.catalog import CatalogSnapshot, Category, Product, Variant
from portal.domain.model.value_objects import ClientCategory, Money, TaxRate
from portal.domain.repository.catalog_provider import CatalogProvider


class JsonCatalogProvider(CatalogProvider):

    def __init__(self, products_path: Path, categories_path: Path) -> None:
        self._products_path = products_path
        self._categories_path = categories_path

    # --- CatalogProvider interface --------------------------------------------

    async def load(self) -> CatalogSnapshot:
        return CatalogSnapshot(
            products=tuple(self._to_product(raw) for raw in self._read(self._products_path)),
            categories=tuple(
                Category(id=raw["id"], name=raw["name"], image_url=raw.get("imageUrl"))
                for raw in self._read(self._categories_path)
            ),
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_product(raw: dict) -> Product:
        try:
            return Product(
                id=raw["id"],
                name=raw["name"],
                category_id=raw.get("category", ""),
                tax_rate=TaxRate.of(raw.get("vatRate", 19)),
                variants=tuple(
                    Variant(
                        id=v["id"],
                        size=v.get("size", ""),
                        prices={
                            ClientCategory.of(cat): Money.of(price)
                            for cat, price in v.get("prices", {}).items()
                        },
                        in_stock=v.get("inStock", True),
                    )
                    for v in raw.get("variants", [])
                ),
                display_order=int(raw.get("displayOrder", 0)),
            )
        except KeyError as exc:
            raise DataIntegrityError(
                f"Product record {raw.get('id', '?')} is missing field {exc}"
            ) from exc

    # --- File helpers ---------------------------------------------------------

    @staticmethod
    def _read(path: Path) -> list[dict]:
        if not path.exists():
            return []
        return json.loads(path.read_text(encoding="utf-8"))
