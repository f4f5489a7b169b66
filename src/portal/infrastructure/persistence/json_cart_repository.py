"""JSON-file-backed implementation of CartRepository.

Mirrors a browser's local storage: the file holds a mapping of string
keys to JSON-encoded strings, and the cart lives under one fixed key.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path

from portal.domain.model.cart import Cart, CartLine
from portal.domain.model.value_objects import Money, Quantity, TaxRate
from portal.domain.repository.cart_repository import CartRepository

log = logging.getLogger(__name__)

CART_KEY = "cart"


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path, key: str = CART_KEY) -> None:
        self._file_path = file_path
        self._key = key
        self._ensure_file()

    # --- CartRepository interface ---------------------------------------------

    def load(self) -> Cart | None:
        payload = self._load_store().get(self._key)
        if payload is None:
            return None
        return self.deserialize(payload)

    def save(self, cart: Cart) -> None:
        store = self._load_store()
        store[self._key] = self.serialize(cart)
        self._persist_store(store)
        log.debug("Persisted %d cart line(s) under %r", len(cart.lines), self._key)

    def delete(self) -> None:
        store = self._load_store()
        if store.pop(self._key, None) is not None:
            self._persist_store(store)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def serialize(cart: Cart) -> str:
        return json.dumps(
            {
                "owner": cart.owner,
                "submissionToken": cart.submission_token,
                "lines": [
                    {
                        "productId": line.product_id,
                        "productName": line.product_name,
                        "variantId": line.variant_id,
                        "size": line.size,
                        "quantity": line.quantity.value,
                        "price": str(line.unit_price.amount),
                        "vatRate": line.tax_rate.value,
                    }
                    for line in cart.lines
                ],
            }
        )

    @staticmethod
    def deserialize(payload: str) -> Cart:
        raw = json.loads(payload)
        cart = Cart(owner=raw.get("owner"), submission_token=raw.get("submissionToken"))
        cart.restore(
            [
                CartLine(
                    product_id=i["productId"],
                    product_name=i["productName"],
                    variant_id=i["variantId"],
                    size=i["size"],
                    quantity=Quantity(i["quantity"]),
                    unit_price=Money(Decimal(i["price"])),
                    tax_rate=TaxRate.of(i["vatRate"]),
                )
                for i in raw.get("lines", [])
            ]
        )
        return cart

    # --- File helpers ---------------------------------------------------------

    def _load_store(self) -> dict[str, str]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_store(self, store: dict[str, str]) -> None:
        self._file_path.write_text(
            json.dumps(store, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
