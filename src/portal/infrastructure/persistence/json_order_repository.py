"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
import uuid
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from portal.domain.model.client import normalize_username
from portal.domain.model.order import ClientSnapshot, Order, OrderLine, OrderStatus
from portal.domain.model.totals import OrderTotals
from portal.domain.model.value_objects import Money, Quantity, TaxRate
from portal.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    async def create(self, order: Order) -> str:
        orders = self._load_raw()

        if order.idempotency_key is not None:
            for raw in orders:
                if raw.get("idempotencyKey") == order.idempotency_key:
                    return raw["id"]

        order_id = uuid.uuid4().hex
        orders.append(self._to_raw(order.with_id(order_id)))
        self._persist_raw(orders)
        return order_id

    async def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    async def list_for_client(self, username: str) -> list[Order]:
        username = normalize_username(username)
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if normalize_username(raw["username"]) == username
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        client = order.client
        return {
            "id": order.id,
            "status": order.status.value,
            "orderDate": order.created_at.isoformat(),
            "idempotencyKey": order.idempotency_key,
            "username": client.username,
            "companyName": client.company_name,
            "category": client.category,
            "address": client.address,
            "contactNumber": client.contact_number,
            "userEmail": client.email,
            "items": [
                {
                    "productId": line.product_id,
                    "productName": line.product_name,
                    "variantId": line.variant_id,
                    "size": line.size,
                    "quantity": line.quantity.value,
                    "price": str(line.unit_price.amount),
                    "total": str(line.line_total.amount),
                    "vatRate": line.tax_rate.value,
                    "vatAmount": str(line.tax_amount.amount),
                }
                for line in order.lines
            ],
            "subtotal": str(order.totals.subtotal.amount),
            "vat7Total": str(order.totals.vat7_total.amount),
            "vat19Total": str(order.totals.vat19_total.amount),
            "total": str(order.grand_total.amount),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        lines = tuple(
            OrderLine(
                product_id=i["productId"],
                product_name=i["productName"],
                variant_id=i["variantId"],
                size=i["size"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["price"])),
                tax_rate=TaxRate.of(i["vatRate"]),
            )
            for i in raw["items"]
        )
        return Order(
            id=raw["id"],
            lines=lines,
            client=ClientSnapshot(
                username=raw["username"],
                company_name=raw["companyName"],
                category=raw["category"],
                address=raw.get("address", ""),
                contact_number=raw.get("contactNumber", ""),
                email=raw.get("userEmail", ""),
            ),
            totals=OrderTotals(
                subtotal=Money(Decimal(raw["subtotal"])),
                vat7_total=Money(Decimal(raw["vat7Total"])),
                vat19_total=Money(Decimal(raw["vat19Total"])),
            ),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["orderDate"]),
            idempotency_key=raw.get("idempotencyKey"),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, orders: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(orders, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
