"""JSON-file-backed implementation of DiscountRuleRepository."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from portal.domain.model.client import normalize_username
from portal.domain.model.discount import DiscountKind, DiscountRule
from portal.domain.repository.discount_rule_repository import DiscountRuleRepository


class JsonDiscountRuleRepository(DiscountRuleRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    async def list_active_for_client(self, client_id: str) -> list[DiscountRule]:
        client_id = normalize_username(client_id)
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if normalize_username(raw.get("clientId") or "") == client_id
            and raw.get("active", False)
        ]

    @staticmethod
    def _to_domain(raw: dict) -> DiscountRule:
        created_at = raw.get("createdAt")
        return DiscountRule(
            id=raw["id"],
            client_id=raw["clientId"],
            product_id=raw["productId"],
            kind=DiscountKind(raw["discountType"]),
            value=Decimal(str(raw["discountValue"])),
            active=raw.get("active", False),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )

    def _load_raw(self) -> list[dict]:
        if not self._file_path.exists():
            return []
        return json.loads(self._file_path.read_text(encoding="utf-8"))
