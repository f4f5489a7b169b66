"""JSON-file-backed implementation of ClientRepository."""

from __future__ import annotations

import json
from pathlib import Path

from portal.domain.model.client import Client, normalize_username
from portal.domain.model.value_objects import ClientCategory
from portal.domain.repository.client_repository import ClientRepository


class JsonClientRepository(ClientRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    async def get_by_username(self, username: str) -> Client | None:
        wanted = normalize_username(username)
        for raw in self._load_raw():
            if normalize_username(raw["username"]) == wanted:
                return self._to_domain(raw)
        return None

    @staticmethod
    def _to_domain(raw: dict) -> Client:
        return Client(
            username=raw["username"],
            category=ClientCategory.of(raw["category"]),
            company_name=raw.get("companyName", ""),
            address=raw.get("address", ""),
            contact_number=raw.get("contactNumber", ""),
            email=raw.get("email", ""),
        )

    def _load_raw(self) -> list[dict]:
        if not self._file_path.exists():
            return []
        return json.loads(self._file_path.read_text(encoding="utf-8"))
