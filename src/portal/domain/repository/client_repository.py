"""Abstract repository for Client aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.client import Client


class ClientRepository(ABC):

    @abstractmethod
    async def get_by_username(self, username: str) -> Client | None:
        """Return a client by case-insensitive username, or None."""
