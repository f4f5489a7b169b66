"""Abstract read-only store of discount rules."""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.discount import DiscountRule


class DiscountRuleRepository(ABC):

    @abstractmethod
    async def list_active_for_client(self, client_id: str) -> list[DiscountRule]:
        """Return active rules for a lowercased client id, in load order."""
