"""Abstract source of catalog snapshots.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations live in the infrastructure
layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.model.catalog import CatalogSnapshot


class CatalogProvider(ABC):

    @abstractmethod
    async def load(self) -> CatalogSnapshot:
        """Return the current products and categories."""
