# /mobilehub/services/inventory_store.py

from typing import List, Optional

from mobilehub.models.domain import InventoryItem, InventoryQuery


class InventoryStoreError(Exception):
    """The inventory store could not be read (driver error, timeout or open circuit)."""


class AbstractInventoryStore:
    """Read-only interface to the phones inventory."""

    async def find_phones(self, query: InventoryQuery) -> List[InventoryItem]:
        # Return phones matching the query, ordered by query.sort and capped at query.limit
        raise NotImplementedError

    async def get_phone(self, phone_id: str) -> Optional[InventoryItem]:
        # Return a single phone by id, or None when it does not exist
        raise NotImplementedError
