"""Persistence interfaces used by the ingestion pipeline.

The pantry store is append-only from this service's point of view: a receipt
that lists milk twice over two uploads yields two rows (aggregation by name is
a display concern). The receipt store is a keyed log of parse results.

In-memory implementations back the default app and the tests; a database-backed
store only has to satisfy the same protocol.
"""

import asyncio
from itertools import count
from typing import Optional, Protocol

from pantry_service.models.models import PantryItem, ReceiptRecord


class PantryStore(Protocol):
    async def create(self, name: str, quantity: str = "1", expiry: Optional[str] = None) -> PantryItem:
        ...

    async def list_items(self) -> list[PantryItem]:
        ...


class ReceiptStore(Protocol):
    async def put(self, receipt_id: str, record: ReceiptRecord) -> None:
        ...

    async def get(self, receipt_id: str) -> Optional[ReceiptRecord]:
        ...


class InMemoryPantryStore:
    """Pantry rows kept in a list; ids are sequential from 1."""

    def __init__(self) -> None:
        self._items: list[PantryItem] = []
        self._ids = count(1)
        self._lock = asyncio.Lock()

    async def create(self, name: str, quantity: str = "1", expiry: Optional[str] = None) -> PantryItem:
        if not name or not name.strip():
            raise ValueError("Pantry item name is required")
        async with self._lock:
            item = PantryItem(id=next(self._ids), name=name, quantity=quantity, expiry=expiry)
            self._items.append(item)
        return item

    async def list_items(self) -> list[PantryItem]:
        return list(self._items)


class InMemoryReceiptStore:
    """Receipt records by id. Grows without bound; fine for a single process."""

    def __init__(self) -> None:
        self._records: dict[str, ReceiptRecord] = {}

    async def put(self, receipt_id: str, record: ReceiptRecord) -> None:
        self._records[receipt_id] = record

    async def get(self, receipt_id: str) -> Optional[ReceiptRecord]:
        return self._records.get(receipt_id)
