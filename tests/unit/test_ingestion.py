"""Unit tests for receipt ingestion and pantry/receipt stores."""

import re
from unittest.mock import AsyncMock

import pytest

from pantry_service.exceptions import ReceiptParsingError
from pantry_service.models.models import ReceiptParseResult
from pantry_service.receipts.ingestion import (
    compare_item_lists,
    ingest_receipt,
    new_receipt_id,
    persist_items,
)
from pantry_service.storage.stores import InMemoryPantryStore, InMemoryReceiptStore


class FlakyPantryStore(InMemoryPantryStore):
    """Pantry store that rejects one item name."""

    def __init__(self, reject: str):
        super().__init__()
        self.reject = reject

    async def create(self, name, quantity="1", expiry=None):
        if name == self.reject:
            raise RuntimeError("database unavailable")
        return await super().create(name, quantity=quantity, expiry=expiry)


class TestNewReceiptId:
    def test_format_and_uniqueness(self):
        first, second = new_receipt_id(), new_receipt_id()

        assert re.fullmatch(r"r_\d+_\d+", first)
        assert first != second


class TestPersistItems:
    @pytest.mark.asyncio
    async def test_each_item_stored_with_defaults(self):
        store = InMemoryPantryStore()

        stored = await persist_items(["milk", "eggs"], store)

        items = await store.list_items()
        assert stored == ["milk", "eggs"]
        assert [(i.name, i.quantity, i.expiry) for i in items] == [("milk", "1", None), ("eggs", "1", None)]

    @pytest.mark.asyncio
    async def test_failed_insert_skipped(self, caplog):
        store = FlakyPantryStore(reject="eggs")

        stored = await persist_items(["milk", "eggs", "bread"], store)

        assert stored == ["milk", "bread"]
        assert "Failed to insert pantry item 'eggs'" in caplog.text


class TestIngestReceipt:
    """Test the parse -> persist -> record pipeline."""

    @pytest.mark.asyncio
    async def test_ingest_stores_items_and_record(self):
        pantry = InMemoryPantryStore()
        receipts = InMemoryReceiptStore()
        parser = AsyncMock(return_value=ReceiptParseResult(items=["milk", "eggs"], model="gemini-2.5-flash"))

        record = await ingest_receipt(b"image", pantry, receipts, parser=parser)

        parser.assert_awaited_once_with(b"image")
        assert record.items == ["milk", "eggs"]
        assert record.model == "gemini-2.5-flash"
        assert record.strategy == "gemini"
        assert await receipts.get(record.id) == record
        assert [item.name for item in await pantry.list_items()] == ["milk", "eggs"]

    @pytest.mark.asyncio
    async def test_parse_failure_persists_nothing(self):
        pantry = InMemoryPantryStore()
        receipts = InMemoryReceiptStore()
        parser = AsyncMock(side_effect=ReceiptParsingError(["m1"], RuntimeError("not found")))

        with pytest.raises(ReceiptParsingError):
            await ingest_receipt(b"image", pantry, receipts, parser=parser)

        assert await pantry.list_items() == []

    @pytest.mark.asyncio
    async def test_partial_insert_failure_still_records_receipt(self):
        pantry = FlakyPantryStore(reject="eggs")
        receipts = InMemoryReceiptStore()
        parser = AsyncMock(return_value=ReceiptParseResult(items=["milk", "eggs"], model="m"))

        record = await ingest_receipt(b"image", pantry, receipts, parser=parser)

        assert record.items == ["milk", "eggs"]
        assert [item.name for item in await pantry.list_items()] == ["milk"]

    @pytest.mark.asyncio
    async def test_repeat_receipts_are_not_merged(self):
        pantry = InMemoryPantryStore()
        receipts = InMemoryReceiptStore()
        parser = AsyncMock(return_value=ReceiptParseResult(items=["milk"], model="m"))

        first = await ingest_receipt(b"a", pantry, receipts, parser=parser)
        second = await ingest_receipt(b"b", pantry, receipts, parser=parser)

        assert first.id != second.id
        assert [item.name for item in await pantry.list_items()] == ["milk", "milk"]


class TestReceiptParseResult:
    def test_rejects_unnormalized_items(self):
        with pytest.raises(ValueError):
            ReceiptParseResult(items=["Milk"], model="m")

    def test_rejects_duplicates(self):
        with pytest.raises(ValueError):
            ReceiptParseResult(items=["milk", "milk"], model="m")


class TestStores:
    @pytest.mark.asyncio
    async def test_pantry_ids_sequential(self):
        store = InMemoryPantryStore()

        first = await store.create("rice")
        second = await store.create("beans", quantity="2", expiry="2026-12-01")

        assert (first.id, second.id) == (1, 2)
        assert second.quantity == "2"
        assert second.expiry == "2026-12-01"

    @pytest.mark.asyncio
    async def test_pantry_rejects_blank_name(self):
        with pytest.raises(ValueError):
            await InMemoryPantryStore().create("  ")

    @pytest.mark.asyncio
    async def test_receipt_store_missing_id(self):
        assert await InMemoryReceiptStore().get("r_0_0") is None


class TestCompareItemLists:
    def test_comparison(self):
        result = compare_item_lists(["Milk", "eggs", "bread"], ["milk", "Eggs", "butter"])

        assert result.comparison.agreed == ["milk", "eggs"]
        assert result.comparison.manual_only == ["bread"]
        assert result.comparison.llm_only == ["butter"]
        assert result.comparison.conflicts == []
        assert result.meta.manual_count == 3
        assert result.meta.agreed_count == 2

    def test_serializes_camel_case(self):
        payload = compare_item_lists(["a"], []).model_dump(by_alias=True)

        assert payload["comparison"]["manualOnly"] == ["a"]
        assert payload["meta"]["llmCount"] == 0
