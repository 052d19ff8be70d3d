"""Receipt ingestion: parse, persist each item, record the receipt.

Items are inserted one at a time; a failed insert is logged and skipped so the
rest of the receipt still lands in the pantry.
"""

import time
from datetime import datetime, timezone
from itertools import count
from typing import Awaitable, Callable, Iterable, Optional

from pantry_service.models.models import (
    CompareMeta,
    CompareResponse,
    ItemComparison,
    ReceiptParseResult,
    ReceiptRecord,
)
from pantry_service.receipts.gemini_parser import parse_receipt_with_gemini
from pantry_service.storage.stores import PantryStore, ReceiptStore
from pantry_service.utils.logger import logger

ReceiptParser = Callable[[bytes], Awaitable[ReceiptParseResult]]

_receipt_counter = count(1)


def new_receipt_id() -> str:
    """Id of the form ``r_<epoch ms>_<process-wide counter>``."""
    return f"r_{int(time.time() * 1000)}_{next(_receipt_counter)}"


async def persist_items(items: Iterable[str], pantry_store: PantryStore) -> list[str]:
    """Insert each item as a pantry row (quantity "1", no expiry).

    Returns:
        Names that were stored; failed inserts are logged and left out.
    """
    stored = []
    for name in items:
        try:
            await pantry_store.create(name=name, quantity="1", expiry=None)
        except Exception as e:
            logger.warning(f"Failed to insert pantry item '{name}': {e}")
            continue
        stored.append(name)
    return stored


async def ingest_receipt(
    image_bytes: bytes,
    pantry_store: PantryStore,
    receipt_store: ReceiptStore,
    parser: Optional[ReceiptParser] = None,
) -> ReceiptRecord:
    """Parse a receipt photo and add its items to the pantry.

    Args:
        image_bytes: Uploaded image (size and type already checked by the route).
        pantry_store: Destination for the parsed items.
        receipt_store: Log of parsed receipts.
        parser: Receipt parser. Default: parse_receipt_with_gemini.

    Returns:
        The stored ReceiptRecord (its ``items`` are every parsed item, stored or not).

    Raises:
        GeminiNotConfiguredError, ReceiptParsingError: Propagated from the parser;
            nothing is persisted in that case.
    """
    parser = parser or parse_receipt_with_gemini
    result = await parser(image_bytes)

    stored = await persist_items(result.items, pantry_store)
    if len(stored) < len(result.items):
        logger.warning(f"Stored {len(stored)} of {len(result.items)} receipt items")

    record = ReceiptRecord(
        id=new_receipt_id(),
        created_at=datetime.now(timezone.utc).isoformat(),
        items=result.items,
        strategy="gemini",
        model=result.model,
        raw_text=result.raw_model_text,
    )
    await receipt_store.put(record.id, record)
    logger.info(f"Receipt ingested with {len(result.items)} items", extra={"receipt_id": record.id})
    return record


def compare_item_lists(manual: Iterable[str], llm: Iterable[str]) -> CompareResponse:
    """Compare a hand-entered item list with the model's list (case-insensitive)."""
    manual = list(manual)
    llm = list(llm)
    manual_set = dict.fromkeys(name.lower() for name in manual)
    llm_set = dict.fromkeys(name.lower() for name in llm)

    agreed = [name for name in manual_set if name in llm_set]
    return CompareResponse(
        comparison=ItemComparison(
            agreed=agreed,
            manual_only=[name for name in manual_set if name not in llm_set],
            llm_only=[name for name in llm_set if name not in manual_set],
        ),
        meta=CompareMeta(manual_count=len(manual), llm_count=len(llm), agreed_count=len(agreed)),
    )
