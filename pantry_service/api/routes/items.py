"""
Receipt (items) routes.

Provides endpoints for:
- Parsing an uploaded receipt photo into pantry items
- Listing Gemini models available to the configured key
- Comparing a manual item list with the model's list
- Retrieving a stored receipt
"""
import re
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from google.genai import errors

from pantry_service.api.dependencies import (
    get_gemini_client,
    get_pantry_store,
    get_receipt_parser,
    get_receipt_store,
)
from pantry_service.exceptions import GeminiNotConfiguredError, ReceiptParsingError
from pantry_service.models.models import (
    CompareRequest,
    CompareResponse,
    GeminiModelList,
    ItemsHealthResponse,
    ReceiptMeta,
    ReceiptParseResponse,
)
from pantry_service.receipts.gemini_parser import list_gemini_models
from pantry_service.receipts.images import validate_image_size
from pantry_service.receipts.ingestion import ReceiptParser, compare_item_lists, ingest_receipt
from pantry_service.storage.stores import PantryStore, ReceiptStore
from pantry_service.utils.config import config
from pantry_service.utils.logger import logger

router = APIRouter(prefix="/api/items", tags=["items"])

ALLOWED_UPLOAD_TYPES = re.compile(r"image/(png|jpe?g|webp)", re.IGNORECASE)


@router.get("/health", response_model=ItemsHealthResponse)
async def items_health():
    return ItemsHealthResponse(
        message="Items (receipt) parser route ready",
        gemini_configured=bool(config.GEMINI_API_KEY),
    )


@router.post("/parse", response_model=ReceiptParseResponse, response_model_exclude_none=True)
async def parse_receipt(
    receipt: Optional[UploadFile] = File(None),
    pantry_store: PantryStore = Depends(get_pantry_store),
    receipt_store: ReceiptStore = Depends(get_receipt_store),
    parser: Optional[ReceiptParser] = Depends(get_receipt_parser),
):
    """
    Parse an uploaded receipt image and add each item to the pantry.

    Form field: ``receipt`` (PNG, JPG, JPEG or WEBP, up to MAX_IMAGE_SIZE_MB).
    """
    if receipt is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='No file uploaded. Use form field name "receipt".',
        )
    if not ALLOWED_UPLOAD_TYPES.fullmatch(receipt.content_type or ""):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only PNG, JPG, JPEG, or WEBP images are allowed",
        )

    image_bytes = await receipt.read()
    if not image_bytes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty")
    if not validate_image_size(image_bytes):
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image too large. Maximum size is {config.MAX_IMAGE_SIZE_MB}MB",
        )

    start = time.monotonic()
    try:
        record = await ingest_receipt(image_bytes, pantry_store, receipt_store, parser=parser)
    except GeminiNotConfiguredError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Gemini parser not initialized (check GEMINI_API_KEY)", "detail": str(e)},
        )
    except ReceiptParsingError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Gemini parsing failed", "detail": str(e)},
        )

    return ReceiptParseResponse(
        receipt_id=record.id,
        items=record.items,
        meta=ReceiptMeta(
            count=len(record.items),
            timing_ms=int((time.monotonic() - start) * 1000),
            gemini_model=record.model,
        ),
        raw_text=record.raw_text,
    )


@router.get("/models", response_model=GeminiModelList)
async def list_models(contains: str = "", client=Depends(get_gemini_client)):
    """Gemini models visible to the configured key, optionally filtered by substring."""
    try:
        models = await list_gemini_models(contains, client=client)
    except GeminiNotConfiguredError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing GEMINI_API_KEY")
    except errors.APIError as e:
        logger.warning(f"Failed to list Gemini models: {e}")
        raise HTTPException(
            status_code=e.code if isinstance(e.code, int) and e.code >= 400 else status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Failed to fetch models", "detail": str(e)[:500]},
        )
    return GeminiModelList(count=len(models), models=models)


@router.post("/compare", response_model=CompareResponse)
async def compare(body: CompareRequest):
    """Set comparison of a manually entered item list against the model's list."""
    return compare_item_lists(body.manual, body.llm)


@router.get("/{receipt_id}", response_model=ReceiptParseResponse, response_model_exclude_none=True)
async def get_receipt(
    receipt_id: str,
    raw: bool = False,
    receipt_store: ReceiptStore = Depends(get_receipt_store),
):
    """Stored receipt by id; ``?raw=true`` includes the raw model text when it was kept."""
    record = await receipt_store.get(receipt_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Receipt not found")

    return ReceiptParseResponse(
        receipt_id=record.id,
        items=record.items,
        meta=ReceiptMeta(
            count=len(record.items),
            strategy=record.strategy,
            gemini_model=record.model,
            created_at=record.created_at,
        ),
        raw_text=record.raw_text if raw else None,
    )
