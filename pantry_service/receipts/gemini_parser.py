"""Receipt parsing with the Gemini vision API.

Core Functions:
- build_model_candidates(): Explicit GEMINI_MODEL override first, then the built-in list
- parse_model_output(): Lenient JSON parsing (direct, then first {...} block)
- normalize_items(): Trim, lowercase, drop empties, deduplicate
- classify_model_error(): NOT_FOUND (try the next model) vs OTHER_ERROR (stop)
- try_model(): One vision call against one model (async)
- parse_receipt_with_gemini(): Candidate fallback loop (async)
- list_gemini_models(): Models visible to the configured key (async)

Only "model not available" failures move on to the next candidate: a bad
request, an auth failure or an exhausted quota would fail the same way on every
model.
"""

import asyncio
import json
import re
from typing import Any, Iterable, Optional

from google import genai
from google.genai import errors, types

from pantry_service.exceptions import (
    FallbackExhausted,
    GeminiNotConfiguredError,
    ModelOutputError,
    ReceiptParsingError,
)
from pantry_service.models.models import GeminiModelInfo, ReceiptParseResult
from pantry_service.prompts.prompts import RECEIPT_EXTRACTION_PROMPT
from pantry_service.receipts.images import prepare_image
from pantry_service.utils.config import config
from pantry_service.utils.fallback import AttemptStatus, FailureAction, first_success
from pantry_service.utils.logger import logger

# Two model generations, plain and fully-qualified ids (the API accepts one or the other
# depending on version), newest first.
MODEL_CANDIDATES_BASE = (
    "gemini-2.5-flash",
    "models/gemini-2.5-flash",
    "gemini-2.5-flash-lite",
    "models/gemini-2.5-flash-lite",
    "gemini-2.0-flash",
    "gemini-2.0-flash-001",
    "models/gemini-2.0-flash",
    "gemini-2.0-flash-lite",
)

# Last resort when the error carries no usable status code
NOT_FOUND_PATTERN = re.compile(r"not found|404|unsupported|no such model", re.IGNORECASE)
JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def build_model_candidates(override: Optional[str] = None) -> list[str]:
    """Ordered model ids to try, with ``override`` (if any) first and not repeated."""
    override = (override or "").strip()
    if not override:
        return list(MODEL_CANDIDATES_BASE)
    return [override, *(model for model in MODEL_CANDIDATES_BASE if model != override)]


def get_client(api_key: Optional[str] = None) -> genai.Client:
    """Gemini client for the configured key.

    Raises:
        GeminiNotConfiguredError: If no API key is available.
    """
    key = api_key if api_key is not None else config.GEMINI_API_KEY
    if not key:
        raise GeminiNotConfiguredError()
    return genai.Client(
        api_key=key,
        http_options=types.HttpOptions(timeout=int(config.MODEL_TIMEOUT_SECONDS * 1000)),
    )


def parse_model_output(text: Optional[str], model: str) -> dict:
    """Parse a JSON object out of model output.

    Tries the whole text first, then the outermost ``{...}`` block (models like to
    wrap JSON in prose or code fences).

    Raises:
        ModelOutputError: If neither strategy yields JSON.
    """
    if not text:
        raise ModelOutputError(model, "Gemini did not return JSON")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        match = JSON_OBJECT_PATTERN.search(text)
        if not match:
            raise ModelOutputError(model, "Gemini did not return JSON")
        try:
            parsed = json.loads(match.group())
        except json.JSONDecodeError:
            raise ModelOutputError(model, "Failed to parse JSON from Gemini output")

    return parsed if isinstance(parsed, dict) else {}


def normalize_items(items: Any) -> list[str]:
    """Canonical receipt item list: trimmed, lowercase, non-empty, distinct, in order.

    A non-list ``items`` value is treated as an empty list.
    """
    if not isinstance(items, list):
        return []
    cleaned = (str(item).strip().lower() for item in items if item is not None)
    return list(dict.fromkeys(item for item in cleaned if item))


def classify_model_error(error: Exception) -> AttemptStatus:
    """Decide whether a failed model call means "this model is not available".

    Uses the API status code when the SDK provides one, falling back to matching
    the error message.
    """
    if isinstance(error, errors.APIError) and isinstance(error.code, int):
        return AttemptStatus.NOT_FOUND if error.code == 404 else AttemptStatus.OTHER_ERROR
    if NOT_FOUND_PATTERN.search(str(error)):
        return AttemptStatus.NOT_FOUND
    return AttemptStatus.OTHER_ERROR


def _continue_on_not_found(error: Exception) -> FailureAction:
    if classify_model_error(error) is AttemptStatus.NOT_FOUND:
        return FailureAction.CONTINUE
    return FailureAction.ABORT


async def try_model(
    client: genai.Client,
    model: str,
    image_bytes: bytes,
    mime_type: str,
) -> ReceiptParseResult:
    """Run the extraction prompt against one model (single attempt, no retries)."""
    response = await asyncio.to_thread(
        client.models.generate_content,
        model=model,
        contents=[
            RECEIPT_EXTRACTION_PROMPT,
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        ],
    )
    text = response.text
    parsed = parse_model_output(text, model)

    return ReceiptParseResult(
        items=normalize_items(parsed.get("items")),
        model=model,
        raw_model_text=text if config.INCLUDE_MODEL_RAW else None,
    )


async def parse_receipt_with_gemini(
    image_bytes: bytes,
    client: Optional[genai.Client] = None,
    candidates: Optional[Iterable[str]] = None,
) -> ReceiptParseResult:
    """Extract normalized item names from a receipt photo.

    Args:
        image_bytes: Raw image bytes (JPEG/PNG/WEBP).
        client: Gemini client. Default: one built from GEMINI_API_KEY.
        candidates: Model ids to try in order. Default: build_model_candidates(GEMINI_MODEL).

    Returns:
        ReceiptParseResult from the first model that answered with parseable JSON.

    Raises:
        GeminiNotConfiguredError: If no client was given and GEMINI_API_KEY is unset.
        ReceiptParsingError: If every candidate was tried, or a non-availability error
            stopped the loop. The message names each model tried and the last error.
    """
    client = client or get_client()
    models = list(candidates) if candidates is not None else build_model_candidates(config.GEMINI_MODEL)
    prepared_bytes, mime_type = prepare_image(image_bytes)

    def attempt(model: str):
        return model, lambda: try_model(client, model, prepared_bytes, mime_type)

    try:
        success = await first_success(
            (attempt(model) for model in models),
            on_failure=_continue_on_not_found,
            operation="Gemini receipt parse",
        )
    except FallbackExhausted as e:
        tried = [failure.label for failure in e.failures]
        last_error = e.failures[-1].error if e.failures else None
        error = ReceiptParsingError(tried, last_error)
        logger.error(str(error))
        raise error from last_error

    result = success.value
    logger.info(f"Parsed {len(result.items)} receipt items", extra={"model": result.model})
    return result


async def list_gemini_models(
    contains: str = "",
    client: Optional[genai.Client] = None,
) -> list[GeminiModelInfo]:
    """Models available to the configured key, optionally filtered by name substring.

    Args:
        contains: Case-insensitive substring matched against name or display name.
        client: Gemini client. Default: one built from GEMINI_API_KEY.
    """
    client = client or get_client()
    listed = await asyncio.to_thread(lambda: list(client.models.list()))

    needle = contains.strip().lower()
    infos = []
    for model in listed:
        info = GeminiModelInfo(
            name=model.name,
            display_name=model.display_name,
            description=model.description,
            input_token_limit=model.input_token_limit,
            output_token_limit=model.output_token_limit,
            supported_actions=model.supported_actions,
        )
        if needle and needle not in (info.name or "").lower() and needle not in (info.display_name or "").lower():
            continue
        infos.append(info)
    return infos
