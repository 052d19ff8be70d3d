"""Tavily search API client.

One HTTP POST per query. A body that is not JSON is a data-shape fault and is
returned as ``{"parseError": True, "raw": ...}``; transport faults (connection
refused, timeout) propagate to the caller, which decides whether to move on.
"""

import json
from typing import Optional

import aiohttp

from pantry_service.models.models import SearchResponse
from pantry_service.utils.config import config
from pantry_service.utils.logger import logger

RAW_BODY_LIMIT = 500


def build_payload(query: str, api_key: str) -> dict:
    return {
        "api_key": api_key,
        "query": query,
        "max_results": config.TAVILY_MAX_RESULTS,
        "include_images": True,
        "search_depth": config.TAVILY_SEARCH_DEPTH,
    }


def decode_body(raw: str) -> dict:
    """Decode a response body, tolerating non-JSON payloads."""
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        return {"parseError": True, "raw": raw[:RAW_BODY_LIMIT]}
    if not isinstance(decoded, dict):
        return {"parseError": True, "raw": raw[:RAW_BODY_LIMIT]}
    return decoded


async def tavily_search(
    query: str,
    api_key: Optional[str] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> SearchResponse:
    """Run one search query against Tavily (async).

    Args:
        query: Complete query string including site operators.
        api_key: Tavily key. Default: config.TAVILY_API_KEY.
        session: Optional shared aiohttp session; a short-lived one is opened otherwise.

    Returns:
        SearchResponse with ok/status, decoded body and raw (truncated) text.

    Raises:
        aiohttp.ClientError: On connection failures.
        asyncio.TimeoutError: If the call exceeds SEARCH_TIMEOUT_SECONDS.
    """
    payload = build_payload(query, api_key if api_key is not None else config.TAVILY_API_KEY)
    timeout = aiohttp.ClientTimeout(total=config.SEARCH_TIMEOUT_SECONDS)

    async def _post(client: aiohttp.ClientSession) -> SearchResponse:
        async with client.post(config.TAVILY_API_URL, json=payload, timeout=timeout) as response:
            raw = await response.text()
            logger.debug(f"Tavily responded {response.status} ({len(raw)} bytes)", extra={"query": query})
            return SearchResponse(
                ok=200 <= response.status < 300,
                status=response.status,
                json=decode_body(raw),
                raw=raw[:RAW_BODY_LIMIT],
            )

    if session is not None:
        return await _post(session)

    async with aiohttp.ClientSession() as owned_session:
        return await _post(owned_session)
