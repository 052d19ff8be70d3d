"""Request-scoped access to the collaborators wired into the app by create_app()."""

from typing import Optional

from fastapi import Request

from pantry_service.receipts.ingestion import ReceiptParser
from pantry_service.search.orchestrator import SearchFn
from pantry_service.storage.stores import PantryStore, ReceiptStore


def get_pantry_store(request: Request) -> PantryStore:
    return request.app.state.pantry_store


def get_receipt_store(request: Request) -> ReceiptStore:
    return request.app.state.receipt_store


def get_recipe_search(request: Request) -> Optional[SearchFn]:
    """Injected search function, or None to use Tavily with the configured key."""
    return request.app.state.recipe_search


def get_receipt_parser(request: Request) -> Optional[ReceiptParser]:
    """Injected receipt parser, or None to use Gemini with the configured key."""
    return request.app.state.receipt_parser


def get_gemini_client(request: Request):
    return request.app.state.gemini_client
