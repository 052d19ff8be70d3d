"""
FastAPI application for the Pantry Service.

Wires the recipe and receipt routers, CORS for the web frontend, and the
storage/provider collaborators shared by every request. Tests build their own
app via create_app() with fakes injected.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pantry_service.api.routes import items, recipes
from pantry_service.models.models import HealthResponse
from pantry_service.receipts.ingestion import ReceiptParser
from pantry_service.search.orchestrator import SearchFn
from pantry_service.storage.stores import (
    InMemoryPantryStore,
    InMemoryReceiptStore,
    PantryStore,
    ReceiptStore,
)
from pantry_service.utils.config import config
from pantry_service.utils.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Pantry Service API...")
    logger.info(f"Tavily search: {'configured' if config.TAVILY_API_KEY else 'missing key, catalog only'}")
    logger.info(f"Gemini receipt parsing: {'configured' if config.GEMINI_API_KEY else 'missing key'}")
    yield
    logger.info("Pantry Service API shutdown complete")


def create_app(
    pantry_store: Optional[PantryStore] = None,
    receipt_store: Optional[ReceiptStore] = None,
    recipe_search: Optional[SearchFn] = None,
    receipt_parser: Optional[ReceiptParser] = None,
    gemini_client=None,
) -> FastAPI:
    """Build the API.

    Args:
        pantry_store: Destination for parsed receipt items. Default: in-memory.
        receipt_store: Log of parsed receipts. Default: in-memory.
        recipe_search: Search function used by recipe generation. Default: Tavily.
        receipt_parser: Receipt parser. Default: Gemini with the candidate list.
        gemini_client: Client used for model listing. Default: built from GEMINI_API_KEY.
    """
    app = FastAPI(
        title="Pantry Service API",
        description="Recipe suggestions from pantry ingredients and receipt photo ingestion",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.pantry_store = pantry_store or InMemoryPantryStore()
    app.state.receipt_store = receipt_store or InMemoryReceiptStore()
    app.state.recipe_search = recipe_search
    app.state.receipt_parser = receipt_parser
    app.state.gemini_client = gemini_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(recipes.router)
    app.include_router(items.router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Liveness check for the frontend and load balancers."""
        return HealthResponse(
            message="Pantry service is running",
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

    return app


app = create_app()
