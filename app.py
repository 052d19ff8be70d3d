"""Pantry Service - Recipe Suggestions and Receipt Ingestion.

Single entry point for the HTTP API:
- Recipe generation from pantry ingredients (Tavily web search, catalog fallback)
- Receipt photo parsing into pantry items (Gemini vision, model fallback)

Run with: python app.py
"""

import uvicorn

from pantry_service.api.app import app
from pantry_service.utils.config import config
from pantry_service.utils.logger import logger


if __name__ == "__main__":
    logger.info(f"Starting Pantry Service on port {config.PORT}")
    logger.info(f"Frontend origin: {config.FRONTEND_URL}")
    logger.info(f"API docs available at: http://localhost:{config.PORT}/docs")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT, log_config=None)
