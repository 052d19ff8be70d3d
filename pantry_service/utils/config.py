"""Configuration management for the Pantry Service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API Key: required only for receipt parsing (recipes work without it)
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Explicit vision model override, tried before the built-in candidate list
        self.GEMINI_MODEL: Optional[str] = (os.getenv("GEMINI_MODEL") or "").strip() or None
        # Tavily API Key: without it recipe generation serves the fallback catalog
        self.TAVILY_API_KEY: str = os.getenv("TAVILY_API_KEY", "")
        self.TAVILY_API_URL: str = os.getenv("TAVILY_API_URL", "https://api.tavily.com/search")
        # Results requested per query. Default: 5
        self.TAVILY_MAX_RESULTS: int = int(os.getenv("TAVILY_MAX_RESULTS", "5"))
        # Search depth: "basic" (fast, cheap) or "advanced"
        self.TAVILY_SEARCH_DEPTH: str = os.getenv("TAVILY_SEARCH_DEPTH", "basic")
        # Per-call timeouts (seconds). A hung provider must not hang the request.
        self.SEARCH_TIMEOUT_SECONDS: float = float(os.getenv("SEARCH_TIMEOUT_SECONDS", "15"))
        self.MODEL_TIMEOUT_SECONDS: float = float(os.getenv("MODEL_TIMEOUT_SECONDS", "60"))
        # Maximum distinct ingredients used to build search queries. Default: 8
        self.MAX_QUERY_INGREDIENTS: int = int(os.getenv("MAX_QUERY_INGREDIENTS", "8"))
        # Maximum number of recipes returned per request. Default: 3
        self.MAX_RECIPES: int = int(os.getenv("MAX_RECIPES", "3"))
        # Maximum receipt image size (in MB). Default: 5 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
        # Image Compression: downscale large receipt photos before upload
        self.COMPRESS_IMG: bool = _env_bool("COMPRESS_IMG", "true")
        # Only compress if image size is above this (in KB)
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))
        # Attach raw model text to parse results (debugging prompt compliance)
        self.INCLUDE_MODEL_RAW: bool = _env_bool("INCLUDE_MODEL_RAW", "false")
        # Always attach the per-query attempt trace to recipe responses
        self.INCLUDE_SEARCH_DEBUG: bool = _env_bool("INCLUDE_SEARCH_DEBUG", "false")
        # CORS origin for the web frontend
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
        # Server Port
        self.PORT: int = int(os.getenv("PORT", "3001"))

    def validate(self) -> None:
        """Validate configuration values.

        Missing API keys are not errors here: each pipeline degrades (recipes) or
        fails per request (receipts) when its key is absent.

        Raises:
            ValueError: If a value is out of range or not one of the allowed options.
        """
        if self.TAVILY_SEARCH_DEPTH not in ("basic", "advanced"):
            raise ValueError(
                f"TAVILY_SEARCH_DEPTH must be 'basic' or 'advanced', got: {self.TAVILY_SEARCH_DEPTH}"
            )
        if not (1 <= self.TAVILY_MAX_RESULTS <= 20):
            raise ValueError(
                f"TAVILY_MAX_RESULTS must be between 1 and 20, got: {self.TAVILY_MAX_RESULTS}"
            )
        if self.SEARCH_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"SEARCH_TIMEOUT_SECONDS must be positive, got: {self.SEARCH_TIMEOUT_SECONDS}"
            )
        if self.MODEL_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"MODEL_TIMEOUT_SECONDS must be positive, got: {self.MODEL_TIMEOUT_SECONDS}"
            )
        if self.MAX_QUERY_INGREDIENTS < 1:
            raise ValueError(
                f"MAX_QUERY_INGREDIENTS must be at least 1, got: {self.MAX_QUERY_INGREDIENTS}"
            )
        if self.MAX_RECIPES < 1:
            raise ValueError(f"MAX_RECIPES must be at least 1, got: {self.MAX_RECIPES}")
        if self.MAX_IMAGE_SIZE_MB < 1:
            raise ValueError(f"MAX_IMAGE_SIZE_MB must be at least 1, got: {self.MAX_IMAGE_SIZE_MB}")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
