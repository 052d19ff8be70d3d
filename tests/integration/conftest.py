"""Pytest configuration and fixtures for integration tests.

Loads .env before collection and skips tests whose provider key is missing,
so the suite can run in CI without credentials.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv


def pytest_configure(config):
    """Load environment variables from .env (in project root) before tests import config."""
    env_path = Path(__file__).parent.parent.parent / ".env"
    load_dotenv(env_path)

    print("\n" + "=" * 70)
    print("Note: live tests need TAVILY_API_KEY (recipes) and GEMINI_API_KEY (receipts)")
    print(f"Environment loaded from: {env_path}")
    print("=" * 70 + "\n")


@pytest.fixture
def tavily_key():
    key = os.getenv("TAVILY_API_KEY")
    if not key:
        pytest.skip("TAVILY_API_KEY not set. Please set it in your .env file.")
    return key


@pytest.fixture
def gemini_key():
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set. Please set it in your .env file.")
    return key
