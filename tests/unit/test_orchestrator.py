"""Unit tests for the tiered recipe search orchestrator.

Tests cover:
- First usable query wins and later queries are not issued
- HTTP errors, transport errors and blocked-only results advance to the next query
- Catalog fallback when every query fails or no key is configured
- Per-query diagnostic trace
"""

from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from pantry_service.models.models import SearchResponse
from pantry_service.search.catalog import generate_mock_recipes
from pantry_service.search.orchestrator import generate_recipes
from pantry_service.search.query_builder import build_tiered_queries


def ok(results):
    return SearchResponse(ok=True, status=200, json={"results": results})


def http_error(status=500):
    return SearchResponse(ok=False, status=status, json={"error": "server"})


GOOD_RESULT = {
    "url": "https://www.allrecipes.com/chicken-rice",
    "title": "Chicken Rice",
    "content": "Chicken and rice in one pot",
    "image_url": "https://cdn.allrecipes.com/chicken.jpg",
}


class TestGenerateRecipes:
    """Test generate_recipes control flow."""

    @pytest.mark.asyncio
    async def test_empty_ingredients_rejected(self):
        with pytest.raises(ValueError, match="At least one ingredient"):
            await generate_recipes(["  ", ""], search=AsyncMock())

    @pytest.mark.asyncio
    async def test_first_usable_query_wins(self):
        search = AsyncMock(return_value=ok([GOOD_RESULT]))

        outcome = await generate_recipes(["chicken", "rice"], search=search)

        first_query = build_tiered_queries(["chicken", "rice"])[0]
        search.assert_awaited_once_with(first_query)
        assert outcome.used_query == first_query
        assert outcome.attempts == 1
        assert outcome.fallback is False
        assert outcome.recipes[0].title == "Chicken Rice"
        assert outcome.recipes[0].source == "allrecipes"
        assert outcome.recipes[0].image == "https://cdn.allrecipes.com/chicken.jpg"

    @pytest.mark.asyncio
    async def test_blocked_only_results_advance_to_next_query(self):
        search = AsyncMock(
            side_effect=[
                ok([{"url": "https://instagram.com/x", "title": "X"}]),
                ok([GOOD_RESULT]),
            ]
        )

        outcome = await generate_recipes(["chicken", "rice"], search=search)

        plan = build_tiered_queries(["chicken", "rice"])
        assert search.await_count == 2
        assert outcome.used_query == plan[1]
        assert outcome.attempts == 2
        assert all("instagram.com" not in recipe.url for recipe in outcome.recipes)
        assert outcome.debug[0].raw_count == 1
        assert outcome.debug[0].filtered_count == 0
        assert outcome.debug[0].ok is False

    @pytest.mark.asyncio
    async def test_http_and_transport_errors_advance(self):
        search = AsyncMock(
            side_effect=[
                http_error(429),
                aiohttp.ClientConnectionError("refused"),
                ok([GOOD_RESULT]),
            ]
        )

        outcome = await generate_recipes(["chicken", "rice"], search=search)

        assert outcome.attempts == 3
        assert outcome.debug[0].status == 429
        assert outcome.debug[0].error == "HTTP 429"
        assert "ClientConnectionError" in outcome.debug[1].error
        assert outcome.debug[2].ok is True

    @pytest.mark.asyncio
    async def test_parse_error_body_counts_as_no_results(self):
        search = AsyncMock(
            side_effect=[
                SearchResponse(ok=True, status=200, json={"parseError": True, "raw": "<html>"}),
                ok([GOOD_RESULT]),
            ]
        )

        outcome = await generate_recipes(["egg"], search=search)

        assert outcome.attempts == 2
        assert outcome.debug[0].raw_count == 0

    @pytest.mark.asyncio
    async def test_total_failure_falls_back_to_catalog(self):
        search = AsyncMock(return_value=http_error(500))

        outcome = await generate_recipes(["chicken", "rice"], search=search)

        plan = build_tiered_queries(["chicken", "rice"])
        assert search.await_count == len(plan)
        assert outcome.fallback is True
        assert outcome.used_query is None
        assert outcome.attempts == len(plan)
        assert outcome.recipes == generate_mock_recipes(["chicken", "rice"])
        assert len(outcome.recipes) >= 1

    @pytest.mark.asyncio
    async def test_no_api_key_serves_catalog_without_searching(self):
        with patch("pantry_service.search.orchestrator.tavily_search", new_callable=AsyncMock) as mock_search:
            outcome = await generate_recipes(["salmon"], api_key="")

        mock_search.assert_not_awaited()
        assert outcome.fallback is True
        assert outcome.attempts == 0
        assert outcome.recipes[0].title == "Salmon Spinach Salad"

    @pytest.mark.asyncio
    async def test_default_search_is_tavily_when_key_present(self):
        with patch(
            "pantry_service.search.orchestrator.tavily_search",
            new_callable=AsyncMock,
            return_value=ok([GOOD_RESULT]),
        ) as mock_search:
            outcome = await generate_recipes(["chicken"], api_key="tvly-test")

        mock_search.assert_awaited_once()
        assert outcome.fallback is False

    @pytest.mark.asyncio
    async def test_results_capped_at_max_recipes(self):
        results = [
            {"url": f"https://site{i}.com/r", "title": f"Chicken {i}"} for i in range(5)
        ]
        search = AsyncMock(return_value=ok(results))

        outcome = await generate_recipes(["chicken"], search=search)

        assert len(outcome.recipes) == 3

    @pytest.mark.asyncio
    async def test_input_list_not_mutated(self):
        names = ["Chicken ", "chicken", "RICE"]
        await generate_recipes(names, search=AsyncMock(return_value=ok([GOOD_RESULT])))
        assert names == ["Chicken ", "chicken", "RICE"]
