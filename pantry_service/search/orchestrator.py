"""Tiered recipe search.

Plans queries for the ingredient list, runs them one at a time, and returns the
recipes from the first query whose results survive filtering. Any per-query
failure (transport error, HTTP error, nothing usable) moves on to the next
query. When the plan runs out, the local catalog is served instead, so a
non-empty ingredient list always yields recipes.

Queries run sequentially on purpose: only one success is needed, and each call
spends search quota.
"""

from typing import Awaitable, Callable, Optional, Sequence

from pantry_service.exceptions import FallbackExhausted, NoUsableResults, SearchHTTPError
from pantry_service.models.models import Recipe, RecipeSearchOutcome, SearchAttempt, SearchResponse
from pantry_service.search.catalog import generate_mock_recipes
from pantry_service.search.query_builder import build_tiered_queries, normalize_ingredients
from pantry_service.search.ranking import filter_and_rank
from pantry_service.search.recipe_mapper import process_tavily_results
from pantry_service.search.tavily import tavily_search
from pantry_service.utils.config import config
from pantry_service.utils.fallback import first_success
from pantry_service.utils.logger import logger

SearchFn = Callable[[str], Awaitable[SearchResponse]]


async def generate_recipes(
    ingredient_names: Sequence[str],
    search: Optional[SearchFn] = None,
    api_key: Optional[str] = None,
) -> RecipeSearchOutcome:
    """Find recipes for an ingredient list (async).

    Args:
        ingredient_names: Raw ingredient names in priority order. Not mutated.
        search: Search function taking a query string. Default: tavily_search.
        api_key: Search key used to decide whether searching is possible at all.
            Default: config.TAVILY_API_KEY. Ignored when ``search`` is given.

    Returns:
        RecipeSearchOutcome with recipes (never empty), the query that produced them
        (None on fallback), the number of queries tried and a per-query trace.

    Raises:
        ValueError: If no usable ingredient name was supplied.
    """
    ingredients = normalize_ingredients(ingredient_names, limit=config.MAX_QUERY_INGREDIENTS)
    if not ingredients:
        raise ValueError("At least one ingredient is required")

    plan = build_tiered_queries(ingredients)
    trace: list[SearchAttempt] = []

    if search is None:
        key = api_key if api_key is not None else config.TAVILY_API_KEY
        if not key:
            logger.warning("TAVILY_API_KEY not set, serving fallback catalog")
            return _fallback(ingredients, trace)
        search = tavily_search

    def attempt(query: str):
        async def _run() -> list[Recipe]:
            entry = SearchAttempt(query=query, ok=False)
            trace.append(entry)
            try:
                response = await search(query)
            except Exception as e:
                entry.error = f"{type(e).__name__}: {e}"
                raise

            entry.status = response.status
            if not response.ok:
                entry.error = f"HTTP {response.status}"
                raise SearchHTTPError(response.status)

            raw_results = response.results
            ranked = filter_and_rank(raw_results, ingredients, top_n=config.MAX_RECIPES)
            entry.raw_count = len(raw_results)
            entry.filtered_count = len(ranked)
            if not ranked:
                entry.error = "no usable results"
                raise NoUsableResults(len(raw_results), len(ranked))

            entry.ok = True
            return process_tavily_results(ranked)

        return query, _run

    logger.info(f"Searching recipes for {ingredients} with {len(plan)} planned queries")
    try:
        success = await first_success((attempt(query) for query in plan), operation="Recipe search")
    except FallbackExhausted as e:
        logger.warning(f"All {len(e.failures)} search queries failed, falling back to catalog")
        return _fallback(ingredients, trace)

    logger.info(
        f"Found {len(success.value)} recipes after {success.attempts} queries",
        extra={"query": success.label},
    )
    return RecipeSearchOutcome(
        recipes=success.value,
        used_query=success.label,
        attempts=success.attempts,
        debug=trace,
    )


def _fallback(ingredients: list[str], trace: list[SearchAttempt]) -> RecipeSearchOutcome:
    return RecipeSearchOutcome(
        recipes=generate_mock_recipes(ingredients, limit=config.MAX_RECIPES),
        used_query=None,
        attempts=len(trace),
        fallback=True,
        debug=trace,
    )
