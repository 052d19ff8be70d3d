"""
Recipe routes.

Provides endpoints for:
- Generating recipes from pantry ingredients (tiered web search)
- Generating recipes from a combined own + friend ingredient list ("jam")
- Listing the fallback catalog
- Reporting search key presence for deployment checks
"""
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, HTTPException, status

from pantry_service.api.dependencies import get_recipe_search
from pantry_service.models.models import (
    JamRequest,
    Recipe,
    RecipeRequest,
    RecipeResponse,
    SearchHealthResponse,
)
from pantry_service.search.catalog import CATALOG
from pantry_service.search.orchestrator import SearchFn, generate_recipes
from pantry_service.search.query_builder import combine_ingredient_lists
from pantry_service.utils.config import config
from pantry_service.utils.logger import logger

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


async def _generate(names: Sequence[str], search: Optional[SearchFn], debug: bool) -> RecipeResponse:
    try:
        outcome = await generate_recipes(names, search=search)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    response = RecipeResponse(
        recipes=outcome.recipes,
        message=f"Found {len(outcome.recipes)} recipes for your ingredients",
        used_query=outcome.used_query,
        attempts=outcome.attempts,
    )
    if debug or config.INCLUDE_SEARCH_DEBUG:
        response.debug = outcome.debug
    return response


@router.post("/generate", response_model=RecipeResponse, response_model_exclude_unset=True)
async def generate(
    body: RecipeRequest,
    debug: bool = False,
    search: Optional[SearchFn] = Depends(get_recipe_search),
):
    """
    Generate recipes for the given pantry ingredients.

    Always returns at least one recipe for a non-empty ingredient list; when
    every search query fails the fallback catalog is served.
    """
    if not body.ingredients:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one ingredient is required",
        )
    return await _generate(body.ingredient_names(), search, debug)


@router.post("/jam", response_model=RecipeResponse, response_model_exclude_unset=True)
async def jam(
    body: JamRequest,
    debug: bool = False,
    search: Optional[SearchFn] = Depends(get_recipe_search),
):
    """Generate recipes from the user's pantry combined with a friend's ingredients."""
    combined = combine_ingredient_lists(body.ingredient_names(), body.friend_ingredients)
    if not combined:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No ingredients available to jam up",
        )
    logger.info(f"Jam session with {len(combined)} combined ingredients")
    return await _generate(combined, search, debug)


@router.get("", response_model=dict[str, list[Recipe]])
async def list_catalog():
    """All catalog recipes (the set used when search is unavailable)."""
    return {"recipes": list(CATALOG)}


@router.get("/health", response_model=SearchHealthResponse)
async def search_health():
    """Search key presence and length. The key itself is never returned."""
    return SearchHealthResponse(
        tavily_key_present=bool(config.TAVILY_API_KEY),
        tavily_key_length=len(config.TAVILY_API_KEY),
        search_depth=config.TAVILY_SEARCH_DEPTH,
        max_results=config.TAVILY_MAX_RESULTS,
    )
