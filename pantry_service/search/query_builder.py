"""Tiered search query planning.

Turns a free-text ingredient list into an ordered, deduplicated list of search
queries, from most selective (three ingredients on recipe sites) to least
selective (every ingredient, any site). The orchestrator consumes the plan left
to right and stops at the first query with usable results.

Everything here is deterministic and never mutates its inputs.
"""

from itertools import combinations, islice
from typing import Iterable, Sequence

from pantry_service.utils.config import config

# Recipe publishers searched by the site-restricted tiers
RECIPE_SITES = (
    "allrecipes.com",
    "foodnetwork.com",
    "seriouseats.com",
    "bbcgoodfood.com",
    "simplyrecipes.com",
    "epicurious.com",
    "bonappetit.com",
    "delish.com",
)

# Social and video platforms: excluded from every query and dropped from results
BLOCKED_SITES = (
    "instagram.com",
    "facebook.com",
    "tiktok.com",
    "youtube.com",
    "pinterest.com",
    "twitter.com",
    "x.com",
    "reddit.com",
)

MAX_TRIPLE_QUERIES = 5
MAX_PAIR_QUERIES = 6

SINGLE_TEMPLATES = (
    "easy {x} recipe",
    "quick {x} recipe",
    "healthy {x} recipe",
)
PAIR_TEMPLATES = (
    "{x} and {y} recipe",
    "{x} with {y}",
)

SITE_CLAUSE = "(" + " OR ".join(f"site:{site}" for site in RECIPE_SITES) + ")"
EXCLUDE_CLAUSE = " ".join(f"-site:{site}" for site in BLOCKED_SITES)


def normalize_ingredients(names: Iterable[str], limit: int | None = None) -> list[str]:
    """Lowercase, trim, drop empties and deduplicate, keeping first-seen order.

    Args:
        names: Raw ingredient names (any case/whitespace, non-strings ignored).
        limit: Keep only the first ``limit`` distinct names. Default: no cap.

    Returns:
        New list of normalized names.
    """
    seen: dict[str, None] = {}
    for name in names:
        if not isinstance(name, str):
            continue
        cleaned = name.strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    normalized = list(seen)
    return normalized[:limit] if limit is not None else normalized


def combine_ingredient_lists(*lists: Iterable[str]) -> list[str]:
    """Merge several ingredient lists (own pantry first, then friends').

    Returns a new normalized, deduplicated list; the inputs are left untouched.
    """
    merged: list[str] = []
    for names in lists:
        merged.extend(names)
    return normalize_ingredients(merged)


def restricted(terms: str) -> str:
    """Query limited to the recipe site allow-list, minus blocked platforms."""
    return f"{terms} {SITE_CLAUSE} {EXCLUDE_CLAUSE}"


def unrestricted(terms: str) -> str:
    """Query open to any site except blocked platforms."""
    return f"{terms} {EXCLUDE_CLAUSE}"


def _combination_queries(ingredients: Sequence[str], size: int, cap: int) -> list[str]:
    # combinations() is lazy and index-lexicographic, so islice stops enumeration at the cap
    return [
        restricted("recipe " + " ".join(combo))
        for combo in islice(combinations(ingredients, size), cap)
    ]


def build_tiered_queries(names: Sequence[str], max_ingredients: int | None = None) -> list[str]:
    """Build the ordered query plan for a set of ingredients.

    Tiers, in order:
    1. 3-ingredient combinations on recipe sites (at most 5)
    2. 2-ingredient combinations on recipe sites (at most 6)
    3. Single-ingredient templates on recipe sites for the first ingredient, plus
       pairing templates with the second ingredient when there is one, then one
       unrestricted single-ingredient query
    4. One unrestricted query joining every ingredient (last resort)

    Args:
        names: Ingredient names in priority order (raw, normalized here).
        max_ingredients: Distinct ingredients considered. Default: config.MAX_QUERY_INGREDIENTS.

    Returns:
        Deduplicated list of query strings; empty if no usable ingredient was given.

    Example:
        >>> build_tiered_queries(["Chicken", "rice"])[0]
        'recipe chicken rice (site:allrecipes.com OR ...) -site:instagram.com ...'
    """
    limit = max_ingredients if max_ingredients is not None else config.MAX_QUERY_INGREDIENTS
    ingredients = normalize_ingredients(names, limit=limit)
    if not ingredients:
        return []

    queries: list[str] = []
    queries.extend(_combination_queries(ingredients, 3, MAX_TRIPLE_QUERIES))
    queries.extend(_combination_queries(ingredients, 2, MAX_PAIR_QUERIES))

    primary = ingredients[0]
    queries.extend(restricted(template.format(x=primary)) for template in SINGLE_TEMPLATES)
    if len(ingredients) > 1:
        secondary = ingredients[1]
        queries.extend(
            restricted(template.format(x=primary, y=secondary)) for template in PAIR_TEMPLATES
        )
    queries.append(unrestricted(f"{primary} recipe"))

    queries.append(unrestricted("recipe " + " ".join(ingredients)))

    return list(dict.fromkeys(queries))
