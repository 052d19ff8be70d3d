"""Search result filtering and ranking.

Results from social/video platforms are dropped (they are not indexable recipe
sources), the rest are scored by how many ingredients they mention and the top
few are kept. Pure functions; repeated runs give the same order.
"""

from typing import Iterable, Optional, Sequence
from urllib.parse import urlparse

from pantry_service.search.query_builder import BLOCKED_SITES
from pantry_service.utils.logger import logger


def extract_hostname(url) -> Optional[str]:
    """Lowercase hostname of ``url``, or None if it cannot be parsed."""
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return None
    return hostname or None


def is_blocked_domain(hostname: str, blocked: Iterable[str] = BLOCKED_SITES) -> bool:
    """True if hostname is a blocked site or one of its subdomains."""
    return any(hostname == site or hostname.endswith("." + site) for site in blocked)


def score_result(result: dict, ingredients: Sequence[str]) -> int:
    """Number of ingredients appearing (case-insensitive substring) in title + content."""
    title = result.get("title") or ""
    content = result.get("content") or ""
    haystack = f"{title} {content}".lower() if isinstance(title, str) and isinstance(content, str) else ""
    return sum(1 for ingredient in ingredients if ingredient.lower() in haystack)


def filter_and_rank(results: Sequence[dict], ingredients: Sequence[str], top_n: int = 3) -> list[dict]:
    """Drop blocked/unparseable results, rank by ingredient overlap, keep the top ``top_n``.

    Ties keep provider order (sorted() is stable).

    Args:
        results: Raw provider results (untrusted dicts).
        ingredients: Normalized ingredient names.
        top_n: Number of results to keep. Default: 3.

    Returns:
        New list of at most ``top_n`` results, best first.
    """
    kept = []
    dropped = 0
    for result in results:
        hostname = extract_hostname(result.get("url"))
        if hostname is None or is_blocked_domain(hostname):
            dropped += 1
            continue
        kept.append(result)

    if dropped:
        logger.debug(f"Filtered out {dropped} blocked/invalid results")

    ranked = sorted(kept, key=lambda result: score_result(result, ingredients), reverse=True)
    return ranked[:top_n]
