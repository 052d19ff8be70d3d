"""Map raw search results to Recipe records.

Search results are heterogeneous: the image may sit in ``image_url``, in an
``images`` array (strings or ``{"url": ...}`` objects), inside the page HTML in
``raw_content``, or nowhere. Each candidate is validated before use, and a
fixed set of stock food photos guarantees every recipe has an image.
"""

import re
from typing import Optional, Sequence
from urllib.parse import urlparse

from pantry_service.models.models import Recipe

DEFAULT_SOURCE = "Recipe Source"
DEFAULT_DESCRIPTION = "Delicious recipe"
DESCRIPTION_LENGTH = 150

FALLBACK_IMAGES = (
    "https://images.unsplash.com/photo-1565299624946-b28f40a0ca4b?w=400&h=300&fit=crop",  # Pizza
    "https://images.unsplash.com/photo-1621996346565-e3dbc353d2e5?w=400&h=300&fit=crop",  # Pasta
    "https://images.unsplash.com/photo-1603133872878-684f208fb84b?w=400&h=300&fit=crop",  # Stir-fry
    "https://images.unsplash.com/photo-1574323347407-f5e1ad6d020b?w=400&h=300&fit=crop",  # Casserole
    "https://images.unsplash.com/photo-1546069901-ba9599a7e63c?w=400&h=300&fit=crop",  # Salad bowl
    "https://images.unsplash.com/photo-1512621776951-a57141f2eefd?w=400&h=300&fit=crop",  # Vegetables
    "https://images.unsplash.com/photo-1504674900247-0877df9cc836?w=400&h=300&fit=crop",  # Grilled plate
    "https://images.unsplash.com/photo-1540189549336-e6e99c3679fe?w=400&h=300&fit=crop",  # Veggie plate
    "https://images.unsplash.com/photo-1555939594-58d7cb561ad1?w=400&h=300&fit=crop",  # Skewers
)

IMAGE_EXTENSION_RE = re.compile(r"\.(jpe?g|png|gif|webp|avif|bmp|svg)(?:$|[?#])", re.IGNORECASE)

IMAGE_HOSTS = (
    "unsplash.com",
    "cloudinary.com",
    "imgix.net",
    "googleusercontent.com",
    "staticflickr.com",
    "cloudfront.net",
    "akamaized.net",
    "wp.com",
    "cdn.",
)

# Tried in order against raw_content; first validated match wins
HTML_IMAGE_PATTERNS = (
    re.compile(r"<img[^>]+src=\"([^\"]+)\"", re.IGNORECASE),
    re.compile(r"<img[^>]+src='([^']+)'", re.IGNORECASE),
    re.compile(r"<img[^>]+data-src=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<img[^>]+data-lazy(?:-src)?=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<meta[^>]+property=[\"']og:image[\"'][^>]+content=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<meta[^>]+content=[\"']([^\"']+)[\"'][^>]+property=[\"']og:image[\"']", re.IGNORECASE),
    re.compile(r"<meta[^>]+name=[\"']twitter:image[\"'][^>]+content=[\"']([^\"']+)[\"']", re.IGNORECASE),
    re.compile(r"<meta[^>]+content=[\"']([^\"']+)[\"'][^>]+name=[\"']twitter:image[\"']", re.IGNORECASE),
)


def is_valid_image_url(url) -> bool:
    """Heuristic check that ``url`` points at an image.

    The URL must parse as http(s) with a host, and then either end in an image
    extension, live on a known image host/CDN, or mention "image"/"photo".
    """
    if not isinstance(url, str) or not url.strip():
        return False
    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False

    if IMAGE_EXTENSION_RE.search(parsed.path) or IMAGE_EXTENSION_RE.search(candidate):
        return True
    host = parsed.netloc.lower()
    if any(image_host in host for image_host in IMAGE_HOSTS):
        return True
    lowered = candidate.lower()
    return "image" in lowered or "photo" in lowered


def _image_from_list(images) -> Optional[str]:
    if not isinstance(images, list):
        return None
    for image in images:
        url = image.get("url") if isinstance(image, dict) else image
        if is_valid_image_url(url):
            return url.strip()
    return None


def _image_from_html(raw_content) -> Optional[str]:
    if not isinstance(raw_content, str) or not raw_content:
        return None
    for pattern in HTML_IMAGE_PATTERNS:
        for match in pattern.finditer(raw_content):
            url = match.group(1).strip()
            if is_valid_image_url(url):
                return url
    return None


def fallback_image(index: int) -> str:
    return FALLBACK_IMAGES[index % len(FALLBACK_IMAGES)]


def get_recipe_image(result: dict, index: int) -> str:
    """Pick the best image for a result; never returns an empty string.

    Order: ``image_url`` -> first entry of ``images`` -> HTML in ``raw_content``
    (img src/data-src/data-lazy, og:image, twitter:image) -> stock photo by index.
    """
    image_url = result.get("image_url")
    if is_valid_image_url(image_url):
        return image_url.strip()

    return (
        _image_from_list(result.get("images"))
        or _image_from_html(result.get("raw_content"))
        or fallback_image(index)
    )


def extract_source_from_url(url) -> str:
    """Short publisher name: hostname without "www.", first dot-segment.

    >>> extract_source_from_url("https://www.foodnetwork.com/recipes/x")
    'foodnetwork'
    """
    if not isinstance(url, str):
        return DEFAULT_SOURCE
    try:
        hostname = urlparse(url.strip()).hostname
    except ValueError:
        return DEFAULT_SOURCE
    if not hostname:
        return DEFAULT_SOURCE
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname.split(".")[0] or DEFAULT_SOURCE


def build_description(content) -> str:
    if isinstance(content, str) and content:
        return content[:DESCRIPTION_LENGTH] + "..."
    return DEFAULT_DESCRIPTION


def process_tavily_results(results: Sequence[dict]) -> list[Recipe]:
    """Build Recipe records from already filtered and ranked results."""
    recipes = []
    for index, result in enumerate(results):
        title = result.get("title")
        url = result.get("url")
        recipes.append(
            Recipe(
                title=title if isinstance(title, str) and title.strip() else f"Recipe {index + 1}",
                url=url if isinstance(url, str) else "",
                image=get_recipe_image(result, index),
                source=extract_source_from_url(url),
                description=build_description(result.get("content")),
            )
        )
    return recipes
