"""Data models and schemas for the pantry service.

Defines Pydantic models for request/response validation and domain objects.
All models use Pydantic v2; API payloads serialize with camelCase keys and
accept either camelCase or snake_case on input.
"""

from typing import Any, List, Optional, Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for models exchanged with the web frontend."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Recipe search
# ============================================================================


class IngredientInput(ApiModel):
    """One pantry ingredient as sent by the frontend: ``{"name": "..."}``."""

    name: Annotated[str, Field(max_length=200, description="Free-text ingredient name")]


class RecipeRequest(ApiModel):
    """Request body for recipe generation.

    The list may arrive empty; the route rejects that with 400 before any search runs.
    """

    ingredients: Annotated[
        List[IngredientInput], Field(default_factory=list, description="Pantry ingredients")
    ]

    def ingredient_names(self) -> list[str]:
        return [item.name for item in self.ingredients]


class JamRequest(RecipeRequest):
    """Request body for combining the user's pantry with a friend's ingredient list."""

    friend_ingredients: Annotated[
        List[str], Field(default_factory=list, description="Friend's ingredient names")
    ]


class Recipe(ApiModel):
    """Recipe record returned to the client. Built once, never mutated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    url: str
    image: Annotated[str, Field(min_length=1, description="Extracted or fallback image URL")]
    source: str
    description: str


class SearchAttempt(ApiModel):
    """Diagnostic trace entry for one query of the tiered search."""

    query: str
    ok: bool = False
    status: Optional[int] = None
    raw_count: Optional[int] = None
    filtered_count: Optional[int] = None
    error: Optional[str] = None


class RecipeSearchOutcome(ApiModel):
    """Result of one tiered search run."""

    recipes: List[Recipe]
    used_query: Optional[str] = None
    attempts: int = 0
    fallback: bool = False
    debug: List[SearchAttempt] = Field(default_factory=list)


class RecipeResponse(ApiModel):
    """Response schema for POST /api/recipes/generate."""

    recipes: List[Recipe]
    message: str
    used_query: Optional[str] = None
    attempts: int = 0
    debug: Optional[List[SearchAttempt]] = None


class SearchResponse(BaseModel):
    """Raw outcome of one search provider call.

    ``json`` holds the decoded body, or ``{"parseError": True, "raw": ...}`` when the
    body was not JSON.
    """

    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    status: int
    json_body: Annotated[dict[str, Any], Field(alias="json", default_factory=dict)]
    raw: str = ""

    @property
    def results(self) -> list[dict]:
        results = self.json_body.get("results")
        if not isinstance(results, list):
            return []
        return [result for result in results if isinstance(result, dict)]


# ============================================================================
# Receipt ingestion
# ============================================================================


class ReceiptParseResult(BaseModel):
    """Normalized output of a successful vision model parse."""

    items: List[str]
    model: str
    raw_model_text: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_are_normalized(cls, items: List[str]) -> List[str]:
        """Items must already be trimmed, lowercase, non-empty and distinct."""
        for item in items:
            if not item or item != item.strip().lower():
                raise ValueError(f"Receipt item is not normalized: {item!r}")
        if len(set(items)) != len(items):
            raise ValueError("Receipt items must be distinct")
        return items


class PantryItem(ApiModel):
    """A persisted pantry row."""

    id: int
    name: str
    quantity: str = "1"
    expiry: Optional[str] = None


class ReceiptRecord(ApiModel):
    """Stored summary of one parsed receipt."""

    id: str
    created_at: str
    items: List[str]
    strategy: str = "gemini"
    model: Optional[str] = None
    raw_text: Optional[str] = None


class ReceiptMeta(ApiModel):
    count: int
    schema_version: str = "1.0"
    strategy: str = "gemini"
    timing_ms: Optional[int] = None
    gemini_model: Optional[str] = None
    created_at: Optional[str] = None


class ReceiptParseResponse(ApiModel):
    """Response schema for POST /api/items/parse and GET /api/items/{receipt_id}."""

    receipt_id: str
    items: List[str]
    meta: ReceiptMeta
    raw_text: Optional[str] = None


class CompareRequest(ApiModel):
    manual: List[str] = Field(default_factory=list)
    llm: List[str] = Field(default_factory=list)


class ItemComparison(ApiModel):
    agreed: List[str]
    manual_only: List[str]
    llm_only: List[str]
    conflicts: List[str] = Field(default_factory=list)


class CompareMeta(ApiModel):
    manual_count: int
    llm_count: int
    agreed_count: int


class CompareResponse(ApiModel):
    comparison: ItemComparison
    meta: CompareMeta


class GeminiModelInfo(ApiModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    input_token_limit: Optional[int] = None
    output_token_limit: Optional[int] = None
    supported_actions: Optional[List[str]] = None


class GeminiModelList(ApiModel):
    count: int
    models: List[GeminiModelInfo]


# ============================================================================
# Health
# ============================================================================


class HealthResponse(ApiModel):
    status: str = "OK"
    message: str
    timestamp: str


class SearchHealthResponse(ApiModel):
    """Deployment check for the search key: presence and length only, never the value."""

    tavily_key_present: bool
    tavily_key_length: int
    search_depth: str
    max_results: int


class ItemsHealthResponse(ApiModel):
    status: str = "OK"
    message: str
    default_mode: str = "gemini"
    available_strategies: List[str] = Field(default_factory=lambda: ["gemini"])
    gemini_configured: bool
