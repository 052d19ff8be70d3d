"""Local recipe catalog served when every search query fails."""

from typing import Sequence

from pantry_service.models.models import Recipe

CATALOG: tuple[Recipe, ...] = (
    Recipe(
        title="Chicken and Rice Bowl",
        url="https://example.com/recipe1",
        image="https://images.unsplash.com/photo-1565299624946-b28f40a0ca4b?w=400&h=300&fit=crop",
        source="Food Network",
        description="A delicious one-pot meal with chicken and rice",
    ),
    Recipe(
        title="Tomato Pasta with Garlic",
        url="https://example.com/recipe2",
        image="https://images.unsplash.com/photo-1621996346565-e3dbc353d2e5?w=400&h=300&fit=crop",
        source="AllRecipes",
        description="Simple pasta dish with fresh tomatoes and garlic",
    ),
    Recipe(
        title="Garlic Chicken Stir-Fry",
        url="https://example.com/recipe3",
        image="https://images.unsplash.com/photo-1603133872878-684f208fb84b?w=400&h=300&fit=crop",
        source="Serious Eats",
        description="Quick and healthy chicken stir-fry with garlic",
    ),
    Recipe(
        title="Cheesy Rice Casserole",
        url="https://example.com/recipe4",
        image="https://images.unsplash.com/photo-1574323347407-f5e1ad6d020b?w=400&h=300&fit=crop",
        source="BBC Good Food",
        description="Comforting rice casserole with cheese",
    ),
    Recipe(
        title="Egg Fried Rice",
        url="https://example.com/recipe5",
        image="https://images.unsplash.com/photo-1512058564366-18510be2db19?w=400&h=300&fit=crop",
        source="Simply Recipes",
        description="Leftover rice tossed with scrambled egg, scallions and soy sauce",
    ),
    Recipe(
        title="Salmon Spinach Salad",
        url="https://example.com/recipe6",
        image="https://images.unsplash.com/photo-1546069901-ba9599a7e63c?w=400&h=300&fit=crop",
        source="Epicurious",
        description="Flaked salmon over baby spinach with a lemon vinaigrette",
    ),
)


def _matches(title: str, ingredient: str) -> bool:
    first_word = title.split(" ")[0]
    return ingredient in title or first_word in ingredient


def generate_mock_recipes(ingredients: Sequence[str], limit: int = 3) -> list[Recipe]:
    """Catalog recipes whose title relates to any ingredient.

    A recipe matches when its title contains an ingredient, or an ingredient
    contains the title's first word ("chicken breast" matches "Chicken and Rice
    Bowl"). With no match at all, the first ``limit`` catalog entries are
    returned so the caller always has something to show.
    """
    names = [name.lower() for name in ingredients]
    matched = [
        recipe
        for recipe in CATALOG
        if any(_matches(recipe.title.lower(), name) for name in names)
    ]
    return (matched or list(CATALOG))[:limit]
