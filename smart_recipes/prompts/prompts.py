"""Prompts and response schemas for the Gemini recipe calls.

Pure functions turning the user's ingredients and filters into a single
natural-language instruction. The wording is fixed: conditional clauses are
only appended when a filter differs from its "no constraint" sentinel.
"""

from typing import Iterable, Optional

from smart_recipes.models.catalog import ANY_COOKING_TIME, ANY_DIFFICULTY
from smart_recipes.models.models import Difficulty, GenerationRequest, Recipe

DEFAULT_RECIPE_COUNT = 3

IDENTIFY_INGREDIENTS_PROMPT = (
    "Identify the food ingredients in this image. List them as a simple, comma-separated string. "
    "For example: 'tomatoes, onions, garlic, chicken breast'."
)

CLOSING_CLAUSE = (
    " For each recipe, provide a detailed ingredients list, step-by-step instructions, "
    "and estimated nutritional information (calories, protein, carbs, fat). "
    "Also suggest a suitable number of servings."
)

# Response schema in the OpenAPI subset understood by Gemini's response_schema
RECIPE_LIST_SCHEMA: dict = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "STRING", "description": "A unique identifier for the recipe, like a UUID."},
            "recipeName": {"type": "STRING"},
            "description": {"type": "STRING"},
            "ingredients": {"type": "ARRAY", "items": {"type": "STRING"}},
            "instructions": {"type": "ARRAY", "items": {"type": "STRING"}},
            "cookingTime": {"type": "STRING"},
            "difficulty": {"type": "STRING", "enum": [d.value for d in Difficulty]},
            "servings": {"type": "INTEGER"},
            "nutritionalInfo": {
                "type": "OBJECT",
                "properties": {
                    "calories": {"type": "STRING"},
                    "protein": {"type": "STRING"},
                    "carbs": {"type": "STRING"},
                    "fat": {"type": "STRING"},
                },
                "required": ["calories", "protein", "carbs", "fat"],
            },
        },
        "required": [
            "id",
            "recipeName",
            "description",
            "ingredients",
            "instructions",
            "cookingTime",
            "difficulty",
            "servings",
            "nutritionalInfo",
        ],
    },
}


def _filter_clauses(dietary_preferences: Iterable[str], cooking_time: str, difficulty: str) -> str:
    """Build the optional dietary, time and difficulty sentences."""
    clauses = ""

    preferences = list(dict.fromkeys(dietary_preferences))
    if preferences:
        clauses += f" The recipes must be suitable for the following dietary needs: {', '.join(preferences)}."
    if cooking_time != ANY_COOKING_TIME:
        clauses += f" The cooking time should be {cooking_time.replace('-', ' ')}."
    if difficulty != ANY_DIFFICULTY:
        clauses += f" The difficulty level should be {difficulty}."

    return clauses


def build_recipe_prompt(
    ingredients: str,
    dietary_preferences: Iterable[str] = (),
    cooking_time: str = ANY_COOKING_TIME,
    difficulty: str = ANY_DIFFICULTY,
    recipe_count: int = DEFAULT_RECIPE_COUNT,
) -> str:
    """Generate the instruction for a fresh batch of recipes.

    Args:
        ingredients: Raw ingredient text, inserted verbatim. Must not be blank.
        dietary_preferences: Dietary preference ids; duplicates are dropped.
        cooking_time: Cooking-time bucket id, or "any".
        difficulty: Difficulty value, or "Any".
        recipe_count: Number of recipes to ask for.

    Returns:
        str: Prompt text for the recipe model.
    """
    prompt = f"Generate {recipe_count} diverse recipes based on the following ingredients: {ingredients}."
    prompt += _filter_clauses(dietary_preferences, cooking_time, difficulty)
    prompt += CLOSING_CLAUSE
    return prompt


def build_suggestion_prompt(
    liked_recipes: Iterable[Recipe],
    ingredients: str,
    dietary_preferences: Iterable[str] = (),
    cooking_time: str = ANY_COOKING_TIME,
    difficulty: str = ANY_DIFFICULTY,
    recipe_count: int = DEFAULT_RECIPE_COUNT,
) -> str:
    """Generate the instruction for personalized suggestions.

    Lists each liked recipe (name and description) and asks for new, distinct
    recipes the user might also enjoy, under the same filters.

    Args:
        liked_recipes: Recipes the user favorited or rated 4+.
        ingredients: Raw ingredient text of the current session.
        dietary_preferences: Dietary preference ids; duplicates are dropped.
        cooking_time: Cooking-time bucket id, or "any".
        difficulty: Difficulty value, or "Any".
        recipe_count: Number of recipes to ask for.

    Returns:
        str: Prompt text for the recipe model.
    """
    prompt = "Based on the user's preference for the following recipes:\n"
    for recipe in liked_recipes:
        prompt += f"- {recipe.recipe_name}: {recipe.description}\n"

    prompt += (
        f"\nPlease generate {recipe_count} new and distinct recipes that they might also enjoy. "
        f"The new recipes should be based on the following available ingredients: {ingredients}."
    )
    prompt += _filter_clauses(dietary_preferences, cooking_time, difficulty)
    prompt += CLOSING_CLAUSE
    return prompt


def build_request_prompt(
    request: GenerationRequest,
    liked_recipes: Optional[list[Recipe]] = None,
    recipe_count: int = DEFAULT_RECIPE_COUNT,
) -> str:
    """Apply the matching builder to a GenerationRequest.

    A suggestion prompt is built when liked recipes are given, a fresh recipe
    prompt otherwise.
    """
    if liked_recipes:
        return build_suggestion_prompt(
            liked_recipes,
            request.ingredients,
            request.dietary_preferences,
            request.cooking_time,
            request.difficulty,
            recipe_count=recipe_count,
        )
    return build_recipe_prompt(
        request.ingredients,
        request.dietary_preferences,
        request.cooking_time,
        request.difficulty,
        recipe_count=recipe_count,
    )
