"""Interpretation of raw model output into recipes.

Recipe calls ask Gemini for JSON matching RECIPE_LIST_SCHEMA, but the text that
comes back is not always clean. Parsing is attempted in two stages:

1. Strict parse of the trimmed text, validated against the Recipe model
2. Fallback: strip Markdown code fences (```json ... ```) and parse again

The fallback also runs on the text attached to a failed model call
(ModelCallError.response_text). A batch is all-or-nothing: if neither stage
yields a fully valid recipe list, GenerationFailed is raised and no partial
data is returned. There are no retries at this layer.
"""

import re

from pydantic import TypeAdapter, ValidationError

from smart_recipes.models.models import IngredientIdentification, Recipe
from smart_recipes.prompts.prompts import RECIPE_LIST_SCHEMA
from smart_recipes.services.model import ModelCallError, RecipeModel
from smart_recipes.utils.errors import GenerationFailed, ImageIdentificationFailed
from smart_recipes.utils.logger import logger

_FENCE_PATTERN = re.compile(r"```json|```")
_RECIPE_LIST = TypeAdapter(list[Recipe])


class RecipeParseError(ValueError):
    """Raised when text is not a valid recipe array."""


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers (with or without a json tag) and trim."""
    return _FENCE_PATTERN.sub("", text).strip()


def parse_recipes(text: str) -> list[Recipe]:
    """Strictly parse text as a JSON recipe array.

    Args:
        text: Raw model output.

    Returns:
        Parsed recipes, in model order.

    Raises:
        RecipeParseError: If the text is not JSON, does not match the Recipe
            schema, or repeats a recipe id.
    """
    cleaned = text.strip()
    if not cleaned:
        raise RecipeParseError("Empty response")

    try:
        recipes = _RECIPE_LIST.validate_json(cleaned)
    except ValidationError as e:
        raise RecipeParseError(f"Response does not match recipe schema: {e.error_count()} error(s)") from e

    ids = [recipe.id for recipe in recipes]
    if len(set(ids)) != len(ids):
        raise RecipeParseError(f"Duplicate recipe ids in response: {ids}")

    return recipes


def interpret_recipe_response(text: str) -> list[Recipe]:
    """Parse model text into recipes, falling back to fence stripping.

    Raises:
        GenerationFailed: If neither the raw nor the fence-stripped text parses.
            The first parse error is chained as the cause.
    """
    try:
        return parse_recipes(text)
    except RecipeParseError as e:
        logger.debug(f"Strict recipe parse failed, retrying without code fences: {e}")
        try:
            return parse_recipes(strip_code_fences(text))
        except RecipeParseError as fallback_error:
            logger.error(f"Failed to parse fallback JSON: {fallback_error}")
            raise GenerationFailed() from e


def recover_from_model_error(error: ModelCallError) -> list[Recipe]:
    """Try to salvage recipes from the text attached to a failed model call.

    Raises:
        GenerationFailed: If the error carries no text or the text does not
            parse. The model error is chained as the cause.
    """
    payload = strip_code_fences(error.response_text or "")
    if not payload:
        raise GenerationFailed() from error

    try:
        recipes = parse_recipes(payload)
    except RecipeParseError as parse_error:
        logger.error(f"Failed to parse fallback JSON from model error: {parse_error}")
        raise GenerationFailed() from error

    logger.info(f"Recovered {len(recipes)} recipes from a failed model call")
    return recipes


async def request_recipes(model: RecipeModel, prompt: str) -> list[Recipe]:
    """Call the model for a recipe array and interpret the answer.

    Args:
        model: Any RecipeModel implementation.
        prompt: Prompt built by the prompt builder.

    Returns:
        Fully validated recipes.

    Raises:
        GenerationFailed: On model failure without recoverable text, or on
            unparseable output.
    """
    try:
        text = await model.complete(prompt, RECIPE_LIST_SCHEMA)
    except ModelCallError as e:
        logger.error(f"Error generating recipes: {e}")
        return recover_from_model_error(e)

    return interpret_recipe_response(text)


def interpret_ingredient_text(text: str) -> str:
    """Validate the plain-text answer of the image identification call.

    No JSON is expected: the comma-separated list is kept as free text for
    the user to review and edit. Only non-blankness is enforced.

    Raises:
        ImageIdentificationFailed: If the answer is not a non-blank string.
    """
    try:
        return IngredientIdentification(ingredients=text).ingredients
    except ValidationError as e:
        raise ImageIdentificationFailed() from e


def describe_cause(error: BaseException) -> str:
    """Render an error chain for logs, e.g. 'GenerationFailed <- RecipeParseError <- ValidationError'."""
    names = []
    current: BaseException | None = error
    while current is not None:
        names.append(type(current).__name__)
        current = current.__cause__
    return " <- ".join(names)
