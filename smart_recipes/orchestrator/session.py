"""Generation orchestrator and session state.

RecipeSession holds everything a user session shows: the active result list,
the current view, the cycle state with its loading message, the last error,
and the preference store (favorites, ratings, wishlist). It is only mutated
through GenerationOrchestrator.

Cycle state machine:

    IDLE -> IDENTIFYING_IMAGE (optional) -> GENERATING_RECIPES -> IDLE
    IDLE -> GENERATING_SUGGESTIONS -> IDLE

Every failure is converted at this boundary into exactly one user-facing
error kind (see smart_recipes.utils.errors) and stored on the session; the
loading message is cleared on every exit path. Only one cycle runs at a time:
a cycle triggered while another is in flight is rejected with CycleInProgress,
which the running cycle replaces with its own outcome when it finishes.
"""

import asyncio
from contextlib import contextmanager
from enum import Enum
from typing import Iterable, Optional

from pydantic import ValidationError

from smart_recipes.models.models import GenerationRequest, Recipe, UserRecipePreference
from smart_recipes.prompts.prompts import build_request_prompt
from smart_recipes.services.interpreter import describe_cause, interpret_ingredient_text, request_recipes
from smart_recipes.services.model import RecipeModel
from smart_recipes.storage.preferences import PreferenceStore
from smart_recipes.utils.config import config
from smart_recipes.utils.errors import (
    CycleInProgress,
    GenerationFailed,
    ImageIdentificationFailed,
    RecipeGeneratorError,
    ValidationFailed,
)
from smart_recipes.utils.logger import logger

NO_LIKED_RECIPES_MESSAGE = "Please rate (4+ stars) or favorite at least one recipe to get personalized suggestions."
SUGGESTIONS_FAILED_MESSAGE = "Sorry, we couldn't get suggestions right now. Please try again later."


class CycleState(str, Enum):
    IDLE = "idle"
    IDENTIFYING_IMAGE = "identifying_image"
    GENERATING_RECIPES = "generating_recipes"
    GENERATING_SUGGESTIONS = "generating_suggestions"


class ResultView(str, Enum):
    ALL = "all"
    WISHLIST = "wishlist"


LOADING_MESSAGES = {
    CycleState.IDENTIFYING_IMAGE: "Analyzing ingredients from image...",
    CycleState.GENERATING_RECIPES: "Generating creative recipes for you...",
    CycleState.GENERATING_SUGGESTIONS: "Finding new recipes you'll love...",
}


def merge_recipes(existing: Iterable[Recipe], incoming: Iterable[Recipe]) -> list[Recipe]:
    """Append incoming recipes whose id is not already present.

    The result behaves as a set keyed by id while keeping insertion order.
    """
    merged = list(existing)
    seen = {recipe.id for recipe in merged}
    for recipe in incoming:
        if recipe.id not in seen:
            merged.append(recipe)
            seen.add(recipe.id)
    return merged


class RecipeSession:
    """State of one user session."""

    def __init__(self, store: PreferenceStore) -> None:
        self.store = store
        self.recipes: list[Recipe] = []
        self.ingredients_text: str = ""
        self.last_request: Optional[GenerationRequest] = None
        self.view: ResultView = ResultView.ALL
        self.state: CycleState = CycleState.IDLE
        self.loading_message: str = ""
        self.error: Optional[RecipeGeneratorError] = None

    @property
    def is_loading(self) -> bool:
        return self.state is not CycleState.IDLE

    @property
    def error_message(self) -> Optional[str]:
        return self.error.user_message if self.error else None


class GenerationOrchestrator:
    """Drives generation and suggestion cycles against a RecipeModel."""

    def __init__(self, model: RecipeModel, store: PreferenceStore, recipe_count: Optional[int] = None) -> None:
        """Initialize the orchestrator.

        Args:
            model: Backend used for ingredient identification and recipe calls.
            store: Loaded preference store backing favorites and the wishlist.
            recipe_count: Recipes requested per cycle. Defaults to RECIPE_COUNT.
        """
        self.model = model
        self.session = RecipeSession(store)
        self.recipe_count = recipe_count or config.RECIPE_COUNT
        self._cycle_lock = asyncio.Lock()

    @contextmanager
    def _step(self, state: CycleState):
        """Set the cycle state and loading message, clearing both on exit."""
        self.session.state = state
        self.session.loading_message = LOADING_MESSAGES[state]
        logger.info(self.session.loading_message, extra={"cycle": state.value})
        try:
            yield
        finally:
            self.session.state = CycleState.IDLE
            self.session.loading_message = ""

    def _fail(self, error: RecipeGeneratorError) -> None:
        """Record a failure as the session's single user-facing error."""
        logger.warning(f"{error.user_message} ({describe_cause(error)})")
        self.session.error = error

    async def _identify(self, request: GenerationRequest) -> str:
        with self._step(CycleState.IDENTIFYING_IMAGE):
            try:
                text = await self.model.identify_ingredients(request.image, request.image_mime_type)
            except Exception as e:
                raise ImageIdentificationFailed() from e
            ingredients = interpret_ingredient_text(text)

        logger.info(f"Identified ingredients: {ingredients}", extra={"cycle": CycleState.IDENTIFYING_IMAGE.value})
        return ingredients

    async def _request(self, state: CycleState, prompt: str, failure_message: Optional[str] = None) -> list[Recipe]:
        with self._step(state):
            try:
                return await request_recipes(self.model, prompt)
            except GenerationFailed as e:
                if failure_message is None:
                    raise
                raise GenerationFailed(failure_message) from e
            except Exception as e:
                raise GenerationFailed(failure_message) from e

    async def generate(self, request: GenerationRequest) -> Optional[list[Recipe]]:
        """Run a primary generation cycle.

        Clears the previous error and results, identifies ingredients from
        the photo when one is attached, validates the ingredient text, then
        replaces the active list with freshly generated recipes.

        Returns:
            The new active list, or None on failure (see session.error).
        """
        if self._cycle_lock.locked():
            self._fail(CycleInProgress())
            return None

        async with self._cycle_lock:
            session = self.session
            session.error = None
            session.recipes = []
            session.view = ResultView.ALL

            try:
                ingredients = request.ingredients
                if request.has_image:
                    ingredients = await self._identify(request)
                session.ingredients_text = ingredients

                if not ingredients.strip():
                    raise ValidationFailed()

                snapshot = request.model_copy(update={"ingredients": ingredients, "image": None})
                session.last_request = snapshot
                prompt = build_request_prompt(snapshot, recipe_count=self.recipe_count)
                recipes = await self._request(CycleState.GENERATING_RECIPES, prompt)
            except RecipeGeneratorError as e:
                self._fail(e)
                return None

            # A trigger rejected while this cycle ran may have left CycleInProgress behind
            session.error = None
            session.recipes = list(recipes)
            logger.info(f"Generated {len(recipes)} recipes", extra={"cycle": CycleState.GENERATING_RECIPES.value})
            return list(session.recipes)

    def liked_recipes(self) -> list[Recipe]:
        """Active recipes the user favorited or rated 4+."""
        return [recipe for recipe in self.session.recipes if self.session.store.is_liked(recipe.id)]

    async def suggest(self) -> Optional[list[Recipe]]:
        """Run a suggestion cycle seeded by the liked active recipes.

        New recipes are merged into the active list; ids already present are
        skipped. Without any liked recipe no model call is made.

        Returns:
            The merged active list, or None on failure (see session.error).
        """
        if self._cycle_lock.locked():
            self._fail(CycleInProgress())
            return None

        async with self._cycle_lock:
            session = self.session
            liked = self.liked_recipes()
            if not liked or session.last_request is None:
                self._fail(ValidationFailed(NO_LIKED_RECIPES_MESSAGE))
                return None

            session.error = None
            prompt = build_request_prompt(session.last_request, liked, recipe_count=self.recipe_count)
            try:
                suggested = await self._request(CycleState.GENERATING_SUGGESTIONS, prompt, SUGGESTIONS_FAILED_MESSAGE)
            except RecipeGeneratorError as e:
                self._fail(e)
                return None

            session.error = None
            before = len(session.recipes)
            session.recipes = merge_recipes(session.recipes, suggested)
            session.view = ResultView.ALL
            logger.info(
                f"Added {len(session.recipes) - before} of {len(suggested)} suggested recipes",
                extra={"cycle": CycleState.GENERATING_SUGGESTIONS.value},
            )
            return list(session.recipes)

    def toggle_favorite(self, recipe: Recipe) -> bool:
        """Flip a recipe's favorite flag, syncing the wishlist. Returns the new state."""
        return self.session.store.toggle_favorite(recipe)

    def set_rating(self, recipe_id: str, rating: int) -> Optional[UserRecipePreference]:
        """Rate a recipe 1-5. Out-of-range ratings are reported as ValidationFailed."""
        try:
            try:
                return self.session.store.set_rating(recipe_id, rating)
            except ValidationError as e:
                raise ValidationFailed("Ratings must be between 1 and 5 stars.") from e
        except ValidationFailed as failure:
            self._fail(failure)
            return None

    def preference_for(self, recipe_id: str) -> UserRecipePreference:
        return self.session.store.get(recipe_id)

    def show(self, view: ResultView) -> list[Recipe]:
        """Switch between all results and the wishlist."""
        self.session.view = ResultView(view)
        return self.displayed_recipes()

    def displayed_recipes(self) -> list[Recipe]:
        if self.session.view is ResultView.WISHLIST:
            return self.session.store.wishlist
        return list(self.session.recipes)
