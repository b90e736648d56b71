"""Unit tests for Pydantic data models."""

import pytest
from pydantic import ValidationError

from smart_recipes.models.catalog import (
    COOKING_TIME_IDS,
    DIETARY_PREFERENCE_IDS,
    DIFFICULTY_CHOICES,
    DIETARY_PREFERENCES,
)
from smart_recipes.models.models import (
    Difficulty,
    GenerationRequest,
    IngredientIdentification,
    Recipe,
    UserRecipePreference,
)


class TestRecipe:
    """Test Recipe model."""

    def test_parses_camel_case_payload(self, recipe_payload):
        recipe = Recipe.model_validate(recipe_payload("r1", "Tomato Soup"))

        assert recipe.id == "r1"
        assert recipe.recipe_name == "Tomato Soup"
        assert recipe.cooking_time == "25 minutes"
        assert recipe.difficulty is Difficulty.EASY
        assert recipe.servings == 2
        assert recipe.nutritional_info.protein == "40g"

    def test_round_trips_with_aliases(self, recipe_payload):
        payload = recipe_payload()
        assert Recipe.model_validate(payload).to_json_dict() == payload

    def test_is_immutable(self, make_recipe):
        recipe = make_recipe()
        with pytest.raises(ValidationError):
            recipe.recipe_name = "Renamed"

    def test_rejects_blank_id(self, recipe_payload):
        with pytest.raises(ValidationError):
            Recipe.model_validate(recipe_payload("   "))

    def test_blank_name_accepted(self, recipe_payload):
        """Only the id must be non-empty; a blank title does not reject the recipe."""
        assert Recipe.model_validate(recipe_payload("r1", "  ")).recipe_name == ""

    def test_rejects_missing_nutrition_field(self, recipe_payload):
        payload = recipe_payload()
        del payload["nutritionalInfo"]["fat"]

        with pytest.raises(ValidationError):
            Recipe.model_validate(payload)

    def test_rejects_zero_servings(self, recipe_payload):
        with pytest.raises(ValidationError):
            Recipe.model_validate(recipe_payload(servings=0))


class TestUserRecipePreference:
    """Test favorite/rating preference and the liked rule."""

    def test_defaults(self):
        preference = UserRecipePreference()
        assert preference.favorite is False
        assert preference.rating is None
        assert preference.is_liked is False

    @pytest.mark.parametrize(
        "favorite,rating,liked",
        [
            (True, None, True),
            (False, 4, True),
            (False, 5, True),
            (False, 3, False),
            (False, 1, False),
            (True, 1, True),
        ],
    )
    def test_is_liked(self, favorite, rating, liked):
        assert UserRecipePreference(favorite=favorite, rating=rating).is_liked is liked

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            UserRecipePreference(rating=rating)


class TestGenerationRequest:
    """Test GenerationRequest validation."""

    def test_defaults(self):
        request = GenerationRequest()

        assert request.ingredients == ""
        assert request.image is None
        assert request.has_image is False
        assert request.dietary_preferences == []
        assert request.cooking_time == "any"
        assert request.difficulty == "Any"

    def test_dedupes_preferences_in_order(self):
        request = GenerationRequest(dietary_preferences=["vegan", "low-carb", "vegan"])
        assert request.dietary_preferences == ["vegan", "low-carb"]

    def test_rejects_unknown_preference(self):
        with pytest.raises(ValidationError, match="Unknown dietary preference"):
            GenerationRequest(dietary_preferences=["carnivore"])

    def test_rejects_unknown_cooking_time(self):
        with pytest.raises(ValidationError, match="Unknown cooking time"):
            GenerationRequest(cooking_time="5-minutes")

    def test_rejects_unknown_difficulty(self):
        with pytest.raises(ValidationError, match="Unknown difficulty"):
            GenerationRequest(difficulty="Impossible")

    def test_has_image(self):
        assert GenerationRequest(image=b"\xff\xd8\xff").has_image is True


class TestIngredientIdentification:
    def test_strips_text(self):
        assert IngredientIdentification(ingredients=" eggs, ham ").ingredients == "eggs, ham"

    def test_rejects_blank(self):
        with pytest.raises(ValidationError):
            IngredientIdentification(ingredients="  ")


class TestCatalog:
    """Test the static filter catalogs."""

    def test_dietary_preferences(self):
        assert [p.id for p in DIETARY_PREFERENCES] == ["vegetarian", "vegan", "gluten-free", "dairy-free", "low-carb"]
        assert "vegan" in DIETARY_PREFERENCE_IDS

    def test_cooking_times_include_sentinel(self):
        assert COOKING_TIME_IDS == {"any", "under-30", "30-60", "over-60"}

    def test_difficulty_choices_include_sentinel(self):
        assert DIFFICULTY_CHOICES == {"Any", "Easy", "Medium", "Hard"}
