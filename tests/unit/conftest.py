"""Shared fixtures for unit tests: recipe payloads, a fake model and an in-memory store."""

import json
from unittest.mock import AsyncMock, Mock

import pytest

from smart_recipes.models.models import Recipe
from smart_recipes.storage.preferences import InMemoryStorage, PreferenceStore


def recipe_payload(recipe_id: str = "r1", name: str = "Garlic Chicken", **overrides) -> dict:
    """One recipe in the camelCase shape the model returns."""
    payload = {
        "id": recipe_id,
        "recipeName": name,
        "description": f"A quick {name.lower()} dinner.",
        "ingredients": ["2 chicken breasts", "3 cloves garlic", "1 head broccoli"],
        "instructions": ["Season the chicken.", "Sear until golden.", "Add garlic and broccoli."],
        "cookingTime": "25 minutes",
        "difficulty": "Easy",
        "servings": 2,
        "nutritionalInfo": {"calories": "450 kcal", "protein": "40g", "carbs": "12g", "fat": "22g"},
    }
    payload.update(overrides)
    return payload


def make_recipe(recipe_id: str = "r1", name: str = "Garlic Chicken", **overrides) -> Recipe:
    return Recipe.model_validate(recipe_payload(recipe_id, name, **overrides))


def recipes_json(*recipe_ids: str) -> str:
    """JSON array text with one recipe per id, as the model would answer."""
    return json.dumps([recipe_payload(rid, f"Recipe {rid}") for rid in recipe_ids])


@pytest.fixture
def fake_model():
    """RecipeModel double with awaitable identify_ingredients and complete."""
    model = Mock()
    model.identify_ingredients = AsyncMock(return_value="tomatoes, onions, garlic")
    model.complete = AsyncMock(return_value=recipes_json("r1", "r2", "r3"))
    return model


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage):
    preference_store = PreferenceStore(storage)
    preference_store.load()
    return preference_store


@pytest.fixture(name="make_recipe")
def make_recipe_fixture():
    return make_recipe


@pytest.fixture(name="recipes_json")
def recipes_json_fixture():
    return recipes_json


@pytest.fixture(name="recipe_payload")
def recipe_payload_fixture():
    return recipe_payload
