"""Data models and schemas for the recipe generator.

Defines Pydantic models for model-output validation and domain objects.
All models use Pydantic v2. Recipes keep the camelCase field names of the
model's JSON response (and of the saved wishlist) as aliases, while Python
code uses snake_case attributes.
"""

from enum import Enum
from typing import List, Optional, Annotated

from pydantic import BaseModel, Field, field_validator, ConfigDict


class Difficulty(str, Enum):
    """Recipe difficulty levels accepted in model output."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class NutritionalInfo(BaseModel):
    """Estimated nutrition per serving, free-form strings such as "450 kcal"."""

    model_config = ConfigDict(frozen=True)

    calories: str
    protein: str
    carbs: str
    fat: str


class Recipe(BaseModel):
    """Domain model for a generated recipe.

    Created only by parsing model output and immutable afterwards. Identity is
    the ``id`` field, which must be non-empty.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    id: Annotated[str, Field(min_length=1, description="Unique identifier within a result set")]
    recipe_name: Annotated[str, Field(alias="recipeName", description="Recipe title")]
    description: Annotated[str, Field(description="Short summary of the dish")]
    ingredients: Annotated[List[str], Field(description="Ingredients with quantities, in order")]
    instructions: Annotated[List[str], Field(description="Step-by-step cooking instructions")]
    cooking_time: Annotated[str, Field(alias="cookingTime", description="Cooking time label, e.g. '25 minutes'")]
    difficulty: Difficulty
    servings: Annotated[int, Field(gt=0, description="Suggested number of servings")]
    nutritional_info: Annotated[NutritionalInfo, Field(alias="nutritionalInfo")]

    def to_json_dict(self) -> dict:
        """Serialize with the camelCase wire names used by storage and the model."""
        return self.model_dump(mode="json", by_alias=True)


class UserRecipePreference(BaseModel):
    """Per-recipe favorite flag and optional 1-5 star rating."""

    favorite: bool = False
    rating: Annotated[Optional[int], Field(None, ge=1, le=5)]

    @property
    def is_liked(self) -> bool:
        """Liked recipes seed personalized suggestions: favorited or rated 4+."""
        return self.favorite or (self.rating or 0) >= 4


class GenerationRequest(BaseModel):
    """Ephemeral input bundle for one generation cycle. Not persisted."""

    model_config = ConfigDict(str_strip_whitespace=True)

    ingredients: Annotated[str, Field("", max_length=2000, description="Typed ingredient list")]
    image: Annotated[Optional[bytes], Field(None, description="Photo of ingredients (raw bytes)")]
    image_mime_type: Annotated[str, Field("image/jpeg", description="MIME type of the photo")]
    dietary_preferences: Annotated[List[str], Field(default_factory=list)]
    cooking_time: str = "any"
    difficulty: str = "Any"

    @field_validator("dietary_preferences", mode="after")
    @classmethod
    def dedupe_preferences(cls, preferences: List[str]) -> List[str]:
        """Remove duplicate preference ids, preserving order, and reject unknown ids."""
        from smart_recipes.models.catalog import DIETARY_PREFERENCE_IDS

        unique = list(dict.fromkeys(preferences))
        unknown = [p for p in unique if p not in DIETARY_PREFERENCE_IDS]
        if unknown:
            raise ValueError(f"Unknown dietary preference(s): {', '.join(unknown)}")
        return unique

    @field_validator("cooking_time", mode="after")
    @classmethod
    def validate_cooking_time(cls, cooking_time: str) -> str:
        """Cooking time must be one of the catalog buckets."""
        from smart_recipes.models.catalog import COOKING_TIME_IDS

        if cooking_time not in COOKING_TIME_IDS:
            raise ValueError(f"Unknown cooking time: {cooking_time}")
        return cooking_time

    @field_validator("difficulty", mode="after")
    @classmethod
    def validate_difficulty(cls, difficulty: str) -> str:
        """Difficulty must be a catalog value or the 'Any' sentinel."""
        from smart_recipes.models.catalog import DIFFICULTY_CHOICES

        if difficulty not in DIFFICULTY_CHOICES:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        return difficulty

    @property
    def has_image(self) -> bool:
        return bool(self.image)


class IngredientIdentification(BaseModel):
    """Output schema for the image identification call.

    A single comma-separated string of ingredient names. Treated as free
    text: only non-blankness is enforced.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    ingredients: Annotated[str, Field(min_length=1, description="Comma-separated ingredient names")]


class FilterOption(BaseModel):
    """One selectable entry of a static filter catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
