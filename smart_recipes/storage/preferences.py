"""Persistence of favorites, ratings and the wishlist.

The store keeps two JSON documents in a key-value storage:

- "userRecipePreferences": recipe id -> {"favorite": bool, "rating"?: int}
- "wishlistRecipes": ordered list of full recipe snapshots

Both are read once by load() and rewritten wholesale after every mutation.
The storage backend is injected, so tests run against InMemoryStorage.
"""

import json
from pathlib import Path
from typing import Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from smart_recipes.models.models import Recipe, UserRecipePreference
from smart_recipes.utils.errors import StorageReadFailed
from smart_recipes.utils.logger import logger

PREFERENCES_KEY = "userRecipePreferences"
WISHLIST_KEY = "wishlistRecipes"

_PREFERENCES = TypeAdapter(dict[str, UserRecipePreference])
_WISHLIST = TypeAdapter(list[Recipe])


class KeyValueStorage(Protocol):
    """Durable string storage addressed by key."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, text: str) -> None:
        ...


class InMemoryStorage:
    """Dict-backed storage, for tests and stateless runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, text: str) -> None:
        self.data[key] = text


class JsonFileStorage:
    """One UTF-8 JSON file per key inside a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written document
        tmp_path = self._path(key).with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(self._path(key))


class PreferenceStore:
    """Owner of per-recipe preferences and the wishlist."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self.storage = storage
        self._preferences: dict[str, UserRecipePreference] = {}
        self._wishlist: list[Recipe] = []

    def load(self) -> None:
        """Read saved data once. Malformed documents are logged and ignored."""
        try:
            self._preferences = self._read(PREFERENCES_KEY, _PREFERENCES) or {}
        except StorageReadFailed as e:
            logger.error(f"Failed to parse data from storage: {e}")
            self._preferences = {}

        try:
            self._wishlist = self._read(WISHLIST_KEY, _WISHLIST) or []
        except StorageReadFailed as e:
            logger.error(f"Failed to parse data from storage: {e}")
            self._wishlist = []

        logger.debug(
            f"Loaded {len(self._preferences)} recipe preferences and {len(self._wishlist)} wishlist recipes"
        )

    def _read(self, key: str, adapter: TypeAdapter):
        try:
            text = self.storage.load(key)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadFailed(f"Saved data under '{key}' could not be read: {e}") from e
        if text is None:
            return None

        try:
            return adapter.validate_json(text)
        except ValidationError as e:
            raise StorageReadFailed(f"Saved data under '{key}' is malformed") from e

    def _persist(self) -> None:
        preferences = {
            recipe_id: preference.model_dump(mode="json", exclude_none=True)
            for recipe_id, preference in self._preferences.items()
        }
        self.storage.save(PREFERENCES_KEY, json.dumps(preferences))
        self.storage.save(WISHLIST_KEY, json.dumps([recipe.to_json_dict() for recipe in self._wishlist]))

    @property
    def preferences(self) -> dict[str, UserRecipePreference]:
        return dict(self._preferences)

    @property
    def wishlist(self) -> list[Recipe]:
        return list(self._wishlist)

    def get(self, recipe_id: str) -> UserRecipePreference:
        """Return the saved preference, or the default {favorite: False}."""
        return self._preferences.get(recipe_id) or UserRecipePreference()

    def set(self, recipe_id: str, **update) -> UserRecipePreference:
        """Shallow-merge the given fields over the current preference and persist.

        Raises:
            pydantic.ValidationError: If a field value is invalid (e.g. rating 6).
        """
        merged = UserRecipePreference.model_validate({**self.get(recipe_id).model_dump(), **update})
        self._preferences[recipe_id] = merged
        self._persist()
        return merged

    def set_rating(self, recipe_id: str, rating: int) -> UserRecipePreference:
        return self.set(recipe_id, rating=rating)

    def is_liked(self, recipe_id: str) -> bool:
        return self.get(recipe_id).is_liked

    def toggle_favorite(self, recipe: Recipe) -> bool:
        """Flip the favorite flag and sync the wishlist.

        Becoming a favorite appends a snapshot of the recipe to the wishlist,
        replacing any older entry with the same id; losing it removes the entry.

        Returns:
            bool: The new favorite state.
        """
        current = self.get(recipe.id)
        is_favorite = not current.favorite
        self._preferences[recipe.id] = current.model_copy(update={"favorite": is_favorite})

        self._wishlist = [r for r in self._wishlist if r.id != recipe.id]
        if is_favorite:
            self._wishlist.append(recipe.model_copy(deep=True))

        self._persist()
        logger.info(
            f"Recipe {'added to' if is_favorite else 'removed from'} wishlist: {recipe.recipe_name}",
            extra={"recipe_id": recipe.id},
        )
        return is_favorite
