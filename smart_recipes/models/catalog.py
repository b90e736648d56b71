"""Static filter catalogs offered to the user.

Read-only configuration: dietary preferences, cooking-time buckets and
difficulty values, plus the sentinels meaning "no constraint".
"""

from smart_recipes.models.models import Difficulty, FilterOption

ANY_COOKING_TIME = "any"
ANY_DIFFICULTY = "Any"

DIETARY_PREFERENCES: list[FilterOption] = [
    FilterOption(id="vegetarian", label="Vegetarian"),
    FilterOption(id="vegan", label="Vegan"),
    FilterOption(id="gluten-free", label="Gluten-Free"),
    FilterOption(id="dairy-free", label="Dairy-Free"),
    FilterOption(id="low-carb", label="Low-Carb"),
]

COOKING_TIMES: list[FilterOption] = [
    FilterOption(id=ANY_COOKING_TIME, label="Any Time"),
    FilterOption(id="under-30", label="Under 30 mins"),
    FilterOption(id="30-60", label="30-60 mins"),
    FilterOption(id="over-60", label="Over 60 mins"),
]

DIFFICULTIES: list[Difficulty] = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]

DIETARY_PREFERENCE_IDS = frozenset(p.id for p in DIETARY_PREFERENCES)
COOKING_TIME_IDS = frozenset(t.id for t in COOKING_TIMES)
DIFFICULTY_CHOICES = frozenset([ANY_DIFFICULTY, *(d.value for d in DIFFICULTIES)])
