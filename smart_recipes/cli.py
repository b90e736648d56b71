#!/usr/bin/env python3
"""Terminal front end for the Smart Recipe Generator.

Runs one generation cycle from typed ingredients or a photo, prints the
recipes, then (unless --once) opens a small command loop to rate, favorite
and get personalized suggestions.

Usage:
    smart-recipes "chicken breast, broccoli, garlic"
    smart-recipes --diet vegan --diet gluten-free --time under-30 "tofu, rice"
    smart-recipes --image images/fridge.jpg --difficulty Easy
    smart-recipes --once --debug "eggs, spinach"   # print JSON and exit

Commands inside the loop:
    show N      full recipe N (as numbered in the current view)
    fav N       toggle favorite for recipe N
    rate N K    rate recipe N with K stars (1-5)
    suggest     personalized suggestions from liked recipes
    wishlist    show the wishlist
    all         show all generated recipes
    quit        exit
"""

import argparse
import asyncio
import sys
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.markdown import Markdown
from rich.prompt import Prompt
from rich.table import Table

from smart_recipes.models.catalog import (
    ANY_COOKING_TIME,
    ANY_DIFFICULTY,
    COOKING_TIME_IDS,
    DIETARY_PREFERENCE_IDS,
    DIFFICULTY_CHOICES,
)
from smart_recipes.models.models import GenerationRequest, Recipe, UserRecipePreference
from smart_recipes.orchestrator.session import GenerationOrchestrator, ResultView
from smart_recipes.services.images import prepare_image
from smart_recipes.services.model import GeminiRecipeModel
from smart_recipes.storage.preferences import InMemoryStorage, JsonFileStorage, PreferenceStore
from smart_recipes.utils.config import config
from smart_recipes.utils.errors import RecipeGeneratorError
from smart_recipes.utils.logger import logger

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-recipes",
        description="Discover delicious recipes from the ingredients you have.",
    )
    parser.add_argument("ingredients", nargs="*", help="Ingredients, e.g. chicken breast, broccoli, garlic")
    parser.add_argument("--image", help="Photo of your ingredients (file path, URL or data URL)")
    parser.add_argument("--diet", action="append", default=[], choices=sorted(DIETARY_PREFERENCE_IDS),
                        help="Dietary preference (repeatable)")
    parser.add_argument("--time", default=ANY_COOKING_TIME, choices=sorted(COOKING_TIME_IDS), help="Cooking time")
    parser.add_argument("--difficulty", default=ANY_DIFFICULTY, choices=sorted(DIFFICULTY_CHOICES),
                        help="Difficulty level")
    parser.add_argument("--once", action="store_true", help="Print the recipes and exit")
    parser.add_argument("--debug", action="store_true", help="Print recipes as JSON")
    parser.add_argument("--stateless", action="store_true", help="Do not read or save favorites and ratings")
    return parser


def render_recipe_table(recipes: list[Recipe], preferences: dict[str, UserRecipePreference], title: str) -> Table:
    """Summary table: one row per recipe card."""
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Recipe", style="bold green")
    table.add_column("Time")
    table.add_column("Difficulty")
    table.add_column("Serves", justify="right")
    table.add_column("Calories")
    table.add_column("♥", justify="center")
    table.add_column("Rating")

    for idx, recipe in enumerate(recipes, start=1):
        preference = preferences.get(recipe.id) or UserRecipePreference()
        table.add_row(
            str(idx),
            recipe.recipe_name,
            recipe.cooking_time,
            recipe.difficulty.value,
            str(recipe.servings),
            recipe.nutritional_info.calories,
            "♥" if preference.favorite else "",
            "★" * (preference.rating or 0),
        )
    return table


def render_recipe_markdown(recipe: Recipe, preference: UserRecipePreference) -> str:
    """Full recipe as Markdown, the terminal version of the detail modal."""
    nutrition = recipe.nutritional_info
    lines = [
        f"# {recipe.recipe_name}",
        "",
        recipe.description,
        "",
        f"**Time:** {recipe.cooking_time} · **Difficulty:** {recipe.difficulty.value} · **Serves:** {recipe.servings}",
        "",
        f"**Nutrition (est.):** {nutrition.calories} · protein {nutrition.protein} · "
        f"carbs {nutrition.carbs} · fat {nutrition.fat}",
        "",
        "## Ingredients",
        *[f"- {item}" for item in recipe.ingredients],
        "",
        "## Instructions",
        *[f"{step_no}. {step}" for step_no, step in enumerate(recipe.instructions, start=1)],
        "",
        f"Favorite: {'yes' if preference.favorite else 'no'} · Rating: {preference.rating or 'not rated'}",
    ]
    return "\n".join(lines)


class RecipeShell:
    """Interactive command loop over a GenerationOrchestrator."""

    def __init__(self, orchestrator: GenerationOrchestrator, debug: bool = False) -> None:
        self.orchestrator = orchestrator
        self.debug = debug

    @property
    def session(self):
        return self.orchestrator.session

    async def run_with_status(self, coro):
        """Await a cycle while mirroring the session's loading message in a spinner."""
        task = asyncio.create_task(coro)
        with console.status("Working...") as status:
            while not task.done():
                status.update(self.session.loading_message or "Working...")
                await asyncio.sleep(0.1)
        return task.result()

    def print_error(self) -> None:
        if self.session.error_message:
            console.print(f"[red]✗ {self.session.error_message}[/red]")

    def print_recipes(self) -> None:
        recipes = self.orchestrator.displayed_recipes()
        if self.session.view is ResultView.WISHLIST:
            title = "My Wishlist"
            empty = "Your wishlist is empty. Use 'fav N' on any recipe to add it here!"
        else:
            title = "Recipe Suggestions"
            empty = "No recipes yet. Provide ingredients to get started."

        if not recipes:
            console.print(f"[yellow]{empty}[/yellow]")
            return

        if self.debug:
            console.print_json(data=[recipe.to_json_dict() for recipe in recipes])
        console.print(render_recipe_table(recipes, self.session.store.preferences, title))

    def _pick(self, number: str) -> Optional[Recipe]:
        recipes = self.orchestrator.displayed_recipes()
        index = int(number) - 1 if number.isdigit() else -1
        if 0 <= index < len(recipes):
            return recipes[index]
        console.print(f"[red]✗ No recipe #{number} in this view[/red]")
        return None

    async def handle(self, command: str) -> bool:
        """Execute one command. Returns False when the loop should stop."""
        parts = command.split()
        if not parts:
            return True
        name, args = parts[0].lower(), parts[1:]

        if name in ("quit", "exit", "q"):
            return False
        if name == "all":
            self.orchestrator.show(ResultView.ALL)
            self.print_recipes()
        elif name == "wishlist":
            self.orchestrator.show(ResultView.WISHLIST)
            self.print_recipes()
        elif name == "show" and len(args) == 1:
            recipe = self._pick(args[0])
            if recipe:
                console.print(Markdown(render_recipe_markdown(recipe, self.orchestrator.preference_for(recipe.id))))
        elif name == "fav" and len(args) == 1:
            recipe = self._pick(args[0])
            if recipe:
                is_favorite = self.orchestrator.toggle_favorite(recipe)
                console.print(f"{'♥ Added to' if is_favorite else 'Removed from'} wishlist: {recipe.recipe_name}")
        elif name == "rate" and len(args) == 2:
            recipe = self._pick(args[0])
            if recipe:
                try:
                    rating = int(args[1])
                except ValueError:
                    console.print("[red]✗ Rating must be a number from 1 to 5[/red]")
                    return True
                if self.orchestrator.set_rating(recipe.id, rating) is not None:
                    console.print(f"{'★' * rating} {recipe.recipe_name}")
                else:
                    self.print_error()
        elif name == "suggest":
            result = await self.run_with_status(self.orchestrator.suggest())
            if result is None:
                self.print_error()
            else:
                self.print_recipes()
        else:
            console.print("[dim]Commands: show N · fav N · rate N K · suggest · wishlist · all · quit[/dim]")
        return True

    async def loop(self) -> None:
        while True:
            command = await asyncio.to_thread(Prompt.ask, "[bold]recipes[/bold]", default="quit")
            if not await self.handle(command):
                break


async def run(args: argparse.Namespace) -> int:
    """Build the request, run the first generation cycle and optionally the loop."""
    image, mime_type = None, "image/jpeg"
    if args.image:
        try:
            image, mime_type = await prepare_image(args.image)
        except RecipeGeneratorError as e:
            console.print(f"[red]✗ {e.user_message}[/red]")
            return 1

    try:
        request = GenerationRequest(
            ingredients=" ".join(args.ingredients),
            image=image,
            image_mime_type=mime_type,
            dietary_preferences=args.diet,
            cooking_time=args.time,
            difficulty=args.difficulty,
        )
    except ValidationError as e:
        console.print(f"[red]✗ Invalid request: {e.errors()[0]['msg']}[/red]")
        return 1

    storage = InMemoryStorage() if args.stateless else JsonFileStorage(config.STORAGE_DIR)
    store = PreferenceStore(storage)
    store.load()

    orchestrator = GenerationOrchestrator(GeminiRecipeModel(), store)
    shell = RecipeShell(orchestrator, debug=args.debug)

    recipes = await shell.run_with_status(orchestrator.generate(request))
    if image is not None and orchestrator.session.ingredients_text:
        console.print(f"[dim]Ingredients found in the photo: {orchestrator.session.ingredients_text}[/dim]")
    if recipes is None:
        shell.print_error()
        return 1

    shell.print_recipes()
    if not args.once:
        await shell.loop()
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if not args.ingredients and not args.image:
        build_parser().error("provide ingredients or --image")

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        sys.exit(0)
    except ValueError as e:
        # Raised by config validation, e.g. missing GEMINI_API_KEY
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
