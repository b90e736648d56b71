"""Unit tests for the terminal front end."""

from io import StringIO

import pytest
import pytest_asyncio
from rich.console import Console

from smart_recipes import cli
from smart_recipes.cli import RecipeShell, build_parser, render_recipe_markdown, render_recipe_table
from smart_recipes.models.models import GenerationRequest, UserRecipePreference
from smart_recipes.orchestrator.session import NO_LIKED_RECIPES_MESSAGE, GenerationOrchestrator, ResultView


@pytest.fixture
def console(monkeypatch):
    """Wide recording console so assertions never depend on line wrapping."""
    recording = Console(width=200, record=True, file=StringIO())
    monkeypatch.setattr(cli, "console", recording)
    return recording


@pytest_asyncio.fixture
async def shell(fake_model, store):
    orchestrator = GenerationOrchestrator(fake_model, store, recipe_count=3)
    await orchestrator.generate(GenerationRequest(ingredients="eggs, spinach"))
    return RecipeShell(orchestrator)


class TestBuildParser:
    """Test command-line parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["chicken,", "rice"])

        assert args.ingredients == ["chicken,", "rice"]
        assert args.image is None
        assert args.diet == []
        assert args.time == "any"
        assert args.difficulty == "Any"
        assert args.once is False

    def test_filters(self):
        args = build_parser().parse_args(
            ["--diet", "vegan", "--diet", "low-carb", "--time", "under-30", "--difficulty", "Easy", "tofu"]
        )

        assert args.diet == ["vegan", "low-carb"]
        assert args.time == "under-30"
        assert args.difficulty == "Easy"

    def test_unknown_diet_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--diet", "carnivore", "steak"])

    def test_main_requires_ingredients_or_image(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2


class TestRendering:
    """Test recipe table and detail rendering."""

    def test_table_rows(self, make_recipe):
        recipes = [make_recipe("r1", "Soup"), make_recipe("r2", "Stew")]
        preferences = {"r2": UserRecipePreference(favorite=True, rating=4)}

        table = render_recipe_table(recipes, preferences, "Recipe Suggestions")

        assert table.row_count == 2
        assert table.title == "Recipe Suggestions"
        assert list(table.columns[1].cells) == ["Soup", "Stew"]
        assert list(table.columns[6].cells) == ["", "♥"]
        assert list(table.columns[7].cells) == ["", "★★★★"]

    def test_markdown_detail(self, make_recipe):
        text = render_recipe_markdown(make_recipe("r1", "Soup"), UserRecipePreference(rating=5))

        assert text.startswith("# Soup")
        assert "## Ingredients\n- 2 chicken breasts" in text
        assert "1. Season the chicken." in text
        assert "**Nutrition (est.):** 450 kcal" in text
        assert "Favorite: no · Rating: 5" in text


class TestRecipeShell:
    """Test the interactive commands."""

    @pytest.mark.asyncio
    async def test_quit(self, shell):
        assert await shell.handle("quit") is False
        assert await shell.handle("  ") is True

    @pytest.mark.asyncio
    async def test_fav_toggles_wishlist(self, shell, console):
        await shell.handle("fav 2")

        assert "♥ Added to wishlist: Recipe r2" in console.export_text()
        assert [r.id for r in shell.session.store.wishlist] == ["r2"]

        await shell.handle("fav 2")
        assert shell.session.store.wishlist == []

    @pytest.mark.asyncio
    async def test_rate(self, shell, console):
        await shell.handle("rate 1 5")

        assert shell.orchestrator.preference_for("r1").rating == 5
        assert "★★★★★ Recipe r1" in console.export_text()

    @pytest.mark.asyncio
    async def test_rate_out_of_range(self, shell, console):
        await shell.handle("rate 1 9")
        assert "Ratings must be between 1 and 5 stars." in console.export_text()

    @pytest.mark.asyncio
    async def test_rate_not_a_number(self, shell, console):
        await shell.handle("rate 1 five")
        assert "Rating must be a number from 1 to 5" in console.export_text()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("number", ["0", "7", "x"])
    async def test_unknown_recipe_number(self, shell, console, number):
        await shell.handle(f"show {number}")
        assert f"No recipe #{number} in this view" in console.export_text()

    @pytest.mark.asyncio
    async def test_show(self, shell, console):
        await shell.handle("show 3")
        assert "Recipe r3" in console.export_text()

    @pytest.mark.asyncio
    async def test_empty_wishlist(self, shell, console):
        await shell.handle("wishlist")

        assert shell.session.view is ResultView.WISHLIST
        assert "Your wishlist is empty." in console.export_text()

    @pytest.mark.asyncio
    async def test_suggest_without_liked_recipes(self, shell, console, fake_model):
        fake_model.complete.reset_mock()

        await shell.handle("suggest")

        assert NO_LIKED_RECIPES_MESSAGE in console.export_text()
        assert fake_model.complete.await_count == 0

    @pytest.mark.asyncio
    async def test_suggest_merges(self, shell, console, fake_model, recipes_json):
        await shell.handle("rate 1 4")
        fake_model.complete.return_value = recipes_json("s1")

        await shell.handle("suggest")

        assert [r.id for r in shell.session.recipes] == ["r1", "r2", "r3", "s1"]
        assert "Recipe s1" in console.export_text()

    @pytest.mark.asyncio
    async def test_unknown_command_prints_help(self, shell, console):
        await shell.handle("dance")
        assert "Commands:" in console.export_text()
