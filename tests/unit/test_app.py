"""Unit tests for the query.py command-line runner.

Tests verify:
- Argument parsing for every command and flag
- Markdown rendering of provider recipes
- Commands run against a service wired with in-memory parts
"""

from unittest.mock import AsyncMock, patch

import pytest
from rich.console import Console

import query
from src.catalog.catalog import InMemoryRecipeCatalog
from src.models.models import CatalogRecipe, RecipeDTO, RecipeIngredient
from src.providers.chain import RecipeProviderChain
from src.providers.generated import TEMPLATE_NOTE, GeneratedRecipeProvider
from src.providers.quota import QuotaTracker
from src.service.service import ScanService
from src.sessions.store import IngredientSessionStore
from src.vision.normalizer import DetectionNormalizer


class NoopClassifier:
    name = "noop"

    async def classify(self, image_bytes, mode):
        return []


@pytest.fixture
def service():
    quota = QuotaTracker()
    catalog = InMemoryRecipeCatalog(
        [
            CatalogRecipe(
                id="1",
                title="Chicken Adobo",
                ingredients=[RecipeIngredient(name="Chicken"), RecipeIngredient(name="Soy Sauce", amount="1/2", unit="cup")],
                average_rating=4.8,
            )
        ]
    )
    return ScanService(
        normalizer=DetectionNormalizer(NoopClassifier()),
        sessions=IngredientSessionStore(),
        catalog=catalog,
        chain=RecipeProviderChain([GeneratedRecipeProvider()], quota),
        quota=quota,
    )


@pytest.fixture
def recorded_console(monkeypatch):
    console = Console(record=True, width=120)
    monkeypatch.setattr(query, "console", console)
    return console


class TestParseArgs:
    """Test argv handling."""

    def test_recipe_command(self):
        assert query.parse_args(["recipe", "Chicken", "Adobo"]) == (False, "recipe", {}, ["Chicken", "Adobo"])

    def test_debug_and_flags(self):
        parsed = query.parse_args(["--debug", "match", "--exact", "--catalog", "r.json", "garlic, onion"])
        assert parsed == (True, "match", {"exact": True, "catalog": "r.json"}, ["garlic, onion"])

    def test_mode_flag(self):
        _, _, options, _ = query.parse_args(["detect", "--mode", "food", "dish.jpg"])
        assert options == {"mode": "food"}

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["unknown", "x"],
            ["recipe"],
            ["detect", "--mode", "drink", "x.jpg"],
            ["match", "--catalog"],
            ["match", "--fuzzy", "garlic"],
        ],
    )
    def test_invalid_input(self, argv):
        assert query.parse_args(argv) is None

    def test_split_names(self):
        assert query.split_names(" garlic, ,onion ,") == ["garlic", "onion"]


class TestRecipeMarkdown:
    """Test markdown rendering of a RecipeDTO."""

    def test_includes_quantities_steps_and_note(self):
        recipe = RecipeDTO(
            title="Basic Sinigang Recipe",
            ingredients=[RecipeIngredient(name="Pork", amount="1", unit="kg"), RecipeIngredient(name="Salt")],
            steps=["Boil water.", "Add pork."],
            source_provider="generated",
            note=TEMPLATE_NOTE,
        )

        text = query.recipe_markdown(recipe)

        assert text.startswith("# Basic Sinigang Recipe")
        assert "- 1 kg Pork" in text
        assert "- Salt" in text
        assert "2. Add pork." in text
        assert f"> {TEMPLATE_NOTE}" in text


class TestRunCommand:
    """Test commands end to end with a patched service factory."""

    @pytest.mark.asyncio
    async def test_recipe(self, service, recorded_console):
        with patch("query.initialize_scan_service", new_callable=AsyncMock, return_value=service):
            await query.run_command("recipe", ["Sinigang"], {})

        assert "Sinigang na Baboy" in recorded_console.export_text()

    @pytest.mark.asyncio
    async def test_match(self, service, recorded_console):
        with patch("query.initialize_scan_service", new_callable=AsyncMock, return_value=service):
            await query.run_command("match", ["chicken, rice"], {})

        output = recorded_console.export_text()
        assert "Chicken Adobo" in output
        assert "50%" in output

    @pytest.mark.asyncio
    async def test_shopping(self, service, recorded_console):
        with patch("query.initialize_scan_service", new_callable=AsyncMock, return_value=service):
            await query.run_command("shopping", ["Chicken Adobo"], {"have": "chicken"})

        output = recorded_console.export_text()
        assert "Soy Sauce" in output
        assert "Chicken" not in output

    @pytest.mark.asyncio
    async def test_detect_missing_file_exits(self, service, recorded_console, tmp_path):
        with patch("query.initialize_scan_service", new_callable=AsyncMock, return_value=service):
            with pytest.raises(SystemExit):
                await query.run_command("detect", [str(tmp_path / "missing.jpg")], {})
