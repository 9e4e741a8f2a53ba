"""Local recipe catalog access.

The catalog is owned by an external persistence layer. The matcher only needs
one read query: published recipes whose title contains one of a list of
names, or whose ingredient names or tags correspond to one (containment in
either direction, the same rule the matcher applies). InMemoryRecipeCatalog
implements that query over a list of CatalogRecipe records (optionally seeded
from a JSON file) and is what the service uses when no database-backed
catalog is injected.
"""

import json
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from src.matching.text import names_correspond, normalize_name
from src.models.models import CatalogRecipe
from src.utils.logger import logger


class RecipeCatalog:
    """Read interface the matcher depends on."""

    async def find_by_names(self, names: Iterable[str], limit: Optional[int] = None) -> List[CatalogRecipe]:
        """Return published recipes whose title contains, or whose ingredients or tags correspond to, any of `names`."""
        raise NotImplementedError


class InMemoryRecipeCatalog(RecipeCatalog):
    """Catalog held in process memory."""

    def __init__(self, recipes: Optional[Iterable[CatalogRecipe]] = None) -> None:
        self._recipes: List[CatalogRecipe] = list(recipes or [])

    def __len__(self) -> int:
        return len(self._recipes)

    def add(self, recipe: CatalogRecipe) -> None:
        self._recipes.append(recipe)

    @classmethod
    def from_json_file(cls, path: str) -> "InMemoryRecipeCatalog":
        """Load recipes from a JSON array file, skipping invalid records.

        Raises:
            FileNotFoundError: If `path` does not exist.
            ValueError: If the file is not a JSON array.
        """
        with open(Path(path), "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, list):
            raise ValueError(f"Recipe catalog file must contain a JSON array, got {type(raw).__name__}")

        recipes = []
        for idx, record in enumerate(raw):
            try:
                recipes.append(CatalogRecipe.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid catalog record #{idx}: {e.error_count()} validation error(s)")

        logger.info(f"Loaded {len(recipes)} recipe(s) from {path}")
        return cls(recipes)

    @staticmethod
    def _mentions(recipe: CatalogRecipe, needle: str) -> bool:
        if needle in normalize_name(recipe.title):
            return True
        if any(names_correspond(needle, tag) for tag in recipe.tags):
            return True
        return any(names_correspond(needle, ing.name) for ing in recipe.ingredients)

    async def find_by_names(self, names: Iterable[str], limit: Optional[int] = None) -> List[CatalogRecipe]:
        needles = [n for n in (normalize_name(name) for name in names) if n]
        if not needles:
            return []

        found = [
            recipe
            for recipe in self._recipes
            if recipe.is_published and any(self._mentions(recipe, needle) for needle in needles)
        ]
        found.sort(key=lambda r: (r.average_rating, r.likes_count), reverse=True)
        return found[:limit] if limit else found
