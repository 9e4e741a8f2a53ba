"""TheMealDB recipe provider (secondary tier, free, unlimited).

search.php?s=<name> returns flat meal records with up to 20
strIngredientN/strMeasureN pairs and one free-text strInstructions field.
MealDB has no timing or serving data, so those take the RecipeDTO defaults.
"""

from typing import List, Optional

from pydantic import ValidationError

from src.models.models import RecipeDTO, RecipeIngredient
from src.providers.base import RecipeProvider, split_instructions
from src.utils.config import config
from src.utils.errors import ProviderError
from src.utils.logger import logger

MAX_INGREDIENT_SLOTS = 20


class MealDbProvider(RecipeProvider):
    name = "mealdb"

    def __init__(self, base_url: Optional[str] = None, timeout_seconds: Optional[float] = None) -> None:
        super().__init__(timeout_seconds)
        self.base_url = (base_url or config.MEALDB_BASE_URL).rstrip("/")

    async def search(self, query: str) -> Optional[RecipeDTO]:
        data = await self._get_json(f"{self.base_url}/search.php", params={"s": query})

        meals = data.get("meals") if isinstance(data, dict) else None
        if not meals:
            logger.debug(f"TheMealDB has no recipe for '{query}'", extra={"provider": self.name})
            return None

        try:
            return self.to_recipe(meals[0])
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ProviderError(self.name, f"unreadable meal for '{query}': {e}") from e

    @staticmethod
    def _ingredients(meal: dict) -> List[RecipeIngredient]:
        ingredients = []
        for i in range(1, MAX_INGREDIENT_SLOTS + 1):
            name = (meal.get(f"strIngredient{i}") or "").strip()
            if not name:
                continue
            measure = (meal.get(f"strMeasure{i}") or "").strip()
            ingredients.append(RecipeIngredient(name=name, amount=measure))
        return ingredients

    def to_recipe(self, meal: dict) -> RecipeDTO:
        """Normalize one MealDB meal record into a RecipeDTO."""
        description = " ".join(part for part in (meal.get("strArea"), meal.get("strCategory")) if part)
        return RecipeDTO(
            title=meal["strMeal"][:200],
            description=description,
            ingredients=self._ingredients(meal),
            steps=split_instructions(meal.get("strInstructions")),
            source_provider=self.name,
            image=meal.get("strMealThumb"),
            source_url=meal.get("strSource") or None,
        )
