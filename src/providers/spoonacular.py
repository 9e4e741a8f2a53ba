"""Spoonacular recipe provider (primary tier, quota-limited).

Uses the complexSearch endpoint with addRecipeInformation and
fillIngredients so a single request returns everything needed for a
RecipeDTO. Every request is reserved against the shared QuotaTracker before
it is sent; HTTP 402 from Spoonacular means the key's daily points are gone
and marks the local budget as spent too.
"""

from typing import List, Optional

import aiohttp
from pydantic import ValidationError

from src.models.models import RecipeDTO, RecipeIngredient
from src.providers.base import MAX_INGREDIENTS, MAX_STEPS, RecipeProvider, split_instructions, strip_html
from src.providers.quota import QuotaTracker
from src.utils.config import config
from src.utils.errors import ProviderError, ProviderQuotaExceeded
from src.utils.logger import logger


def _format_amount(amount) -> str:
    """12.0 -> "12", 0.3333 -> "0.33", missing/zero -> ""."""
    try:
        value = round(float(amount), 2)
    except (TypeError, ValueError):
        return ""
    if value <= 0:
        return ""
    return str(int(value)) if value.is_integer() else str(value)


def _minutes(value) -> Optional[int]:
    # Spoonacular reports unknown times as null or -1
    if isinstance(value, (int, float)) and value >= 0:
        return int(value)
    return None


class SpoonacularProvider(RecipeProvider):
    """Primary tier: structured recipes, limited to SPOONACULAR_DAILY_LIMIT requests/day."""

    name = "spoonacular"
    quota_limited = True

    def __init__(
        self,
        api_key: str,
        quota: QuotaTracker,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_key: Spoonacular API key.
            quota: Shared tracker; the provider must already be registered on it.
            base_url: Recipes API root. Defaults to SPOONACULAR_BASE_URL.
            timeout_seconds: Per-request timeout. Defaults to PROVIDER_TIMEOUT_SECONDS.

        Raises:
            ValueError: If api_key is None or empty string.
        """
        if not api_key:
            raise ValueError("SPOONACULAR_API_KEY is required")
        super().__init__(timeout_seconds)
        self.api_key = api_key
        self.quota = quota
        self.base_url = (base_url or config.SPOONACULAR_BASE_URL).rstrip("/")

    def _on_http_error(self, error: aiohttp.ClientResponseError) -> None:
        if error.status == 402:
            self.quota.exhaust(self.name)
            raise ProviderQuotaExceeded(self.name) from error
        super()._on_http_error(error)

    async def search(self, query: str) -> Optional[RecipeDTO]:
        if not self.quota.consume(self.name):
            raise ProviderQuotaExceeded(self.name)

        data = await self._get_json(
            f"{self.base_url}/complexSearch",
            params={
                "query": query,
                "number": "1",
                "addRecipeInformation": "true",
                "fillIngredients": "true",
                "instructionsRequired": "true",
                "apiKey": self.api_key,
            },
        )

        results = data.get("results") if isinstance(data, dict) else None
        if not results:
            logger.debug(f"Spoonacular has no recipe for '{query}'", extra={"provider": self.name})
            return None

        try:
            return self.to_recipe(results[0])
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise ProviderError(self.name, f"unreadable recipe for '{query}': {e}") from e

    @staticmethod
    def _ingredients(recipe: dict) -> List[RecipeIngredient]:
        ingredients = []
        for ing in recipe.get("extendedIngredients") or []:
            name = (ing.get("name") or ing.get("originalName") or "").strip()
            if not name:
                continue
            ingredients.append(
                RecipeIngredient(name=name, amount=_format_amount(ing.get("amount")), unit=ing.get("unit") or "")
            )
        return ingredients[:MAX_INGREDIENTS]

    @staticmethod
    def _steps(recipe: dict) -> List[str]:
        analyzed = recipe.get("analyzedInstructions") or []
        if analyzed:
            steps = [s.get("step", "").strip() for s in analyzed[0].get("steps") or []]
            steps = [s for s in steps if s]
            if steps:
                return steps[:MAX_STEPS]
        return split_instructions(recipe.get("instructions"))

    def to_recipe(self, recipe: dict) -> RecipeDTO:
        """Normalize one complexSearch result into a RecipeDTO."""
        prep = _minutes(recipe.get("preparationMinutes"))
        cook = _minutes(recipe.get("cookingMinutes"))
        ready = _minutes(recipe.get("readyInMinutes"))
        if prep is None and cook is None and ready:
            prep = min(15, ready)
            cook = ready - prep

        return RecipeDTO(
            title=recipe["title"][:200],
            description=strip_html(recipe.get("summary")),
            ingredients=self._ingredients(recipe),
            steps=self._steps(recipe),
            prep_minutes=prep if prep is not None else 15,
            cook_minutes=cook if cook is not None else 30,
            servings=max(1, min(int(recipe.get("servings") or 4), 100)),
            source_provider=self.name,
            image=recipe.get("image"),
            source_url=recipe.get("sourceUrl"),
        )
