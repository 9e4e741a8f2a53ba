"""Ordered recipe provider fallback.

Providers are tried in priority order (default: Spoonacular → TheMealDB →
generated template). A quota-limited provider with no budget left is skipped
without a network call. Any failure inside a provider is logged and the next
tier is tried; only the terminal template tier's result is guaranteed, so the
chain must end with a provider whose `always_succeeds` is set.
"""

from typing import List, Optional, Sequence

from src.models.models import RecipeDTO
from src.providers.base import RecipeProvider
from src.providers.generated import GeneratedRecipeProvider
from src.providers.mealdb import MealDbProvider
from src.providers.quota import QuotaTracker
from src.providers.spoonacular import SpoonacularProvider
from src.utils.config import config
from src.utils.errors import AllProvidersFailed, IngredientValidationError, ProviderError, ProviderQuotaExceeded
from src.utils.logger import logger


class RecipeProviderChain:
    """Resolves a food name to one RecipeDTO across the provider tiers.

    Args:
        providers: Tiers in priority order. The last one must always succeed.
        quota: Tracker consulted before each quota-limited provider.

    Raises:
        ValueError: If `providers` is empty or does not end with an
            always-succeeding tier.
    """

    def __init__(self, providers: Sequence[RecipeProvider], quota: QuotaTracker) -> None:
        if not providers:
            raise ValueError("At least one recipe provider is required")
        if not providers[-1].always_succeeds:
            raise ValueError(f"Last recipe provider must always succeed, got: {providers[-1].name}")
        self.providers: List[RecipeProvider] = list(providers)
        self.quota = quota

    @property
    def provider_names(self) -> List[str]:
        return [p.name for p in self.providers]

    async def get_recipe_for_food(self, food_name: str) -> RecipeDTO:
        """Best-guess recipe for a food name.

        Raises:
            IngredientValidationError: If `food_name` is empty or whitespace-only.
        """
        food_name = (food_name or "").strip()
        if not food_name:
            raise IngredientValidationError("Food name is required")

        for provider in self.providers:
            if provider.quota_limited and not self.quota.can_consume(provider.name):
                logger.info(
                    f"Skipping {provider.name} for '{food_name}': daily quota reached",
                    extra={"provider": provider.name},
                )
                continue

            try:
                recipe = await provider.get_recipe(food_name)
            except ProviderQuotaExceeded:
                logger.info(
                    f"{provider.name} ran out of quota while looking up '{food_name}'",
                    extra={"provider": provider.name},
                )
                continue
            except ProviderError as e:
                logger.warning(f"Recipe provider failed, falling through: {e}", extra={"provider": provider.name})
                continue
            except Exception as e:
                logger.error(
                    f"Unexpected error from {provider.name} for '{food_name}': {e}",
                    exc_info=True,
                    extra={"provider": provider.name},
                )
                continue

            if recipe is not None:
                logger.info(
                    f"Recipe for '{food_name}' served by {provider.name}: {recipe.title}",
                    extra={"provider": provider.name},
                )
                return recipe

            logger.info(f"{provider.name} has no recipe for '{food_name}'", extra={"provider": provider.name})

        raise AllProvidersFailed(f"No recipe provider returned a recipe for '{food_name}'")


def build_default_chain(quota: QuotaTracker, use_spoonacular: Optional[bool] = None) -> RecipeProviderChain:
    """Spoonacular (when enabled and keyed) → TheMealDB → generated template."""
    use_spoonacular = config.spoonacular_enabled if use_spoonacular is None else use_spoonacular

    providers: List[RecipeProvider] = []
    if use_spoonacular:
        quota.register(SpoonacularProvider.name, config.SPOONACULAR_DAILY_LIMIT)
        providers.append(SpoonacularProvider(config.SPOONACULAR_API_KEY, quota))
    else:
        logger.info("Spoonacular disabled (USE_SPOONACULAR=false or no SPOONACULAR_API_KEY)")
    providers.append(MealDbProvider())
    providers.append(GeneratedRecipeProvider())

    logger.info(f"Recipe provider chain: {' → '.join(p.name for p in providers)}")
    return RecipeProviderChain(providers, quota)
