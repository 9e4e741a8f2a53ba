"""Shopping list derivation from selected recipes."""

from typing import Dict, Iterable, List, Union

from src.matching.text import corresponds_to_any, normalize_name
from src.models.models import CatalogRecipe, RecipeDTO, ShoppingListItem
from src.utils.logger import logger

SelectedRecipe = Union[CatalogRecipe, RecipeDTO]


class ShoppingListBuilder:
    """Builds the deduplicated list of ingredients still needed.

    Ingredients are merged by normalized name across recipes. Quantities are
    not aggregated: the first recipe's amount/unit wins and
    used_in_recipe_count records how many distinct recipes need the item.
    Items corresponding to anything in `have_ingredients` are left out.
    """

    def build(
        self,
        selected_recipes: Iterable[SelectedRecipe],
        have_ingredients: Iterable[str] = (),
    ) -> List[ShoppingListItem]:
        have = [name for name in have_ingredients if normalize_name(name)]

        items: Dict[str, dict] = {}
        for recipe_index, recipe in enumerate(selected_recipes):
            for ingredient in recipe.ingredients:
                key = normalize_name(ingredient.name)
                if not key:
                    continue
                entry = items.get(key)
                if entry is None:
                    items[key] = {
                        "name": ingredient.name,
                        "amount": ingredient.amount or "1",
                        "unit": ingredient.unit or "piece",
                        "recipes": {recipe_index},
                    }
                else:
                    entry["recipes"].add(recipe_index)

        shopping_list = [
            ShoppingListItem(
                name=entry["name"],
                amount=entry["amount"],
                unit=entry["unit"],
                used_in_recipe_count=len(entry["recipes"]),
            )
            for key, entry in items.items()
            if not corresponds_to_any(key, have)
        ]

        logger.info(
            f"Generated shopping list with {len(shopping_list)} item(s) "
            f"({len(items) - len(shopping_list)} already on hand)"
        )
        return shopping_list
