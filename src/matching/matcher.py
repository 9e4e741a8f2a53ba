"""Recipe matching against the local catalog.

Scores each candidate recipe by how well its ingredient list corresponds to a
set of ingredient names (see src.matching.text for the correspondence rule):

- Partial mode: match_score = matched names / total names, recipes with no
  matched name are dropped.
- Exact mode: the recipe qualifies only when every name is covered by the
  recipe AND every recipe ingredient is covered by some name; score is 1.0.

Results are ranked by score, then rating, then engagement (likes + bookmarks),
and capped at MAX_MATCH_RESULTS.
"""

from typing import Iterable, List, Optional

from src.matching.text import corresponds_to_any, normalize_name
from src.models.models import CatalogRecipe, MatchMode, MatchResult
from src.utils.config import config
from src.utils.logger import logger


def _unique_names(ingredient_names: Iterable[str]) -> List[str]:
    """Drop blanks and case-insensitive duplicates, preserving first spelling."""
    seen = {}
    for name in ingredient_names:
        key = normalize_name(name)
        if key and key not in seen:
            seen[key] = name.strip()
    return list(seen.values())


class RecipeMatcher:
    """Ranks catalog recipes for a set of ingredient names."""

    def __init__(self, max_results: Optional[int] = None) -> None:
        self.max_results = max_results or config.MAX_MATCH_RESULTS

    def score(self, recipe: CatalogRecipe, names: List[str], mode: MatchMode) -> Optional[MatchResult]:
        """Score one recipe. Returns None if it does not qualify under `mode`."""
        recipe_ingredients = [ing.name for ing in recipe.ingredients]

        matched = [name for name in names if corresponds_to_any(name, recipe_ingredients)]
        missing = [ing for ing in recipe_ingredients if not corresponds_to_any(ing, names)]

        if mode == MatchMode.EXACT:
            if len(matched) != len(names) or missing or not recipe_ingredients:
                return None
            match_score = 1.0
        else:
            if not matched:
                return None
            match_score = len(matched) / len(names)

        return MatchResult(
            recipe_ref=recipe,
            match_score=match_score,
            matched_ingredients=matched,
            missing_ingredients=missing,
        )

    def match(
        self,
        ingredient_names: Iterable[str],
        corpus: Iterable[CatalogRecipe],
        mode: MatchMode = MatchMode.PARTIAL,
    ) -> List[MatchResult]:
        """Rank `corpus` against `ingredient_names`.

        Args:
            ingredient_names: Scanned or typed ingredient names. Duplicates are
                collapsed case-insensitively.
            corpus: Candidate recipes (typically from RecipeCatalog.find_by_names).
            mode: PARTIAL (default) or EXACT.

        Returns:
            Up to max_results MatchResult objects, best first. Empty if no
            names were given.
        """
        names = _unique_names(ingredient_names)
        if not names:
            logger.debug("Recipe match requested with no ingredient names, returning no results")
            return []

        results = []
        for recipe in corpus:
            result = self.score(recipe, names, mode)
            if result is not None:
                results.append(result)

        results.sort(
            key=lambda r: (r.match_score, r.recipe_ref.average_rating, r.recipe_ref.engagement),
            reverse=True,
        )
        ranked = results[: self.max_results]

        logger.info(
            f"Matched {len(results)} recipe(s) for {len(names)} ingredient(s) "
            f"(mode: {mode.value}, returning top {len(ranked)})"
        )
        return ranked
