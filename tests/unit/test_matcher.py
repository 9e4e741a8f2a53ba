"""Unit tests for name correspondence and recipe matching."""

import pytest

from src.matching.matcher import RecipeMatcher
from src.matching.text import corresponds_to_any, display_name, names_correspond, normalize_name
from src.models.models import CatalogRecipe, MatchMode, RecipeIngredient


def make_recipe(recipe_id, ingredients, rating=0.0, likes=0, bookmarks=0, title=None):
    return CatalogRecipe(
        id=recipe_id,
        title=title or f"Recipe {recipe_id}",
        ingredients=[RecipeIngredient(name=name) for name in ingredients],
        average_rating=rating,
        likes_count=likes,
        bookmarks_count=bookmarks,
    )


class TestNameCorrespondence:
    """Test normalization and the containment rule."""

    def test_normalize_name(self):
        assert normalize_name("  Olive   OIL ") == "olive oil"

    def test_display_name(self):
        assert display_name("  tomato ") == "Tomato"
        assert display_name("olive  oil") == "Olive Oil"

    @pytest.mark.parametrize(
        "first,second",
        [("milk", "Coconut Milk"), ("Coconut Milk", "milk"), ("Garlic", "garlic"), ("rice", "Fried Rice")],
    )
    def test_containment_either_direction(self, first, second):
        assert names_correspond(first, second)

    def test_unrelated_names_do_not_correspond(self):
        assert not names_correspond("Tomato", "Garlic")

    def test_empty_names_never_correspond(self):
        assert not names_correspond("", "garlic")
        assert not names_correspond("garlic", "   ")

    def test_corresponds_to_any(self):
        assert corresponds_to_any("onion", ["Garlic", "Red Onion"])
        assert not corresponds_to_any("onion", [])


class TestPartialMatch:
    """Test partial-mode scoring."""

    def test_scenario_one_of_three_names_matched(self):
        """Garlic/Onion/Tomato against a Garlic + Olive Oil recipe scores 1/3."""
        matcher = RecipeMatcher()
        recipe = make_recipe("r1", ["Garlic", "Olive Oil"])

        results = matcher.match(["Garlic", "Onion", "Tomato"], [recipe])

        assert len(results) == 1
        assert results[0].match_score == pytest.approx(1 / 3)
        assert results[0].matched_ingredients == ["Garlic"]
        assert results[0].missing_ingredients == ["Olive Oil"]

    def test_recipe_without_any_match_is_dropped(self):
        matcher = RecipeMatcher()
        results = matcher.match(["Chocolate"], [make_recipe("r1", ["Garlic", "Rice"])])
        assert results == []

    def test_full_coverage_scores_one(self):
        matcher = RecipeMatcher()
        recipe = make_recipe("r1", ["Garlic", "Onion", "Pork"])

        results = matcher.match(["garlic", "onion"], [recipe])

        assert results[0].match_score == 1.0

    def test_score_always_between_zero_and_one(self):
        matcher = RecipeMatcher()
        corpus = [
            make_recipe("a", ["Garlic"]),
            make_recipe("b", ["Garlic", "Onion", "Tomato", "Salt"]),
            make_recipe("c", ["Coconut Milk", "Chicken"]),
        ]

        results = matcher.match(["garlic", "milk", "chicken", "salt"], corpus)

        assert results
        assert all(0.0 <= r.match_score <= 1.0 for r in results)

    def test_duplicate_names_collapsed(self):
        """Test that repeated names do not inflate the denominator."""
        matcher = RecipeMatcher()
        results = matcher.match(["Garlic", "garlic ", "GARLIC"], [make_recipe("r1", ["Garlic"])])
        assert results[0].match_score == 1.0

    @pytest.mark.parametrize("names", [[], ["", "   "]])
    def test_empty_names_return_nothing(self, names):
        matcher = RecipeMatcher()
        assert matcher.match(names, [make_recipe("r1", ["Garlic"])]) == []


class TestExactMatch:
    """Test exact-mode symmetric coverage."""

    def test_mutual_coverage_qualifies(self):
        matcher = RecipeMatcher()
        recipe = make_recipe("r1", ["Garlic", "Onion"])

        results = matcher.match(["onion", "garlic"], [recipe], MatchMode.EXACT)

        assert len(results) == 1
        assert results[0].match_score == 1.0
        assert results[0].missing_ingredients == []

    def test_recipe_with_extra_ingredient_rejected(self):
        matcher = RecipeMatcher()
        recipe = make_recipe("r1", ["Garlic", "Onion", "Pork"])
        assert matcher.match(["garlic", "onion"], [recipe], MatchMode.EXACT) == []

    def test_uncovered_name_rejected(self):
        matcher = RecipeMatcher()
        recipe = make_recipe("r1", ["Garlic"])
        assert matcher.match(["garlic", "onion"], [recipe], MatchMode.EXACT) == []

    def test_recipe_without_ingredients_rejected(self):
        matcher = RecipeMatcher()
        assert matcher.match(["garlic"], [make_recipe("r1", [])], MatchMode.EXACT) == []


class TestRanking:
    """Test ordering and result cap."""

    def test_score_then_rating_then_engagement(self):
        matcher = RecipeMatcher()
        corpus = [
            make_recipe("low-score", ["Garlic"], rating=5.0),
            make_recipe("popular", ["Garlic", "Onion"], rating=4.0, likes=50),
            make_recipe("top-rated", ["Garlic", "Onion"], rating=4.5),
            make_recipe("bookmarked", ["Garlic", "Onion"], rating=4.0, likes=10, bookmarks=60),
        ]

        results = matcher.match(["garlic", "onion"], corpus)

        assert [r.recipe_ref.id for r in results] == ["top-rated", "bookmarked", "popular", "low-score"]

    def test_results_capped(self):
        matcher = RecipeMatcher(max_results=3)
        corpus = [make_recipe(str(i), ["Garlic"]) for i in range(8)]

        assert len(matcher.match(["garlic"], corpus)) == 3

    def test_default_cap_is_ten(self):
        matcher = RecipeMatcher()
        corpus = [make_recipe(str(i), ["Garlic"]) for i in range(15)]

        assert len(matcher.match(["garlic"], corpus)) == 10
