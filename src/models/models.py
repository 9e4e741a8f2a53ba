"""Data models and schemas for the ingredient scan and recipe matching service.

Defines Pydantic models for detection output, recipes (local catalog and
provider-agnostic), match results, quota snapshots and shopping lists.
All models use Pydantic v2 for strict validation.
"""

from datetime import date
from enum import Enum
from typing import List, Optional, Annotated

from pydantic import BaseModel, Field, ConfigDict


class ScanMode(str, Enum):
    """Which vision model to use for a scan."""

    FOOD = "food"
    INGREDIENT = "ingredient"


class ItemCategory(str, Enum):
    INGREDIENT = "ingredient"
    FOOD = "food"
    DISH = "dish"
    VEGETABLE = "vegetable"
    FRUIT = "fruit"
    MEAT = "meat"
    DAIRY = "dairy"
    GRAIN = "grain"
    SPICE = "spice"
    CONDIMENT = "condiment"
    OIL = "oil"
    MANUAL = "manual"
    OTHER = "other"


class MatchMode(str, Enum):
    """Recipe matching mode.

    - PARTIAL: score is the fraction of scanned names found in the recipe
    - EXACT: recipe and scanned names must cover each other completely
    """

    PARTIAL = "partial"
    EXACT = "exact"


class BoundingBox(BaseModel):
    """Pixel-space box reported by the detection model (center x/y)."""

    model_config = ConfigDict(frozen=True)

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0


class DetectedItem(BaseModel):
    """One classified item: canonical name, confidence and category.

    Immutable once produced. Session merge replaces the whole item when a
    higher-confidence duplicate arrives.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=100, description="Canonical display name")]
    confidence: Annotated[float, Field(ge=0.0, le=1.0, description="Classifier confidence (0.0-1.0)")]
    category: Annotated[ItemCategory, Field(ItemCategory.OTHER, description="Item category")]
    bounding_box: Annotated[
        Optional[BoundingBox], Field(None, description="Detection box, only set for vision detections")
    ]


class ScanOutcome(BaseModel):
    """Result of a detect request.

    Always a success from the caller's perspective. When nothing was detected
    (or the vision call failed), `items` is empty and `message` explains why.
    There is no placeholder item in that case, only `items=[]` plus `message`.
    """

    mode: ScanMode
    items: Annotated[List[DetectedItem], Field(default_factory=list)]
    detected: bool = False
    retryable: bool = False
    message: Optional[str] = None
    overall_confidence: Annotated[float, Field(0.0, ge=0.0, le=1.0)]


class RecipeIngredient(BaseModel):
    """Ingredient line: name plus free-text amount and optional unit."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=200)]
    amount: str = ""
    unit: str = ""


class RecipeDTO(BaseModel):
    """Uniform recipe shape returned by the provider chain, regardless of source.

    `source_provider` tags which tier produced it ("spoonacular", "mealdb",
    "generated").
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    title: Annotated[str, Field(min_length=1, max_length=200)]
    description: str = ""
    ingredients: Annotated[List[RecipeIngredient], Field(default_factory=list, max_length=100)]
    steps: Annotated[List[str], Field(default_factory=list, max_length=100)]
    prep_minutes: Annotated[int, Field(15, ge=0, le=1440)]
    cook_minutes: Annotated[int, Field(30, ge=0, le=1440)]
    servings: Annotated[int, Field(4, ge=1, le=100)]
    source_provider: Annotated[str, Field(min_length=1)]
    image: Optional[str] = None
    source_url: Optional[str] = None
    note: Optional[str] = None


class CatalogRecipe(BaseModel):
    """Published recipe record from the local catalog, with engagement counters."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    title: Annotated[str, Field(min_length=1, max_length=100)]
    description: str = ""
    ingredients: Annotated[List[RecipeIngredient], Field(default_factory=list)]
    steps: Annotated[List[str], Field(default_factory=list)]
    tags: Annotated[List[str], Field(default_factory=list)]
    prep_minutes: Annotated[int, Field(0, ge=0)]
    cook_minutes: Annotated[int, Field(0, ge=0)]
    servings: Annotated[int, Field(1, ge=1)]
    average_rating: Annotated[float, Field(0.0, ge=0.0, le=5.0)]
    likes_count: Annotated[int, Field(0, ge=0)]
    bookmarks_count: Annotated[int, Field(0, ge=0)]
    is_published: bool = True

    @property
    def engagement(self) -> int:
        return self.likes_count + self.bookmarks_count


class MatchResult(BaseModel):
    """Scored recipe for a set of ingredient names. Derived per request, never stored."""

    recipe_ref: CatalogRecipe
    match_score: Annotated[float, Field(ge=0.0, le=1.0)]
    matched_ingredients: Annotated[List[str], Field(default_factory=list)]
    missing_ingredients: Annotated[List[str], Field(default_factory=list)]


class ProviderQuota(BaseModel):
    """Snapshot of a provider's daily request budget."""

    provider_id: str
    daily_limit: Annotated[int, Field(ge=0)]
    request_count: Annotated[int, Field(ge=0)]
    window_date: date

    @property
    def remaining(self) -> int:
        return max(self.daily_limit - self.request_count, 0)


class ShoppingListItem(BaseModel):
    """Missing ingredient across the selected recipes."""

    name: str
    amount: str = "1"
    unit: str = "piece"
    used_in_recipe_count: Annotated[int, Field(1, ge=1)]
    checked: bool = False
