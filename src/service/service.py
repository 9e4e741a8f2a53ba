"""Ingredient scan service facade and initialization factory.

ScanService is the single surface a transport layer (HTTP routes, CLI) talks
to. It wires the detection normalizer, the per-user session store and its
sweeper, the local recipe catalog with the matcher, the recipe provider
chain with its quota tracker, and the shopping-list builder.

Provider and detection failures never escape it: scans degrade to an empty,
retryable ScanOutcome and recipe lookups to the generated template. Only
caller-input errors (bad image, empty or duplicate name, unknown item)
propagate.
"""

from typing import Iterable, List, Optional, Sequence, Union

from src.catalog.catalog import InMemoryRecipeCatalog, RecipeCatalog
from src.matching.matcher import RecipeMatcher
from src.matching.shopping_list import SelectedRecipe, ShoppingListBuilder
from src.models.models import (
    DetectedItem,
    MatchMode,
    MatchResult,
    ProviderQuota,
    RecipeDTO,
    ScanMode,
    ScanOutcome,
    ShoppingListItem,
)
from src.providers.chain import RecipeProviderChain, build_default_chain
from src.providers.quota import QuotaTracker
from src.sessions.store import IngredientSessionStore
from src.sessions.sweeper import SessionSweeper
from src.utils.config import config
from src.utils.errors import IngredientValidationError
from src.utils.logger import logger
from src.vision.normalizer import DetectionNormalizer


class ScanService:
    """Operations exposed to callers, keyed by user id where session state is involved."""

    def __init__(
        self,
        normalizer: DetectionNormalizer,
        sessions: IngredientSessionStore,
        catalog: RecipeCatalog,
        chain: RecipeProviderChain,
        quota: QuotaTracker,
        matcher: Optional[RecipeMatcher] = None,
        shopping: Optional[ShoppingListBuilder] = None,
        sweeper: Optional[SessionSweeper] = None,
    ) -> None:
        self.normalizer = normalizer
        self.sessions = sessions
        self.catalog = catalog
        self.chain = chain
        self.quota = quota
        self.matcher = matcher or RecipeMatcher()
        self.shopping = shopping or ShoppingListBuilder()
        self.sweeper = sweeper or SessionSweeper(sessions)

    # Lifecycle

    def start(self) -> None:
        """Start background session eviction. Must be called from a running event loop."""
        self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()

    # Detection

    async def detect(self, image_bytes: bytes, mode: ScanMode = ScanMode.INGREDIENT) -> ScanOutcome:
        """Classify an image without touching any session.

        Raises:
            ImageValidationError: If the image is empty, not JPEG/PNG, or too large.
        """
        return await self.normalizer.detect(image_bytes, mode)

    async def scan(self, user_id: str, image_bytes: bytes, mode: ScanMode = ScanMode.INGREDIENT) -> ScanOutcome:
        """Detect items in an image and merge them into the user's session."""
        outcome = await self.detect(image_bytes, mode)
        if outcome.items:
            await self.sessions.merge(user_id, outcome.items)
        return outcome

    # Session

    async def add_ingredient(self, user_id: str, item: Union[DetectedItem, str]) -> DetectedItem:
        """Add a detected item (kept if higher confidence) or a typed name (manual).

        Raises:
            IngredientValidationError: Empty or whitespace-only name.
            DuplicateIngredient: Typed name already in the session.
        """
        if isinstance(item, DetectedItem):
            await self.sessions.add_detected(user_id, item)
            return item
        return await self.sessions.add_manual(user_id, item)

    async def remove_ingredient(self, user_id: str, name: str) -> DetectedItem:
        """Raises SessionNotFound / IngredientNotFound if there is nothing to remove."""
        return await self.sessions.remove(user_id, name)

    async def list_ingredients(self, user_id: str) -> List[DetectedItem]:
        return await self.sessions.list(user_id)

    async def clear_session(self, user_id: str) -> bool:
        return await self.sessions.clear(user_id)

    # Recipes

    async def match_recipes(
        self,
        ingredient_names: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None,
        mode: MatchMode = MatchMode.PARTIAL,
    ) -> List[MatchResult]:
        """Rank local catalog recipes for explicit names or for a user's session.

        Raises:
            IngredientValidationError: If neither `ingredient_names` nor `user_id` is given.
        """
        if ingredient_names is None:
            if user_id is None:
                raise IngredientValidationError("Either ingredient_names or user_id is required")
            ingredient_names = await self.sessions.names(user_id)

        names = list(ingredient_names)
        if not names:
            return []

        corpus = await self.catalog.find_by_names(names)
        return self.matcher.match(names, corpus, MatchMode(mode))

    async def get_recipe_for_food(self, food_name: str) -> RecipeDTO:
        """Best-guess recipe from the provider chain. Never fails for a non-empty name."""
        return await self.chain.get_recipe_for_food(food_name)

    async def build_shopping_list(
        self,
        selected_recipes: Sequence[SelectedRecipe],
        have_ingredients: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None,
    ) -> List[ShoppingListItem]:
        """Ingredients still needed for the selected recipes.

        When `have_ingredients` is omitted and `user_id` is given, the user's
        session is what they already have.
        """
        if have_ingredients is None:
            have_ingredients = await self.sessions.names(user_id) if user_id else []
        return self.shopping.build(selected_recipes, have_ingredients)

    def quota_status(self) -> List[ProviderQuota]:
        """Today's budget for every quota-limited provider in the chain."""
        snapshots = (self.quota.snapshot(p.name) for p in self.chain.providers if p.quota_limited)
        return [s for s in snapshots if s is not None]


def _load_catalog() -> RecipeCatalog:
    if config.RECIPE_CATALOG_FILE:
        logger.info(f"Loading recipe catalog from {config.RECIPE_CATALOG_FILE}...")
        return InMemoryRecipeCatalog.from_json_file(config.RECIPE_CATALOG_FILE)
    logger.info("RECIPE_CATALOG_FILE not set, starting with an empty recipe catalog")
    return InMemoryRecipeCatalog()


async def initialize_scan_service(
    catalog: Optional[RecipeCatalog] = None,
    normalizer: Optional[DetectionNormalizer] = None,
) -> ScanService:
    """Build a fully wired ScanService from config.

    Args:
        catalog: Recipe catalog to match against. Defaults to an in-memory
            catalog seeded from RECIPE_CATALOG_FILE (empty if unset).
        normalizer: Detection normalizer. Defaults to one using VISION_PROVIDER.

    Returns:
        ScanService ready for use. Call start() to begin session sweeping.

    Raises:
        ValueError: If the vision backend is misconfigured.
        FileNotFoundError: If RECIPE_CATALOG_FILE points to a missing file.
    """
    logger.info("=== Initializing Ingredient Scan Service ===")

    logger.info(f"Step 1/4: Configuring vision backend ({config.VISION_PROVIDER})...")
    normalizer = normalizer or DetectionNormalizer()
    logger.info(f"✓ Vision backend ready: {normalizer.classifier.name}")

    logger.info("Step 2/4: Configuring recipe providers...")
    quota = QuotaTracker()
    chain = build_default_chain(quota)
    logger.info(f"✓ {len(chain.providers)} recipe provider(s) configured")

    logger.info("Step 3/4: Preparing recipe catalog...")
    catalog = catalog if catalog is not None else _load_catalog()
    logger.info("✓ Recipe catalog ready")

    logger.info("Step 4/4: Creating session store...")
    sessions = IngredientSessionStore()
    logger.info(
        f"✓ Session store ready (TTL {config.SESSION_TTL_MINUTES}m, "
        f"sweep every {config.SESSION_SWEEP_INTERVAL_MINUTES}m)"
    )

    service = ScanService(normalizer=normalizer, sessions=sessions, catalog=catalog, chain=chain, quota=quota)
    logger.info("=== Scan service initialization complete ===")
    return service
