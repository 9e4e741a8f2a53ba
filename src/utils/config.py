"""Configuration management for the Ingredient Scan Service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os
from typing import Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Vision Provider: "roboflow" (hosted detection models) or "gemini" (vision LLM)
        self.VISION_PROVIDER: str = os.getenv("VISION_PROVIDER", "roboflow").lower()
        # Roboflow food-dish model (used for scan mode "food")
        self.ROBOFLOW_FOOD_API_KEY: str = os.getenv("ROBOFLOW_FOOD_API_KEY", "")
        self.ROBOFLOW_FOOD_MODEL_URL: str = os.getenv(
            "ROBOFLOW_FOOD_MODEL_URL", "https://serverless.roboflow.com/filipino-food-datasets-kd7d6/1"
        )
        # Roboflow ingredient model (used for scan mode "ingredient")
        self.ROBOFLOW_INGREDIENT_API_KEY: str = os.getenv("ROBOFLOW_INGREDIENT_API_KEY", "")
        self.ROBOFLOW_INGREDIENT_MODEL_URL: str = os.getenv(
            "ROBOFLOW_INGREDIENT_MODEL_URL", "https://serverless.roboflow.com/ingredients-detector-tqvxr/3"
        )
        # Gemini API Key: required only if VISION_PROVIDER is "gemini"
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Image Detection Model: Gemini model used when VISION_PROVIDER is "gemini"
        self.IMAGE_DETECTION_MODEL: str = os.getenv("IMAGE_DETECTION_MODEL", "gemini-2.5-flash-lite")
        # Timeout (seconds) for a single vision classification call. Default: 30
        self.VISION_TIMEOUT_SECONDS: float = float(os.getenv("VISION_TIMEOUT_SECONDS", "30"))

        # Confidence floors per scan mode. Ingredient models are noisier, so the floor is lower.
        self.FOOD_CONFIDENCE_FLOOR: float = float(os.getenv("FOOD_CONFIDENCE_FLOOR", "0.1"))
        self.INGREDIENT_CONFIDENCE_FLOOR: float = float(os.getenv("INGREDIENT_CONFIDENCE_FLOOR", "0.05"))
        # Output caps per scan mode
        self.FOOD_MAX_ITEMS: int = int(os.getenv("FOOD_MAX_ITEMS", "5"))
        self.INGREDIENT_MAX_ITEMS: int = int(os.getenv("INGREDIENT_MAX_ITEMS", "10"))

        # Maximum image size (in MB) that can be processed. Default: 5 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "5"))
        # Image Compression: Enable/disable image compression before upload
        self.COMPRESS_IMG: bool = _as_bool(os.getenv("COMPRESS_IMG", "true"))
        # Image Compression Threshold: images below this size (in KB) are sent as-is
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))

        # Spoonacular Configuration: primary recipe provider, quota-limited
        self.USE_SPOONACULAR: bool = _as_bool(os.getenv("USE_SPOONACULAR", "true"))
        self.SPOONACULAR_API_KEY: str = os.getenv("SPOONACULAR_API_KEY", "")
        self.SPOONACULAR_BASE_URL: str = os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com/recipes")
        # Free tier allows 150 requests per calendar day
        self.SPOONACULAR_DAILY_LIMIT: int = int(os.getenv("SPOONACULAR_DAILY_LIMIT", "150"))
        # TheMealDB: secondary provider, free and unlimited
        self.MEALDB_BASE_URL: str = os.getenv("MEALDB_BASE_URL", "https://www.themealdb.com/api/json/v1/1")
        # Timeout (seconds) for each recipe provider call. Default: 10
        self.PROVIDER_TIMEOUT_SECONDS: float = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "10"))

        # Ingredient sessions expire after this many minutes without updates
        self.SESSION_TTL_MINUTES: int = int(os.getenv("SESSION_TTL_MINUTES", "30"))
        # How often the background sweep looks for expired sessions
        self.SESSION_SWEEP_INTERVAL_MINUTES: int = int(os.getenv("SESSION_SWEEP_INTERVAL_MINUTES", "10"))

        # Maximum number of ranked recipe matches to return. Default: 10
        self.MAX_MATCH_RESULTS: int = int(os.getenv("MAX_MATCH_RESULTS", "10"))
        # Optional JSON file used to seed the local recipe catalog
        self.RECIPE_CATALOG_FILE: Optional[str] = os.getenv("RECIPE_CATALOG_FILE")

    @property
    def spoonacular_enabled(self) -> bool:
        """Spoonacular tier is active only when enabled and a key is present."""
        return self.USE_SPOONACULAR and bool(self.SPOONACULAR_API_KEY)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if self.VISION_PROVIDER not in ("roboflow", "gemini"):
            raise ValueError(f"VISION_PROVIDER must be 'roboflow' or 'gemini', got: {self.VISION_PROVIDER}")
        if self.VISION_PROVIDER == "gemini" and not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required when VISION_PROVIDER=gemini")
        for name in ("FOOD_CONFIDENCE_FLOOR", "INGREDIENT_CONFIDENCE_FLOOR"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be between 0.0 and 1.0, got: {value}")
        for name in (
            "FOOD_MAX_ITEMS",
            "INGREDIENT_MAX_ITEMS",
            "MAX_IMAGE_SIZE_MB",
            "SPOONACULAR_DAILY_LIMIT",
            "SESSION_TTL_MINUTES",
            "SESSION_SWEEP_INTERVAL_MINUTES",
            "MAX_MATCH_RESULTS",
        ):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got: {value}")
        for name in ("VISION_TIMEOUT_SECONDS", "PROVIDER_TIMEOUT_SECONDS"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got: {value}")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
