"""Unit tests for configuration management."""

import pytest

from src.utils.config import Config

CONFIG_ENV_VARS = (
    "VISION_PROVIDER",
    "GEMINI_API_KEY",
    "SPOONACULAR_API_KEY",
    "USE_SPOONACULAR",
    "SPOONACULAR_DAILY_LIMIT",
    "FOOD_CONFIDENCE_FLOOR",
    "INGREDIENT_CONFIDENCE_FLOOR",
    "FOOD_MAX_ITEMS",
    "INGREDIENT_MAX_ITEMS",
    "MAX_IMAGE_SIZE_MB",
    "COMPRESS_IMG",
    "SESSION_TTL_MINUTES",
    "SESSION_SWEEP_INTERVAL_MINUTES",
    "MAX_MATCH_RESULTS",
    "PROVIDER_TIMEOUT_SECONDS",
    "VISION_TIMEOUT_SECONDS",
    "RECIPE_CATALOG_FILE",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigInitialization:
    """Test Config class initialization and environment variable loading."""

    def test_config_loads_default_values(self, clean_env):
        """Test that Config uses default values when env vars not set."""
        config = Config()

        assert config.VISION_PROVIDER == "roboflow"
        assert config.FOOD_CONFIDENCE_FLOOR == 0.1
        assert config.INGREDIENT_CONFIDENCE_FLOOR == 0.05
        assert config.FOOD_MAX_ITEMS == 5
        assert config.INGREDIENT_MAX_ITEMS == 10
        assert config.SPOONACULAR_DAILY_LIMIT == 150
        assert config.SESSION_TTL_MINUTES == 30
        assert config.SESSION_SWEEP_INTERVAL_MINUTES == 10
        assert config.MAX_MATCH_RESULTS == 10
        assert config.PROVIDER_TIMEOUT_SECONDS == 10
        assert config.RECIPE_CATALOG_FILE is None

    def test_config_loads_from_environment(self, clean_env):
        """Test that Config loads values from environment variables."""
        clean_env.setenv("SPOONACULAR_DAILY_LIMIT", "50")
        clean_env.setenv("SESSION_TTL_MINUTES", "45")
        clean_env.setenv("INGREDIENT_CONFIDENCE_FLOOR", "0.2")
        clean_env.setenv("VISION_PROVIDER", "GEMINI")
        clean_env.setenv("GEMINI_API_KEY", "test_gemini_key")

        config = Config()

        assert config.SPOONACULAR_DAILY_LIMIT == 50
        assert config.SESSION_TTL_MINUTES == 45
        assert config.INGREDIENT_CONFIDENCE_FLOOR == 0.2
        assert config.VISION_PROVIDER == "gemini"
        assert config.GEMINI_API_KEY == "test_gemini_key"

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("yes", True), ("false", False), ("0", False)])
    def test_config_parses_booleans(self, clean_env, raw, expected):
        """Test that boolean flags accept the usual spellings."""
        clean_env.setenv("COMPRESS_IMG", raw)

        assert Config().COMPRESS_IMG is expected


class TestSpoonacularEnabled:
    """Test the Spoonacular tier toggle."""

    def test_enabled_with_key(self, clean_env):
        clean_env.setenv("SPOONACULAR_API_KEY", "key")
        assert Config().spoonacular_enabled is True

    def test_disabled_without_key(self, clean_env):
        """Test that a missing key disables the tier instead of failing."""
        config = Config()
        config.validate()
        assert config.spoonacular_enabled is False

    def test_disabled_by_flag(self, clean_env):
        clean_env.setenv("SPOONACULAR_API_KEY", "key")
        clean_env.setenv("USE_SPOONACULAR", "false")
        assert Config().spoonacular_enabled is False


class TestConfigValidation:
    """Test Config validation logic."""

    def test_validate_succeeds_with_defaults(self, clean_env):
        Config().validate()

    def test_validate_rejects_unknown_vision_provider(self, clean_env):
        clean_env.setenv("VISION_PROVIDER", "opencv")
        with pytest.raises(ValueError, match="VISION_PROVIDER"):
            Config().validate()

    def test_validate_requires_gemini_key_for_gemini(self, clean_env):
        """Test that validate() raises ValueError if GEMINI_API_KEY missing with VISION_PROVIDER=gemini."""
        clean_env.setenv("VISION_PROVIDER", "gemini")
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            Config().validate()

    def test_validate_rejects_floor_out_of_range(self, clean_env):
        clean_env.setenv("FOOD_CONFIDENCE_FLOOR", "1.5")
        with pytest.raises(ValueError, match="FOOD_CONFIDENCE_FLOOR"):
            Config().validate()

    @pytest.mark.parametrize("name", ["SPOONACULAR_DAILY_LIMIT", "SESSION_TTL_MINUTES", "MAX_MATCH_RESULTS"])
    def test_validate_rejects_non_positive_limits(self, clean_env, name):
        clean_env.setenv(name, "0")
        with pytest.raises(ValueError, match=name):
            Config().validate()

    def test_validate_rejects_non_positive_timeout(self, clean_env):
        clean_env.setenv("PROVIDER_TIMEOUT_SECONDS", "0")
        with pytest.raises(ValueError, match="PROVIDER_TIMEOUT_SECONDS"):
            Config().validate()
