"""Error taxonomy for the Ingredient Scan Service.

Only caller-input errors (IngredientValidationError, DuplicateIngredient,
IngredientNotFound) are meant to reach the layer above. Detection and
provider errors are absorbed into degraded results by the service.
"""

from typing import Optional


class ScanServiceError(Exception):
    """Base class for all service errors."""


class DetectionFailed(ScanServiceError):
    """Vision classification call was unreachable, timed out, or returned garbage."""

    retryable = True


class ProviderError(ScanServiceError):
    """A recipe provider failed (transport, timeout, or unparseable reply)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderQuotaExceeded(ProviderError):
    """Quota-limited provider has no budget left today. Routes to the next provider."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, "daily quota exhausted")


class AllProvidersFailed(ScanServiceError):
    """Every provider in the chain failed. Unreachable while the generated tier is last."""


class IngredientValidationError(ScanServiceError, ValueError):
    """Ingredient name is empty or whitespace-only."""


class DuplicateIngredient(ScanServiceError):
    """Manual add of a name already present in the session."""

    def __init__(self, name: str) -> None:
        super().__init__(f"'{name}' is already in your ingredient list")
        self.name = name


class IngredientNotFound(ScanServiceError, LookupError):
    """Remove of a name that is not in the session."""

    def __init__(self, name: str, user_id: Optional[str] = None) -> None:
        super().__init__(f"'{name}' is not in the ingredient list")
        self.name = name
        self.user_id = user_id


class SessionNotFound(IngredientNotFound):
    """Remove against a user with no active session."""

    def __init__(self, name: str, user_id: str) -> None:
        super().__init__(name, user_id)
        self.args = (f"No active ingredient session for user '{user_id}'",)


class ImageValidationError(ScanServiceError, ValueError):
    """Uploaded image is empty, too large, or not a supported format."""
