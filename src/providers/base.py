"""Recipe provider base class and shared text helpers.

A provider answers one question: "give me a recipe for this food name". The
base class implements the lookup strategy shared by every HTTP tier:

1. search() with the full name
2. if nothing came back, search() again with each significant word of the
   name (longer than 3 characters), first hit wins
3. None if every attempt came back empty

Transport failures are raised as ProviderError so the chain can fall through
to the next tier. An empty result is not an error.
"""

import asyncio
import re
from typing import List, Optional

import aiohttp

from src.models.models import RecipeDTO
from src.utils.config import config
from src.utils.errors import ProviderError
from src.utils.logger import logger

MAX_STEPS = 100
MAX_INGREDIENTS = 100

_HTML_TAG = re.compile(r"<[^>]*>")
_STEP_SEPARATORS = re.compile(r"\r?\n\s*\r?\n|\r?\n|(?<![\d.])\b\d+\.\s+|step\s*\d+\s*:?", re.IGNORECASE)
_SECTION_HEADING = re.compile(r"^(ingredients?|method|instructions?|directions?):?$", re.IGNORECASE)
_SENTENCE_BREAK = re.compile(r"\.\s+(?=[A-Z])")


def strip_html(text: Optional[str]) -> str:
    """Remove HTML tags and collapse whitespace."""
    if not text:
        return ""
    return " ".join(_HTML_TAG.sub("", text).split())


def _punctuate(step: str) -> str:
    step = step[:1].upper() + step[1:]
    return step if step.endswith((".", "!", "?")) else f"{step}."


def split_instructions(raw: Optional[str]) -> List[str]:
    """Split free-text instructions into ordered steps.

    Splits on blank lines, line breaks, "1." style numbering and "Step N:"
    markers, dropping fragments of 10 characters or fewer and bare section
    headings. If that yields at most one step, falls back to splitting on
    sentence boundaries.
    """
    text = strip_html(raw) if raw and "<" in raw else (raw or "").strip()
    if not text:
        return []

    steps = [
        chunk.strip()
        for chunk in _STEP_SEPARATORS.split(text)
        if chunk and len(chunk.strip()) > 10 and not _SECTION_HEADING.match(chunk.strip())
    ]

    if len(steps) <= 1:
        sentences = [s.strip().rstrip(".") for s in _SENTENCE_BREAK.split(text) if len(s.strip()) > 15]
        if len(sentences) > 1:
            steps = sentences

    if not steps:
        steps = [text]

    return [_punctuate(step) for step in steps[:MAX_STEPS]]


def significant_words(food_name: str) -> List[str]:
    """Distinct words longer than 3 characters, in order of appearance."""
    words = []
    for word in food_name.split():
        if len(word) > 3 and word.lower() not in (w.lower() for w in words):
            words.append(word)
    return words


class RecipeProvider:
    """Base class for a recipe source.

    Subclasses set `name` (the RecipeDTO.source_provider tag) and implement
    search(). Quota-limited providers set `quota_limited = True`; the chain
    checks their remaining budget before calling them.
    """

    name: str = ""
    quota_limited: bool = False
    # Terminal tiers never fail and never return None
    always_succeeds: bool = False

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self.timeout_seconds = timeout_seconds or config.PROVIDER_TIMEOUT_SECONDS

    async def search(self, query: str) -> Optional[RecipeDTO]:
        """One lookup for `query`. None when the provider has no match."""
        raise NotImplementedError

    async def get_recipe(self, food_name: str) -> Optional[RecipeDTO]:
        """Full-name lookup with the partial-word fallback.

        Raises:
            ProviderError: On transport, timeout or parse failures.
        """
        recipe = await self.search(food_name)
        if recipe is not None:
            return recipe

        for word in significant_words(food_name):
            if word.lower() == food_name.strip().lower():
                continue
            logger.debug(f"{self.name}: no result for '{food_name}', retrying with '{word}'")
            recipe = await self.search(word)
            if recipe is not None:
                return recipe

        return None

    def _on_http_error(self, error: aiohttp.ClientResponseError) -> None:
        """Translate an HTTP error status. Always raises."""
        raise ProviderError(self.name, f"HTTP {error.status}") from error

    async def _get_json(self, url: str, params: Optional[dict] = None):
        """GET `url` and decode the JSON body, bounded by the provider timeout.

        Raises:
            ProviderError: On timeout, connection failure, error status or bad JSON.
        """
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    response.raise_for_status()
                    return await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ProviderError(self.name, f"timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientResponseError as e:
            self._on_http_error(e)
        except (aiohttp.ClientError, ValueError) as e:
            raise ProviderError(self.name, f"request failed: {e}") from e
