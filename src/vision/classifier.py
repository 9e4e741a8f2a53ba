"""Vision classification backends.

A classifier takes image bytes plus a scan mode and returns raw predictions
(label, confidence, optional box) exactly as the model reported them. Any
transport failure, timeout, or unreadable reply is raised as DetectionFailed;
mapping labels and applying thresholds is DetectionNormalizer's job.

- RoboflowClassifier (default): hosted Roboflow models, one per scan mode
- GeminiClassifier: Gemini vision with a JSON-only prompt
"""

import asyncio
import base64
import json
import re
from dataclasses import dataclass
from typing import List, Optional

import aiohttp
from google import genai
from google.genai import types

from src.models.models import BoundingBox, ScanMode
from src.utils.config import config
from src.utils.errors import DetectionFailed
from src.utils.logger import logger
from src.utils.safe_execute import safe_execute_sync
from src.vision.images import image_mime_type


@dataclass(frozen=True)
class RawPrediction:
    label: str
    confidence: float
    bounding_box: Optional[BoundingBox] = None


class VisionClassifier:
    """Interface for vision backends."""

    name = "vision"

    async def classify(self, image_bytes: bytes, mode: ScanMode) -> List[RawPrediction]:
        raise NotImplementedError


def _as_float(value, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class RoboflowClassifier(VisionClassifier):
    """Hosted Roboflow inference: a Filipino food model and an ingredient model.

    The image is posted base64-encoded as a form body with the API key as a
    query parameter.
    """

    name = "roboflow"

    def __init__(
        self,
        food_model_url: Optional[str] = None,
        food_api_key: Optional[str] = None,
        ingredient_model_url: Optional[str] = None,
        ingredient_api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.endpoints = {
            ScanMode.FOOD: (
                food_model_url or config.ROBOFLOW_FOOD_MODEL_URL,
                food_api_key if food_api_key is not None else config.ROBOFLOW_FOOD_API_KEY,
            ),
            ScanMode.INGREDIENT: (
                ingredient_model_url or config.ROBOFLOW_INGREDIENT_MODEL_URL,
                ingredient_api_key if ingredient_api_key is not None else config.ROBOFLOW_INGREDIENT_API_KEY,
            ),
        }
        self.timeout_seconds = timeout_seconds or config.VISION_TIMEOUT_SECONDS

    async def _post(self, url: str, api_key: str, payload: str) -> dict:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                params={"api_key": api_key},
                data=payload,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

    @staticmethod
    def parse_predictions(data) -> List[RawPrediction]:
        """Read Roboflow's {"predictions": [{"class", "confidence", "x", ...}]} reply."""
        if not isinstance(data, dict) or not isinstance(data.get("predictions"), list):
            raise DetectionFailed("Roboflow reply has no predictions list")

        predictions = []
        for entry in data["predictions"]:
            if not isinstance(entry, dict):
                continue
            box = BoundingBox(
                x=_as_float(entry.get("x")),
                y=_as_float(entry.get("y")),
                width=_as_float(entry.get("width"), 150.0) or 150.0,
                height=_as_float(entry.get("height"), 100.0) or 100.0,
            )
            predictions.append(
                RawPrediction(
                    label=str(entry.get("class") or "Unknown"),
                    confidence=_as_float(entry.get("confidence")),
                    bounding_box=box,
                )
            )
        return predictions

    async def classify(self, image_bytes: bytes, mode: ScanMode) -> List[RawPrediction]:
        url, api_key = self.endpoints[mode]
        if not api_key:
            raise DetectionFailed(f"Roboflow API key for {mode.value} scans is not configured")

        payload = base64.b64encode(image_bytes).decode("ascii")
        logger.debug(f"Posting {len(payload) / 1024:.1f}KB base64 image to Roboflow ({mode.value} model)")

        try:
            data = await self._post(url, api_key, payload)
        except asyncio.TimeoutError as e:
            raise DetectionFailed(f"Roboflow timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientResponseError as e:
            raise DetectionFailed(f"Roboflow returned HTTP {e.status}") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise DetectionFailed(f"Roboflow request failed: {e}") from e

        predictions = self.parse_predictions(data)
        logger.info(f"Roboflow {mode.value} model returned {len(predictions)} prediction(s)")
        return predictions


GEMINI_PROMPTS = {
    ScanMode.INGREDIENT: (
        "Extract all food ingredients from this image. Return ONLY valid JSON with 'items' list (strings) "
        "and 'confidence_scores' dict mapping item name to confidence (0.0-1.0). "
        'Example: {"items": ["tomato", "basil"], "confidence_scores": {"tomato": 0.95, "basil": 0.88}}'
    ),
    ScanMode.FOOD: (
        "Identify the prepared dishes in this image. Return ONLY valid JSON with 'items' list (dish names) "
        "and 'confidence_scores' dict mapping dish name to confidence (0.0-1.0). "
        'Example: {"items": ["chicken adobo", "rice"], "confidence_scores": {"chicken adobo": 0.9, "rice": 0.8}}'
    ),
}


def parse_gemini_response(response_text: str) -> Optional[List[RawPrediction]]:
    """Parse JSON from a Gemini reply into predictions.

    Lenient: tries the whole text as JSON first, then the outermost {...}
    block, since the model sometimes wraps the JSON in prose or a code fence.

    Returns:
        Predictions (possibly empty), or None if no usable JSON was found.
    """

    def _parse_json_direct():
        return json.loads(response_text)

    def _parse_json_regex():
        json_match = re.search(r"\{.*\}", response_text, re.DOTALL)
        if json_match:
            return json.loads(json_match.group())
        return None

    parsed = safe_execute_sync(_parse_json_direct, "Direct JSON parse", log_level="debug")
    if not isinstance(parsed, dict):
        parsed = safe_execute_sync(_parse_json_regex, "Regex JSON extraction", log_level="debug")
    if not isinstance(parsed, dict):
        logger.warning("Failed to parse JSON from Gemini response")
        return None

    items = parsed.get("items") or parsed.get("ingredients") or []
    scores = parsed.get("confidence_scores") or {}
    if not isinstance(items, list) or not isinstance(scores, dict):
        logger.warning("Gemini response JSON has unexpected shape")
        return None

    return [
        RawPrediction(label=item, confidence=_as_float(scores.get(item)))
        for item in items
        if isinstance(item, str) and item.strip()
    ]


class GeminiClassifier(VisionClassifier):
    """Gemini vision backend. The sync client runs in a worker thread."""

    name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.api_key = api_key or config.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini vision provider")
        self.model = model or config.IMAGE_DETECTION_MODEL
        self.timeout_seconds = timeout_seconds or config.VISION_TIMEOUT_SECONDS
        self._client = genai.Client(api_key=self.api_key)

    async def classify(self, image_bytes: bytes, mode: ScanMode) -> List[RawPrediction]:
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    self._client.models.generate_content,
                    model=self.model,
                    contents=[
                        GEMINI_PROMPTS[mode],
                        types.Part.from_bytes(data=image_bytes, mime_type=image_mime_type(image_bytes)),
                    ],
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise DetectionFailed(f"Gemini timed out after {self.timeout_seconds}s") from e
        except Exception as e:
            raise DetectionFailed(f"Gemini vision API call failed: {e}") from e

        predictions = parse_gemini_response(response.text or "")
        if predictions is None:
            raise DetectionFailed("Gemini returned an unreadable reply")

        logger.info(f"Gemini {mode.value} scan returned {len(predictions)} prediction(s)")
        return predictions


def create_classifier(provider: Optional[str] = None) -> VisionClassifier:
    """Build the classifier selected by VISION_PROVIDER."""
    provider = (provider or config.VISION_PROVIDER).lower()
    if provider == "gemini":
        return GeminiClassifier()
    if provider == "roboflow":
        return RoboflowClassifier()
    raise ValueError(f"Unknown vision provider: {provider}")
