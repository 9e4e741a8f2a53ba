"""Turns raw vision predictions into canonical DetectedItems.

Per scan mode:
1. Drop predictions at or below the mode's confidence floor (or without a
   finite confidence)
2. Map the class label to a canonical name and category
3. Round confidence to 2 decimals, keep the best-scoring duplicate
4. Sort by confidence descending and cap the list length

Predictions that still fail DetectedItem validation (an over-long label, a
malformed bounding box) are skipped rather than failing the whole scan.

| mode       | floor | cap |
|------------|-------|-----|
| food       | 0.1   | 5   |
| ingredient | 0.05  | 10  |
"""

import math
from typing import Dict, List, Optional

from pydantic import ValidationError

from src.models.models import DetectedItem, ScanMode, ScanOutcome
from src.matching.text import normalize_name
from src.utils.config import config
from src.utils.errors import DetectionFailed
from src.utils.logger import logger
from src.vision.classifier import RawPrediction, VisionClassifier, create_classifier
from src.vision.images import prepare_image
from src.vision.labels import canonical_name, categorize

NOTHING_DETECTED_MESSAGE = "No items detected. Try a clearer photo with better lighting."
DETECTION_FAILED_MESSAGE = "Image analysis is temporarily unavailable. Please try again."


class DetectionNormalizer:
    """Runs a vision classifier and normalizes what it reports."""

    def __init__(self, classifier: Optional[VisionClassifier] = None) -> None:
        self.classifier = classifier or create_classifier()
        self.floors = {
            ScanMode.FOOD: config.FOOD_CONFIDENCE_FLOOR,
            ScanMode.INGREDIENT: config.INGREDIENT_CONFIDENCE_FLOOR,
        }
        self.caps = {
            ScanMode.FOOD: config.FOOD_MAX_ITEMS,
            ScanMode.INGREDIENT: config.INGREDIENT_MAX_ITEMS,
        }

    def normalize(self, predictions: List[RawPrediction], mode: ScanMode) -> List[DetectedItem]:
        floor = self.floors[mode]
        best: Dict[str, DetectedItem] = {}

        for prediction in predictions:
            if not math.isfinite(prediction.confidence) or prediction.confidence <= floor:
                continue
            name = canonical_name(prediction.label, mode)
            if not name:
                continue
            try:
                item = DetectedItem(
                    name=name,
                    confidence=round(min(max(prediction.confidence, 0.0), 1.0), 2),
                    category=categorize(prediction.label, mode),
                    bounding_box=prediction.bounding_box,
                )
            except ValidationError as e:
                logger.warning(f"Skipping unusable {mode.value} prediction: {e.error_count()} validation error(s)")
                continue
            key = normalize_name(name)
            if key not in best or item.confidence > best[key].confidence:
                best[key] = item

        items = sorted(best.values(), key=lambda i: i.confidence, reverse=True)[: self.caps[mode]]
        logger.debug(f"Normalized {len(predictions)} {mode.value} prediction(s) into {len(items)} item(s)")
        return items

    async def classify(self, image_bytes: bytes, mode: ScanMode) -> List[DetectedItem]:
        """Classify an image into a canonical item list.

        Raises:
            ImageValidationError: If the image is empty, not JPEG/PNG, or too large.
            DetectionFailed: If the vision backend was unreachable or unreadable.
        """
        mode = ScanMode(mode)
        image_bytes = prepare_image(image_bytes)
        predictions = await self.classifier.classify(image_bytes, mode)
        return self.normalize(predictions, mode)

    async def detect(self, image_bytes: bytes, mode: ScanMode) -> ScanOutcome:
        """Classify an image, reporting a failed vision call as an empty, retryable outcome.

        Raises:
            ImageValidationError: If the image itself is unusable.
        """
        mode = ScanMode(mode)
        try:
            items = await self.classify(image_bytes, mode)
        except DetectionFailed as e:
            logger.warning(f"Detection failed for {mode.value} scan: {e}", extra={"scan_mode": mode.value})
            return ScanOutcome(mode=mode, retryable=True, message=DETECTION_FAILED_MESSAGE)

        if not items:
            logger.info(f"No items detected in {mode.value} scan", extra={"scan_mode": mode.value})
            return ScanOutcome(mode=mode, message=NOTHING_DETECTED_MESSAGE)

        overall = round(sum(i.confidence for i in items) / len(items), 2)
        logger.info(
            f"Detected {len(items)} item(s) in {mode.value} scan (overall confidence {overall})",
            extra={"scan_mode": mode.value},
        )
        return ScanOutcome(mode=mode, items=items, detected=True, overall_confidence=overall)
