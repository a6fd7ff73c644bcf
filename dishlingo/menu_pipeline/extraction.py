import logging
import time
from typing import Any, List, Optional

from pydantic import ValidationError

from dishlingo.gpt_vision import InferenceError, InferenceGateway
from dishlingo.prompts import EXTRACTION_PROMPT
from dishlingo.utils import Unparsable, parse_json

from .dish_schema import (
    DishRecord,
    ExtractedPage,
    Nutrition,
    OnFailure,
    PageResult,
    SkippedImage,
    placeholder_dish,
)

logger = logging.getLogger(__name__)


def _non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def dish_from_raw(item: Any, page: int) -> Optional[DishRecord]:
    """
    Turn one element of the model's array into a DishRecord tagged with `page`.
    Elements without a name, a description or a nutrition object are dropped.
    """
    if not isinstance(item, dict):
        return None
    name = item.get("original_name")
    description = item.get("simple_description")
    nutrition = item.get("nutrition")
    if not (_non_empty_text(name) and _non_empty_text(description)):
        return None
    if not isinstance(nutrition, dict):
        return None

    try:
        return DishRecord(
            original_name=name.strip(),
            simple_description=description.strip(),
            nutrition=Nutrition.from_raw(nutrition),
            page=page,
        )
    except ValidationError as e:
        logger.warning("[EXTRACT] Dropping invalid dish on page %s: %s", page, e)
        return None


class DishExtractor:
    """Asks the model for the dish list of a single menu page."""

    def __init__(self, gateway: InferenceGateway):
        self.gateway = gateway

    async def extract(self, image: str, page: int) -> ExtractedPage:
        """
        Extract dishes from one image.

        Raises InferenceError when the call itself fails. Malformed output
        never raises: it degrades to a single placeholder dish.
        """
        text = await self.gateway.complete(
            EXTRACTION_PROMPT, image, max_tokens=2000, temperature=0.1
        )

        result = parse_json(text, list)
        if isinstance(result, Unparsable):
            logger.error(
                "[EXTRACT] Failed to parse page %s response (%s), policy=%s. Raw response: %s",
                page,
                result.reason,
                OnFailure.PLACEHOLDER.value,
                result.raw_text,
            )
            return ExtractedPage(
                page=page,
                dishes=[placeholder_dish(page)],
                policy=OnFailure.PLACEHOLDER,
            )

        dishes: List[DishRecord] = []
        for item in result.value:
            dish = dish_from_raw(item, page)
            if dish is not None:
                dishes.append(dish)

        dropped = len(result.value) - len(dishes)
        if dropped:
            logger.info("[EXTRACT] Page %s: dropped %s incomplete entries", page, dropped)
        return ExtractedPage(page=page, dishes=dishes)

    async def extract_page(self, image: str, page: int) -> PageResult:
        """Like `extract`, but a failed call becomes a SkippedImage result."""
        start = time.time()
        try:
            extracted = await self.extract(image, page)
        except InferenceError as e:
            logger.error(
                "[EXTRACT] Error processing image %s, policy=%s: %s",
                page,
                OnFailure.SKIP_ITEM.value,
                e,
            )
            return SkippedImage(page=page, reason=str(e))

        logger.info(
            "[EXTRACT] Found %s dishes in image %s in %sms",
            len(extracted.dishes),
            page,
            round((time.time() - start) * 1000, 2),
        )
        return extracted
