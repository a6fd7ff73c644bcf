"""
Pronunciation and allergen enrichment.

Both lookups are keyed by dish name and always return a total mapping over
the requested names: a failed call or unparsable reply falls back to the
name itself (pronunciation) or an empty string (allergens).
"""

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from dishlingo.gpt_vision import InferenceError, InferenceGateway
from dishlingo.prompts import build_allergen_prompt, build_pronunciation_prompt
from dishlingo.utils import Unparsable, parse_json

from .dish_schema import DishRecord, OnFailure

logger = logging.getLogger(__name__)

ON_FAILURE = OnFailure.EMPTY_MAP


def unique_names(names: Iterable[str]) -> List[str]:
    """Deduplicate names, keeping first-seen order and dropping empty ones."""
    seen = {}
    for name in names:
        if isinstance(name, str) and name and name not in seen:
            seen[name] = None
    return list(seen)


def unique_items(items: Iterable[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Trim (name, description) pairs and keep the first description per name."""
    seen: Dict[str, str] = {}
    for name, description in items:
        name = str(name or "").strip()
        if name and name not in seen:
            seen[name] = str(description or "").strip()
    return list(seen.items())


def _clean_value(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class DishEnricher:
    def __init__(self, gateway: InferenceGateway):
        self.gateway = gateway

    async def _request_map(self, label: str, prompt: str, max_tokens: int) -> Dict[str, Any]:
        try:
            text = await self.gateway.complete(prompt, max_tokens=max_tokens, temperature=0.2)
        except InferenceError as e:
            logger.error("[ENRICH] %s request failed, policy=%s: %s", label, ON_FAILURE.value, e)
            return {}

        result = parse_json(text, dict)
        if isinstance(result, Unparsable):
            logger.warning(
                "[ENRICH] %s response unparsable (%s), policy=%s",
                label,
                result.reason,
                ON_FAILURE.value,
            )
            return {}
        return result.value

    async def pronunciations(self, names: Sequence[str]) -> Dict[str, str]:
        names = unique_names(names)
        if not names:
            return {}
        raw = await self._request_map(
            "Pronunciation", build_pronunciation_prompt(names), max_tokens=600
        )
        return fill_pronunciations(names, raw)

    async def allergens(self, items: Sequence[Tuple[str, str]]) -> Dict[str, str]:
        items = unique_items(items)
        if not items:
            return {}
        raw = await self._request_map("Allergen", build_allergen_prompt(items), max_tokens=700)
        return fill_allergens([name for name, _ in items], raw)

    async def enrich(self, dishes: Sequence[DishRecord]) -> List[DishRecord]:
        """
        Return the same dishes in the same order with pronunciation and
        allergens filled in. Both lookups run concurrently and are joined
        before merging; one failing never cancels the other.
        """
        start = time.time()
        names = unique_names(d.original_name for d in dishes)
        items = [(d.original_name, d.simple_description) for d in dishes]

        pronunciation_task = asyncio.create_task(self.pronunciations(names))
        allergen_task = asyncio.create_task(self.allergens(items))
        await asyncio.wait([pronunciation_task, allergen_task])

        pronunciations = _task_result("Pronunciation", pronunciation_task)
        allergens = _task_result("Allergen", allergen_task)

        enriched = [
            dish.enriched(
                pronunciation=pronunciations.get(dish.original_name) or dish.original_name,
                allergens=allergens.get(dish.original_name) or "",
            )
            for dish in dishes
        ]
        logger.info(
            "[ENRICH] Enriched %s dishes (%s unique names) in %sms",
            len(enriched),
            len(names),
            round((time.time() - start) * 1000, 2),
        )
        return enriched


def fill_pronunciations(names: Sequence[str], raw: Dict[str, Any]) -> Dict[str, str]:
    return {name: _clean_value(raw.get(name)) or name for name in names}


def fill_allergens(names: Sequence[str], raw: Dict[str, Any]) -> Dict[str, str]:
    return {name: _clean_value(raw.get(name)) for name in names}


def _task_result(label: str, task: "asyncio.Task[Dict[str, str]]") -> Dict[str, str]:
    exc = task.exception()
    if exc is not None:
        logger.error(
            "[ENRICH] %s lookup crashed, policy=%s: %r", label, ON_FAILURE.value, exc
        )
        return {}
    return task.result()
