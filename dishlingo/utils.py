"""Normalization of raw model text into structured values."""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

_LEADING_FENCE = re.compile(r"^```[a-zA-Z]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unparsable:
    raw_text: str
    reason: str


ParseResult = Union[Parsed[Any], Unparsable]


def strip_code_fences(text: str) -> str:
    """
    Remove a leading ```json / ``` marker and a trailing ``` marker.
    Text without a leading fence is returned stripped but otherwise untouched.
    """
    text = (text or "").strip()
    if not text.startswith("```"):
        return text
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text).strip()


def parse_json(text: str, expected: type) -> ParseResult:
    """
    Strip fences and parse `text` as JSON of the `expected` top-level type
    (list or dict). Never raises: malformed output comes back as Unparsable.
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        return Unparsable(raw_text=text or "", reason="Empty model output")

    try:
        value = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return Unparsable(raw_text=cleaned, reason=f"Invalid JSON: {e}")

    if not isinstance(value, expected):
        return Unparsable(
            raw_text=cleaned,
            reason=f"Expected {expected.__name__}, got {type(value).__name__}",
        )
    return Parsed(value)
