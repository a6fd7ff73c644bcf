"""
Dish records, failure policies and per-image results for the menu pipeline.

Nutrition is estimated on a three-step scale (High / Medium / Low) for
calories, sugar and unhealthy fat.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Level = Literal["High", "Medium", "Low"]

LEVELS = ("High", "Medium", "Low")

PLACEHOLDER_NAME = "Menu Item"
PLACEHOLDER_DESCRIPTION = "Unable to extract dish details from this image section"


class OnFailure(str, Enum):
    """What a call site does when its inference call fails or returns junk."""

    ASSUME_TRUE = "assume_true"  # validation: treat the batch as menus
    SKIP_ITEM = "skip_item"  # extraction transport error: image contributes nothing
    PLACEHOLDER = "placeholder"  # extraction parse error: one placeholder dish
    EMPTY_MAP = "empty_map"  # enrichment: every key gets its fallback value


class Nutrition(BaseModel):
    model_config = ConfigDict(frozen=True)

    calories: Level = "Medium"
    sugar: Level = "Low"
    unhealthy_fat: Level = "Medium"

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Nutrition":
        """Build from model output, matching levels case-insensitively."""
        values = {}
        for key in ("calories", "sugar", "unhealthy_fat"):
            level = _normalize_level(raw.get(key))
            if level is not None:
                values[key] = level
        return cls(**values)


def _normalize_level(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    candidate = value.strip().capitalize()
    return candidate if candidate in LEVELS else None


class DishRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_name: str = Field(min_length=1)
    simple_description: str = Field(min_length=1)
    nutrition: Nutrition
    page: int = Field(ge=1)
    pronunciation: str = ""
    allergens: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_pronunciation(cls, data: Any) -> Any:
        # pronunciation defaults to the name until enrichment supplies one
        if isinstance(data, dict) and not data.get("pronunciation"):
            data = {**data, "pronunciation": data.get("original_name", "")}
        return data

    def enriched(self, pronunciation: str, allergens: str) -> "DishRecord":
        return self.model_copy(update={"pronunciation": pronunciation, "allergens": allergens})


def placeholder_dish(page: int) -> DishRecord:
    return DishRecord(
        original_name=PLACEHOLDER_NAME,
        simple_description=PLACEHOLDER_DESCRIPTION,
        nutrition=Nutrition(calories="Medium", sugar="Low", unhealthy_fat="Medium"),
        page=page,
    )


@dataclass(frozen=True)
class ExtractedPage:
    page: int
    dishes: List[DishRecord]
    policy: Optional[OnFailure] = None


@dataclass(frozen=True)
class SkippedImage:
    page: int
    reason: str
    policy: OnFailure = OnFailure.SKIP_ITEM


PageResult = Union[ExtractedPage, SkippedImage]


@dataclass
class PipelineReport:
    """Outcome of one pipeline run: dishes in discovery order plus skipped pages."""

    dishes: List[DishRecord] = field(default_factory=list)
    skipped: List[SkippedImage] = field(default_factory=list)
    enriched: bool = False
    timings_ms: Dict[str, float] = field(default_factory=dict)


# -----------------------------------
# HTTP request / response bodies
# -----------------------------------


# Request bodies come from a browser UI and are coerced rather than rejected:
# a non-list collection is treated as empty.


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return value if isinstance(value, str) else str(value)


class AnalyzeMenuRequest(BaseModel):
    images: List[str] = Field(default_factory=list)
    skip_enrichment: bool = False

    @field_validator("images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> List[str]:
        return [image for image in _as_list(value) if isinstance(image, str)]

    @field_validator("skip_enrichment", mode="before")
    @classmethod
    def _skip_enrichment(cls, value: Any) -> bool:
        return value is True or value == "true"


class AnalyzeMenuResponse(BaseModel):
    dishes: List[DishRecord]


class PronunciationsRequest(BaseModel):
    names: List[str] = Field(default_factory=list)

    @field_validator("names", mode="before")
    @classmethod
    def _names(cls, value: Any) -> List[str]:
        return [_as_text(name) for name in _as_list(value)]


class PronunciationsResponse(BaseModel):
    pronunciations: Dict[str, str]


class AllergenItem(BaseModel):
    name: str = ""
    description: str = ""

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value).strip()


class AllergensRequest(BaseModel):
    items: List[AllergenItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, value: Any) -> list:
        return [item if isinstance(item, dict) else {} for item in _as_list(value)]


class AllergensResponse(BaseModel):
    allergens: Dict[str, str]
