"""Domain models for journal entries extracted from speech."""

import math
import re
from dataclasses import dataclass
from typing import Annotated

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)

_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")

# Largest value an INTEGER column holds in SQLite.
MAX_CALORIES = 2**63 - 1


def _coerce_calories(value: object) -> object:
    """Turn loosely typed model output into a non-negative integer."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if match is None:
            return 0
        text = match.group().replace(",", ".")
        value = float(text) if "." in text else int(text)
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("calories are out of range")
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(round(value), 0)
    return value


Calories = Annotated[
    int, BeforeValidator(_coerce_calories), Field(ge=0, le=MAX_CALORIES)
]


class Nutrition(BaseModel):
    """Free-text macronutrient estimates for a food."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    protein: str | None = None
    carbs: str | None = None
    fat: str | None = None
    fiber: str | None = None


class FoodItem(BaseModel):
    """Single food mentioned in an utterance."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str = Field(min_length=1)
    quantity: str | None = None
    calories: Calories = 0
    nutrition: Nutrition = Field(default_factory=Nutrition)

    @model_validator(mode="before")
    @classmethod
    def _default_nutrition(cls, data: object) -> object:
        if isinstance(data, dict) and data.get("nutrition") is None:
            return {**data, "nutrition": {}}
        return data


class ExerciseItem(BaseModel):
    """Single exercise mentioned in an utterance."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    type: str = Field(min_length=1)
    duration: str | None = None
    intensity: str | None = None
    calories_burned: Calories = Field(
        default=0,
        validation_alias=AliasChoices("calories_burned", "caloriesBurned"),
    )


class NutritionRecord(BaseModel):
    """Result of one ingestion cycle.

    A record is either fully parsed or a fallback; the fallback variant keeps
    the unparsed model output and the parse error instead of any items.
    """

    model_config = ConfigDict(frozen=True)

    foods: list[FoodItem] = Field(default_factory=list)
    exercises: list[ExerciseItem] = Field(default_factory=list)
    timestamp: str
    raw_text: str
    id: int | str | None = None
    persisted: bool = False
    raw_model_output: str | None = None
    parse_error: str | None = None

    @model_validator(mode="after")
    def _check_variant(self) -> "NutritionRecord":
        if self.parse_error is not None and (self.foods or self.exercises):
            raise ValueError("fallback records cannot carry foods or exercises")
        return self

    @property
    def is_fallback(self) -> bool:
        """Whether the model output could not be parsed."""
        return self.parse_error is not None

    @classmethod
    def fallback(
        cls,
        *,
        raw_text: str,
        timestamp: str,
        raw_model_output: str,
        parse_error: str,
    ) -> "NutritionRecord":
        """Build the fallback variant for unparseable model output."""
        return cls(
            foods=[],
            exercises=[],
            timestamp=timestamp,
            raw_text=raw_text,
            raw_model_output=raw_model_output,
            parse_error=parse_error,
        )


class JournalEntry(BaseModel):
    """A record read back from the journal store."""

    id: int | str
    timestamp: str
    raw_text: str | None = None
    created_at: str | None = None
    foods: list[FoodItem] = Field(default_factory=list)
    exercises: list[ExerciseItem] = Field(default_factory=list)


@dataclass(frozen=True)
class JournalStats:
    """Totals across every stored entry."""

    total_entries: int
    total_foods: int
    total_exercises: int
    total_calories_consumed: int
    total_calories_burned: int
