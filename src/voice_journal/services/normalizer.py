"""Normalization of raw model output into nutrition records."""

import json
import logging
import re

from pydantic import ValidationError

from voice_journal.domain.journal import NutritionRecord

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

_logger = logging.getLogger(__name__)


def strip_code_fences(raw_output: str) -> str:
    """Remove Markdown code fences and surrounding whitespace."""
    return _FENCE_RE.sub("", raw_output).strip()


def normalize(raw_output: str, raw_text: str, timestamp: str) -> NutritionRecord:
    """Parse model output into a record, falling back on any parse failure.

    The returned record is either fully parsed or the fallback variant that
    keeps the unparsed model output; this function never raises.
    """
    cleaned = strip_code_fences(raw_output)
    try:
        payload = json.loads(cleaned)
        if not isinstance(payload, dict):
            raise ValueError(
                f"expected a JSON object, got {type(payload).__name__}"
            )
        foods = payload.get("foods")
        exercises = payload.get("exercises")
        return NutritionRecord.model_validate(
            {
                "foods": foods if isinstance(foods, list) else [],
                "exercises": exercises if isinstance(exercises, list) else [],
                "timestamp": timestamp,
                "raw_text": raw_text,
            }
        )
    except (ValueError, ArithmeticError, RecursionError) as exc:
        _logger.warning("Could not parse model output as a record: %s", exc)
        return NutritionRecord.fallback(
            raw_text=raw_text,
            timestamp=timestamp,
            raw_model_output=raw_output,
            parse_error=_describe(exc),
        )


def _describe(exc: Exception) -> str:
    """Short, single-line description of a parse error."""
    if isinstance(exc, ValidationError):
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        return f"invalid record: {location}: {error['msg']}"
    if isinstance(exc, json.JSONDecodeError):
        return f"invalid JSON: {exc.msg} (line {exc.lineno}, column {exc.colno})"
    first_line = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
    return f"invalid record: {first_line}"
