# -*- coding: utf-8 -*-
"""Estimate — turn a completion reply into a validated nutrition estimate.

The model is told to answer with strict JSON, but replies still arrive wrapped
in markdown fences or as free text. The strict path is tried first; when the
reply is not the expected shape, the first ``<int>, <decimal>`` pair found in
the raw reply is taken as the totals and the breakdown is left empty.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class NormalizationError(Enum):
    """Terminal failures of normalization (none are retried here)."""
    EMPTY_RESPONSE = "EmptyResponse"
    INVALID_CALORIE_VALUE = "InvalidCalorieValue"
    INVALID_PROTEIN_VALUE = "InvalidProteinValue"
    UNPARSEABLE_RESPONSE = "UnparseableResponse"

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    NormalizationError.EMPTY_RESPONSE: "No response from AI",
    NormalizationError.INVALID_CALORIE_VALUE: "Invalid calorie value received",
    NormalizationError.INVALID_PROTEIN_VALUE: "Invalid protein value received",
    NormalizationError.UNPARSEABLE_RESPONSE: "Invalid response format from AI",
}


@dataclass(frozen=True)
class NutritionEstimate:
    calories: int
    protein: float
    # Items exactly as the model returned them.
    breakdown: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class NormalizationResult:
    estimate: Optional[NutritionEstimate] = None
    error: Optional[NormalizationError] = None

    @property
    def ok(self) -> bool:
        return self.estimate is not None

    @classmethod
    def success(cls, calories: int, protein: float, breakdown: List[Any]) -> "NormalizationResult":
        return cls(estimate=NutritionEstimate(calories=calories, protein=protein, breakdown=breakdown))

    @classmethod
    def failure(cls, error: NormalizationError) -> "NormalizationResult":
        return cls(error=error)


_JSON_FENCE_RE = re.compile(r"```json\n?")
_FENCE_RE = re.compile(r"```\n?")
# First "<int><comma/whitespace run><decimal>" pair in the raw reply.
_TOTALS_FALLBACK_RE = re.compile(r"([0-9]+)[,\s]+([0-9]+\.?[0-9]*)")

_INT_PREFIX_RE = re.compile(r"\s*([+-]?[0-9]+)")
_FLOAT_PREFIX_RE = re.compile(
    r"\s*([+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))"
)


def strip_code_fences(text: str) -> str:
    cleaned = text
    if "```json" in cleaned:
        cleaned = _JSON_FENCE_RE.sub("", cleaned)
        cleaned = _FENCE_RE.sub("", cleaned)
    elif "```" in cleaned:
        cleaned = _FENCE_RE.sub("", cleaned)
    return cleaned.strip()


def _number_text(value: Any) -> Optional[str]:
    """Textual form of a JSON scalar for prefix parsing; None when it has no numeric reading."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return repr(value)
    if isinstance(value, str):
        return value
    return None


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse: 300.7 -> 300, "450 kcal" -> 450, "abc" -> None."""
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    text = _number_text(value)
    if text is None:
        return None
    m = _INT_PREFIX_RE.match(text)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # Beyond the interpreter's int digit limit.
        return None


def parse_float(value: Any) -> Optional[float]:
    """Leading-decimal parse: "20.5g" -> 20.5, "x" -> None."""
    text = _number_text(value)
    if text is None:
        return None
    m = _FLOAT_PREFIX_RE.match(text)
    if not m:
        return None
    return float(m.group(1).replace("Infinity", "inf"))


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {token}")


def _load_strict(text: str) -> Optional[dict]:
    """Parse ``{"items": [...], "total": {...}}``; None when the text is not that shape."""
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    if not isinstance(parsed.get("items"), list):
        return None
    if _is_missing_total(parsed.get("total")):
        return None
    return parsed


def _is_missing_total(total: Any) -> bool:
    """Absent, null, false, zero or "" total; an empty object or array still counts as present."""
    if total is None or isinstance(total, bool):
        return not total
    if isinstance(total, (int, float)):
        return total == 0
    if isinstance(total, str):
        return total == ""
    return False


def _validate_totals(total: Any, items: List[Any]) -> NormalizationResult:
    if isinstance(total, dict):
        raw_calories = total.get("calories")
        raw_protein = total.get("protein")
    else:
        raw_calories = raw_protein = None

    calories = parse_int(raw_calories)
    if not calories or calories <= 0:
        return NormalizationResult.failure(NormalizationError.INVALID_CALORIE_VALUE)

    protein = parse_float(raw_protein)
    # Zero protein is rejected on this path along with missing/negative values.
    if not protein or not math.isfinite(protein) or protein < 0:
        return NormalizationResult.failure(NormalizationError.INVALID_PROTEIN_VALUE)

    return NormalizationResult.success(calories, protein, items)


def _extract_totals_fallback(raw: str) -> NormalizationResult:
    m = _TOTALS_FALLBACK_RE.search(raw)
    if not m:
        logger.warning("estimate reply has no recognizable totals (%d chars)", len(raw))
        return NormalizationResult.failure(NormalizationError.UNPARSEABLE_RESPONSE)

    calories = parse_int(m.group(1)) or 0
    protein = float(m.group(2))
    if calories > 0 and math.isfinite(protein) and protein >= 0:
        logger.debug("estimate reply was not strict JSON; recovered totals only")
        return NormalizationResult.success(calories, protein, [])

    logger.warning("estimate fallback totals out of range: calories=%s protein=%s", calories, protein)
    return NormalizationResult.failure(NormalizationError.UNPARSEABLE_RESPONSE)


def normalize_meal_estimate(raw: Optional[str]) -> NormalizationResult:
    """Normalize the raw completion text into a NutritionEstimate or a NormalizationError."""
    text = (raw or "").strip()
    if not text:
        return NormalizationResult.failure(NormalizationError.EMPTY_RESPONSE)

    parsed = _load_strict(strip_code_fences(text))
    if parsed is not None:
        return _validate_totals(parsed["total"], parsed["items"])

    # Scan the reply as received, fences included.
    return _extract_totals_fallback(text)
